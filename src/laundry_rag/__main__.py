"""Allow ``python -m laundry_rag``."""

from laundry_rag.cli import main

main()
