"""CLI interface for the laundry advice pipeline."""

import argparse
import logging
import sys

from laundry_rag import pipeline
from laundry_rag import vector_store as vs
from laundry_rag.config import AppConfig
from laundry_rag.embeddings import embed_many
from laundry_rag.errors import CompletionError
from laundry_rag.loader import (
    knowledge_rows,
    load_knowledge,
    load_partners,
    partner_rows,
)
from laundry_rag.models import ChatReply


def _setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _index(client, name: str, rows, config: AppConfig) -> int:
    embeddings = embed_many(rows.texts, config.embedding)
    collection = vs.reset_collection(client, name)
    return vs.upsert_records(
        collection,
        rows.ids,
        embeddings,
        rows.documents,
        rows.metadatas,
        config.vector_store.batch_size,
    )


def ingest(
    knowledge_path: str | None = None,
    partners_path: str | None = None,
    config: AppConfig | None = None,
) -> None:
    """Load seed files and rebuild the knowledge and partner indices.

    Each given file replaces the whole corresponding collection.

    Args:
        knowledge_path: JSON array of knowledge entries, or None to skip.
        partners_path: JSON array of partner shops, or None to skip.
        config: Application configuration. Uses defaults if not provided.
    """
    cfg = config or AppConfig()

    if not knowledge_path and not partners_path:
        print("Nothing to ingest. Pass --knowledge and/or --partners.")
        return

    client = vs.get_client(cfg.vector_store)

    if knowledge_path:
        print(f"\n📚 Loading knowledge from: {knowledge_path}")
        entries = load_knowledge(knowledge_path)
        added = _index(client, cfg.vector_store.knowledge_collection, knowledge_rows(entries), cfg)
        print(f"  Stored {added} knowledge records")

    if partners_path:
        print(f"\n🏪 Loading partner shops from: {partners_path}")
        shops = load_partners(partners_path)
        added = _index(client, cfg.vector_store.partner_collection, partner_rows(shops), cfg)
        print(f"  Stored {added} partner shops")

    print("\n✅ Ingestion complete!")


def _print_reply(reply: ChatReply) -> None:
    print(f"\nAssistant:\n{reply.answer}\n")
    if reply.metadata.success_rate:
        print(f"  성공률: {reply.metadata.success_rate}")
    if reply.metadata.risk_level:
        print(f"  위험도: {reply.metadata.risk_level.value}")
    for shop in reply.recommended_shops:
        specialty = ", ".join(shop.specialty)
        rating = f" ★{shop.rating:.1f}" if shop.rating is not None else ""
        print(f"  🏪 {shop.shop_name} ({shop.zipcode}){rating} {specialty}")
    print(f"\n{reply.disclaimer}\n")


def chat(zipcode: str | None = None, config: AppConfig | None = None) -> None:
    """Start an interactive chat session.

    Each question runs through the full pipeline. Completion errors are
    reported and the session continues. Exits on 'quit', 'exit', 'q',
    EOF, or KeyboardInterrupt.

    Args:
        zipcode: Optional zipcode for partner shop recommendations.
        config: Application configuration. Uses defaults if not provided.
    """
    cfg = config or AppConfig()

    client = vs.get_client(cfg.vector_store)
    knowledge = vs.get_or_create_collection(client, cfg.vector_store.knowledge_collection)
    partners = vs.get_or_create_collection(client, cfg.vector_store.partner_collection)

    if knowledge.count() == 0:
        print("No laundry knowledge indexed; answers will not use retrieved context.")
        print("  python -m laundry_rag ingest --knowledge ./data/knowledge.json")

    print(f"\n🧺 Laundry chat ({knowledge.count()} records, {partners.count()} shops)")
    print(f"🤖 Using model: {cfg.llm.model}")
    print("\nType your question (or 'quit' to exit):\n")

    while True:
        try:
            message = input("You: ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nGoodbye!")
            break

        if not message:
            continue
        if message.lower() in ("quit", "exit", "q"):
            print("Goodbye!")
            break
        if len(message) > cfg.chat.max_message_length:
            print(f"Message too long (max {cfg.chat.max_message_length} characters).")
            continue

        try:
            reply = pipeline.process_chat(
                message, zipcode, knowledge=knowledge, partners=partners, config=cfg
            )
        except CompletionError as exc:
            print(f"\n⚠️  {exc}\n")
            continue
        _print_reply(reply)


def serve(host: str = "127.0.0.1", port: int = 8000) -> None:
    """Run the web API with uvicorn."""
    import uvicorn

    uvicorn.run("laundry_rag.web:app", host=host, port=port)


def main() -> None:
    """CLI entry point — parse arguments and dispatch to a command."""
    parser = argparse.ArgumentParser(
        description="Laundry RAG — laundry advice with partner shop recommendations",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    ingest_p = subparsers.add_parser("ingest", help="Index seed data files")
    ingest_p.add_argument("--knowledge", type=str, help="Knowledge JSON file")
    ingest_p.add_argument("--partners", type=str, help="Partner shops JSON file")

    chat_p = subparsers.add_parser("chat", help="Start interactive chat")
    chat_p.add_argument("--zipcode", type=str, default=None, help="Your zipcode")

    serve_p = subparsers.add_parser("serve", help="Run the web API")
    serve_p.add_argument("--host", type=str, default="127.0.0.1")
    serve_p.add_argument("--port", type=int, default=8000)

    args = parser.parse_args()
    _setup_logging(args.verbose)

    if args.command == "ingest":
        ingest(args.knowledge, args.partners)
    elif args.command == "chat":
        chat(args.zipcode)
    elif args.command == "serve":
        serve(args.host, args.port)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
