"""Recovers the fenced JSON judgment block the model appends to its
prose answer.

A missing or malformed block means "no metadata". Each field is
validated on its own.
"""

import json
import logging
import re

from laundry_rag.models import ResponseMetadata, RiskLevel

logger = logging.getLogger(__name__)

_JSON_BLOCK = re.compile(r"```json\s*(.*?)\s*```", re.DOTALL | re.IGNORECASE)

# "45%", "30~40%", "30-40%", "30%~40%"
_SUCCESS_RATE = re.compile(r"^\s*(\d{1,3})\s*%?\s*(?:[~\-]\s*(\d{1,3})\s*)?%\s*$")


def parse_success_rate(value: str | None) -> int | None:
    """Return the leading percentage of a success-rate string.

    Only ``NN%``, ``NN~MM%``, ``NN-MM%`` and ``NN%~MM%`` are accepted,
    with each number in 0..100 and a range not decreasing. Anything
    else returns None.
    """
    if not isinstance(value, str):
        return None
    match = _SUCCESS_RATE.match(value)
    if not match:
        return None
    low = int(match.group(1))
    high = int(match.group(2)) if match.group(2) is not None else low
    if low > 100 or high > 100 or high < low:
        return None
    return low


def _parse_risk_level(value: object) -> RiskLevel | None:
    if not isinstance(value, str):
        return None
    try:
        return RiskLevel(value.strip().lower())
    except ValueError:
        return None


def extract_metadata(raw_text: str) -> tuple[ResponseMetadata, str]:
    """Split a model answer into judgment metadata and clean prose.

    Args:
        raw_text: The model's raw answer.

    Returns:
        ``(metadata, clean_text)``. When no block is found, or the block
        is not a JSON object, metadata is empty and ``clean_text`` is
        ``raw_text`` unchanged. Otherwise the block is removed and the
        remaining text stripped.
    """
    match = _JSON_BLOCK.search(raw_text)
    if not match:
        return ResponseMetadata(), raw_text

    try:
        data = json.loads(match.group(1))
    except json.JSONDecodeError as exc:
        logger.info("Ignoring malformed metadata block: %s", exc)
        return ResponseMetadata(), raw_text
    if not isinstance(data, dict):
        logger.info("Ignoring metadata block that is not an object.")
        return ResponseMetadata(), raw_text

    success_rate = data.get("success_rate")
    recommend = data.get("recommend_shop")
    metadata = ResponseMetadata(
        success_rate=success_rate if isinstance(success_rate, str) else None,
        risk_level=_parse_risk_level(data.get("risk_level")),
        recommend_shop=recommend if isinstance(recommend, bool) else None,
    )
    clean_text = (raw_text[: match.start()] + raw_text[match.end() :]).strip()
    return metadata, clean_text
