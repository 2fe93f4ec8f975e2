"""Partner shop recommendation policy.

A pure decision over the user's message and the model's metadata. Any
single signal is enough to recommend.
"""

import re

from laundry_rag.metadata import parse_success_rate
from laundry_rag.models import ResponseMetadata, RiskLevel

PREMIUM_MATERIALS: tuple[str, ...] = (
    "실크", "silk",
    "캐시미어", "cashmere",
    "가죽", "leather",
    "울", "wool",
    "린넨", "linen",
    "벨벳", "velvet",
    "스웨이드", "suede",
    "모피", "fur",
)

SHOP_REQUEST_PHRASES: tuple[str, ...] = (
    "맡기",
    "맡길",
    "세탁소",
    "전문",
    "의뢰",
    "드라이클리닝",
    "드라이 클리닝",
    "dry cleaning",
    "professional",
)

SUCCESS_RATE_THRESHOLD = 60

# Latin terms must stand alone (optionally plural): "fur" is not "further".
_LATIN_MATERIALS = re.compile(
    r"(?<![a-z])(?:"
    + "|".join(m for m in PREMIUM_MATERIALS if m.isascii())
    + r")s?(?![a-z])"
)
_HANGUL_MATERIALS = tuple(m for m in PREMIUM_MATERIALS if not m.isascii())

# Common words that contain "울" without meaning wool.
_NOT_WOOL = ("서울", "겨울", "거울", "울산")


def mentions_premium_material(message: str) -> bool:
    lower = message.lower()
    if _LATIN_MATERIALS.search(lower):
        return True
    for word in _NOT_WOOL:
        lower = lower.replace(word, " ")
    return any(material in lower for material in _HANGUL_MATERIALS)


def requests_shop(message: str) -> bool:
    lower = message.lower()
    return any(phrase in lower for phrase in SHOP_REQUEST_PHRASES)


def recommendation_reasons(message: str, metadata: ResponseMetadata) -> list[str]:
    """Return every reason that triggers a recommendation, in precedence order.

    Reasons: ``model``, ``premium_material``, ``shop_request``,
    ``low_success_rate``, ``high_risk``.
    """
    reasons = []
    if metadata.recommend_shop is True:
        reasons.append("model")
    if mentions_premium_material(message):
        reasons.append("premium_material")
    if requests_shop(message):
        reasons.append("shop_request")
    rate = parse_success_rate(metadata.success_rate)
    if rate is not None and rate < SUCCESS_RATE_THRESHOLD:
        reasons.append("low_success_rate")
    if metadata.risk_level is RiskLevel.HIGH:
        reasons.append("high_risk")
    return reasons


def should_recommend(message: str, metadata: ResponseMetadata | None = None) -> bool:
    """Decide whether partner shops should accompany the answer."""
    return bool(recommendation_reasons(message, metadata or ResponseMetadata()))
