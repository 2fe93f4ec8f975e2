"""Domain models for the laundry advice pipeline."""

from dataclasses import dataclass, field
from enum import Enum

DISCLAIMER = (
    "※ 이 조언은 참고용이며, 실제 결과는 다를 수 있습니다. "
    "귀중한 의류는 전문 세탁소에 맡기시는 것을 권장합니다."
)


@dataclass(frozen=True)
class Query:
    """A single user question plus an optional zipcode hint."""

    text: str
    zipcode: str | None = None


@dataclass(frozen=True)
class KnowledgeRecord:
    """A laundry knowledge entry returned by the similarity index."""

    id: str
    score: float
    metadata: dict = field(default_factory=dict)


@dataclass(frozen=True)
class PartnerShop:
    """A partner cleaner shop that can be recommended to the user."""

    shop_name: str
    zipcode: str
    subscription: str = "active"
    specialty: tuple[str, ...] = ()
    rating: float | None = None

    def to_dict(self) -> dict:
        data = {
            "shop_name": self.shop_name,
            "zipcode": self.zipcode,
            "subscription": self.subscription,
            "specialty": list(self.specialty),
        }
        if self.rating is not None:
            data["rating"] = self.rating
        return data


@dataclass(frozen=True)
class CompletionResult:
    """Raw text produced by the language model for one request."""

    text: str
    model: str = ""


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class ResponseMetadata:
    """Judgments the model embeds at the end of its answer.

    Every field is optional: ``None`` means the model did not say.
    """

    success_rate: str | None = None
    risk_level: RiskLevel | None = None
    recommend_shop: bool | None = None

    @property
    def is_empty(self) -> bool:
        return (
            self.success_rate is None
            and self.risk_level is None
            and self.recommend_shop is None
        )


@dataclass(frozen=True)
class ChatReply:
    """The final response of the pipeline."""

    answer: str
    metadata: ResponseMetadata = field(default_factory=ResponseMetadata)
    recommended_shops: list[PartnerShop] = field(default_factory=list)
    disclaimer: str = DISCLAIMER

    def to_dict(self) -> dict:
        """Serialize to the public JSON shape, omitting unknown judgments."""
        data: dict = {"answer": self.answer}
        if self.metadata.success_rate is not None:
            data["success_rate"] = self.metadata.success_rate
        if self.metadata.risk_level is not None:
            data["risk_level"] = self.metadata.risk_level.value
        data["recommended_shops"] = [shop.to_dict() for shop in self.recommended_shops]
        data["disclaimer"] = self.disclaimer
        return data
