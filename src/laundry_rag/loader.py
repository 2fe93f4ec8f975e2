"""Reads knowledge and partner shop records from JSON."""

import json
import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, TypeAdapter

logger = logging.getLogger(__name__)


class KnowledgeEntry(BaseModel):
    """One laundry knowledge record as written in the seed file."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    stain_type: str
    fabric: str
    success_rate: float = Field(ge=0, le=100)
    risk: Literal["low", "medium", "high"]
    content: str = Field(min_length=1)
    title: str | None = None


class PartnerEntry(BaseModel):
    """One partner shop as written in the seed file."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    shop_name: str = Field(min_length=1)
    zipcode: str
    subscription: Literal["active", "inactive"] = "active"
    specialty: list[str] = Field(default_factory=list)
    rating: float | None = Field(default=None, ge=0, le=5)


@dataclass(frozen=True)
class IndexRows:
    """Column-oriented rows ready for ``vector_store.upsert_records``.

    ``texts`` are what gets embedded; ``documents`` are what gets stored.
    """

    ids: list[str]
    texts: list[str]
    documents: list[str]
    metadatas: list[dict]


def _read_json_list(path: Path) -> list:
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON array")
    return data


def load_knowledge(path: str | Path) -> list[KnowledgeEntry]:
    """Load and validate knowledge entries from a JSON array file.

    Raises:
        ValueError: If the file is not a JSON array.
        pydantic.ValidationError: If an entry is invalid.
    """
    path = Path(path)
    entries = TypeAdapter(list[KnowledgeEntry]).validate_python(_read_json_list(path))
    logger.info("Loaded %d knowledge entries from %s", len(entries), path.name)
    return entries


def load_partners(path: str | Path) -> list[PartnerEntry]:
    """Load and validate partner shop entries from a JSON array file."""
    path = Path(path)
    entries = TypeAdapter(list[PartnerEntry]).validate_python(_read_json_list(path))
    logger.info("Loaded %d partner shops from %s", len(entries), path.name)
    return entries


def knowledge_rows(entries: list[KnowledgeEntry]) -> IndexRows:
    ids, texts, documents, metadatas = [], [], [], []
    for entry in entries:
        title = entry.title or f"{entry.fabric} {entry.stain_type}"
        ids.append(entry.id)
        texts.append(f"{title}\n{entry.content}")
        documents.append(entry.content)
        metadatas.append(
            {
                "title": title,
                "stain_type": entry.stain_type,
                "fabric": entry.fabric,
                "success_rate": entry.success_rate,
                "risk": entry.risk,
                "content": entry.content,
            }
        )
    return IndexRows(ids, texts, documents, metadatas)


def partner_rows(entries: list[PartnerEntry]) -> IndexRows:
    """Build index rows for partner shops.

    The index only stores scalar metadata, so ``specialty`` is joined
    with commas; ``rating`` is omitted when unknown.
    """
    ids, texts, documents, metadatas = [], [], [], []
    for entry in entries:
        description = f"{entry.shop_name}: {', '.join(entry.specialty)}"
        meta = {
            "shop_name": entry.shop_name,
            "zipcode": entry.zipcode,
            "subscription": entry.subscription,
            "specialty": ",".join(entry.specialty),
        }
        if entry.rating is not None:
            meta["rating"] = entry.rating
        ids.append(entry.id)
        texts.append(description)
        documents.append(description)
        metadatas.append(meta)
    return IndexRows(ids, texts, documents, metadatas)
