"""Retrievers — look up laundry knowledge and partner shops by similarity.

Both retrievers are fail-soft: an embedding outage or an index error
yields an empty list and a logged warning, never an exception.
"""

import logging

from laundry_rag import vector_store as vs
from laundry_rag.config import EmbeddingConfig
from laundry_rag.embeddings import embed
from laundry_rag.models import KnowledgeRecord, PartnerShop

logger = logging.getLogger(__name__)


def _first(results: dict, key: str) -> list:
    """Return the first (and only) query row of a ChromaDB result column."""
    rows = results.get(key) or [[]]
    return rows[0] or []


def _score(distance: float | None) -> float:
    """Convert a cosine distance to a similarity score in [0, 1]."""
    if distance is None:
        return 0.0
    return round(min(max(1 - distance, 0.0), 1.0), 4)


def _parse_knowledge(results: dict) -> list[KnowledgeRecord]:
    """Convert raw ChromaDB results into KnowledgeRecord objects.

    The stored document body is exposed as ``metadata["content"]`` when
    the metadata does not carry one already.
    """
    ids = _first(results, "ids")
    documents = _first(results, "documents")
    metadatas = _first(results, "metadatas")
    distances = _first(results, "distances")

    records: list[KnowledgeRecord] = []
    for i, record_id in enumerate(ids):
        meta = dict(metadatas[i] or {}) if i < len(metadatas) else {}
        doc = documents[i] if i < len(documents) else None
        if doc and not meta.get("content"):
            meta["content"] = doc
        distance = distances[i] if i < len(distances) else None
        records.append(KnowledgeRecord(id=record_id, score=_score(distance), metadata=meta))
    return records


def _parse_specialty(value: object) -> tuple[str, ...]:
    if isinstance(value, str):
        return tuple(s.strip() for s in value.split(",") if s.strip())
    if isinstance(value, (list, tuple)):
        return tuple(str(s) for s in value)
    return ()


def _parse_rating(value: object) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def _parse_partners(results: dict) -> list[PartnerShop]:
    shops: list[PartnerShop] = []
    for meta in _first(results, "metadatas"):
        meta = meta or {}
        shops.append(
            PartnerShop(
                shop_name=meta.get("shop_name") or "Unknown Shop",
                zipcode=str(meta.get("zipcode") or ""),
                subscription=meta.get("subscription") or "active",
                specialty=_parse_specialty(meta.get("specialty")),
                rating=_parse_rating(meta.get("rating")),
            )
        )
    return shops


def retrieve_knowledge(
    query: str,
    collection,
    top_k: int = 3,
    config: EmbeddingConfig | None = None,
) -> list[KnowledgeRecord]:
    """Return up to ``top_k`` knowledge records most similar to ``query``.

    The index is not queried at all when no embedding is available.
    """
    embedding = embed(query, config)
    if not embedding:
        return []

    try:
        results = vs.query(collection, embedding, n_results=top_k)
        records = _parse_knowledge(results)
    except Exception as exc:
        logger.warning("Knowledge search failed: %s", exc)
        return []

    logger.debug("Retrieved %d knowledge records.", len(records))
    return records[:top_k]


def _format_success_rate(value: object) -> str:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return f"{value:g}%"
    return str(value)


def format_knowledge_as_context(records: list[KnowledgeRecord]) -> str:
    """Format knowledge records into a numbered, prompt-ready string.

    Each record renders as ``"{rank}. {title} {(success annotation)}"``
    followed by its content on the next line; records are separated by
    blank lines. An empty list formats to ``""``.
    """
    parts = []
    for rank, record in enumerate(records, start=1):
        meta = record.metadata
        title = meta.get("title") or meta.get("stain_type") or "Unknown"
        content = meta.get("content") or meta.get("description") or ""
        rate = meta.get("success_rate")
        annotation = f"(성공률: {_format_success_rate(rate)})" if rate not in (None, "") else ""
        parts.append(f"{rank}. {title} {annotation}\n{content}")
    return "\n\n".join(parts)


def build_partner_filter(zipcode: str | None = None) -> dict:
    """Build the eligibility filter: active subscription, optionally one zipcode."""
    active = {"subscription": "active"}
    if not zipcode:
        return active
    return {"$and": [active, {"zipcode": zipcode}]}


def retrieve_partners(
    query: str,
    collection,
    zipcode: str | None = None,
    top_k: int = 3,
    config: EmbeddingConfig | None = None,
) -> list[PartnerShop]:
    """Return up to ``top_k`` active partner shops matching ``query``.

    When ``zipcode`` is given only shops in that zipcode are considered.
    """
    embedding = embed(query, config)
    if not embedding:
        return []

    try:
        results = vs.query(
            collection,
            embedding,
            n_results=top_k,
            where=build_partner_filter(zipcode),
        )
        shops = _parse_partners(results)
    except Exception as exc:
        logger.warning("Partner shop search failed: %s", exc)
        return []

    logger.debug("Retrieved %d partner shops (zipcode=%s).", len(shops), zipcode)
    return shops[:top_k]
