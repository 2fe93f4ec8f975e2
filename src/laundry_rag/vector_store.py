"""Manages the ChromaDB collections behind both indices."""

import logging

import chromadb

from laundry_rag.config import VectorStoreConfig

logger = logging.getLogger(__name__)


def get_client(config: VectorStoreConfig | None = None) -> chromadb.ClientAPI:
    """Return a ChromaDB client.

    A remote ``HttpClient`` is used when ``config.host`` is set, with the
    auth token (if any) sent as ``X-Chroma-Token``. Otherwise a
    ``PersistentClient`` is opened on ``config.db_path``.

    Args:
        config: Vector store settings. Uses defaults if not provided.

    Returns:
        A connected ChromaDB client.
    """
    cfg = config or VectorStoreConfig()
    if cfg.host:
        headers = {}
        if cfg.auth_token is not None:
            headers["X-Chroma-Token"] = cfg.auth_token.get_secret_value()
        return chromadb.HttpClient(
            host=cfg.host, port=cfg.port, ssl=cfg.ssl, headers=headers
        )
    return chromadb.PersistentClient(path=cfg.db_path)


def get_or_create_collection(
    client: chromadb.ClientAPI,
    name: str,
) -> chromadb.Collection:
    """Get or create a cosine-space collection.

    Embeddings are always computed by :mod:`laundry_rag.embeddings` and
    passed explicitly, so the collection has no embedding function.
    """
    return client.get_or_create_collection(
        name=name,
        embedding_function=None,
        metadata={"hnsw:space": "cosine"},
    )


def upsert_records(
    collection: chromadb.Collection,
    ids: list[str],
    embeddings: list[list[float]],
    documents: list[str],
    metadatas: list[dict],
    batch_size: int = 100,
) -> int:
    """Upsert records into the collection in batches.

    Args:
        collection: The target ChromaDB collection.
        ids: Record identifiers; existing ids are overwritten.
        embeddings: One vector per record.
        documents: One text body per record.
        metadatas: One scalar-valued metadata dict per record.
        batch_size: Maximum number of records per upsert call.

    Returns:
        Number of records written (0 if ``ids`` is empty).
    """
    if not ids:
        return 0
    if not len(ids) == len(embeddings) == len(documents) == len(metadatas):
        raise ValueError("ids, embeddings, documents and metadatas differ in length")

    for start in range(0, len(ids), batch_size):
        end = start + batch_size
        collection.upsert(
            ids=ids[start:end],
            embeddings=embeddings[start:end],
            documents=documents[start:end],
            metadatas=metadatas[start:end],
        )

    logger.info("Upserted %d records into %s.", len(ids), collection.name)
    return len(ids)


def query(
    collection: chromadb.Collection,
    embedding: list[float],
    n_results: int = 3,
    where: dict | None = None,
) -> dict:
    """Return the nearest neighbours of ``embedding``.

    Args:
        collection: The ChromaDB collection to search.
        embedding: The query vector.
        n_results: Maximum number of results to return.
        where: Optional metadata filter.

    Returns:
        Raw ChromaDB query result dict containing ``ids``, ``documents``,
        ``metadatas``, and ``distances`` keys.
    """
    kwargs = {}
    if where:
        kwargs["where"] = where
    return collection.query(
        query_embeddings=[embedding],
        n_results=n_results,
        include=["documents", "metadatas", "distances"],
        **kwargs,
    )


def reset_collection(client: chromadb.ClientAPI, name: str) -> chromadb.Collection:
    """Delete and recreate a collection (used before a full re-ingestion).

    A missing collection is not an error.
    """
    try:
        client.delete_collection(name)
    except Exception:
        logger.debug("Collection %s did not exist before reset.", name)
    return get_or_create_collection(client, name)
