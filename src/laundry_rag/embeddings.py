"""Embedding adapter: turns text into vectors via the Ollama embed API."""

import logging

import ollama

from laundry_rag.config import EmbeddingConfig

logger = logging.getLogger(__name__)


def _get_client(config: EmbeddingConfig) -> ollama.Client:
    headers = {}
    if config.api_key is not None:
        headers["Authorization"] = f"Bearer {config.api_key.get_secret_value()}"
    return ollama.Client(host=config.host, timeout=config.timeout, headers=headers)


def _validate(vectors: object, expected: int) -> list[list[float]]:
    """Check the shape of an embed response and coerce values to floats.

    Raises:
        ValueError: If the response does not hold ``expected`` non-empty
            numeric vectors.
    """
    if not isinstance(vectors, list) or len(vectors) != expected:
        raise ValueError(f"expected {expected} embeddings, got {vectors!r:.80}")
    result = []
    for vector in vectors:
        if not vector:
            raise ValueError("embedding service returned an empty vector")
        result.append([float(v) for v in vector])
    return result


def embed(text: str, config: EmbeddingConfig | None = None) -> list[float]:
    """Embed a single query text.

    Any failure (transport, authentication, malformed response) is
    logged and reported as an empty vector, which callers treat as
    "retrieval unavailable". There is no retry.

    Args:
        text: The text to embed.
        config: Embedding service settings. Uses defaults if not provided.

    Returns:
        The embedding vector, or ``[]`` if it could not be produced.
    """
    cfg = config or EmbeddingConfig()
    try:
        client = _get_client(cfg)
        with client:
            response = client.embed(model=cfg.model, input=text)
        return _validate(response["embeddings"], 1)[0]
    except Exception as exc:
        logger.warning("Embedding failed, skipping vector search: %s", exc)
        return []


def embed_many(texts: list[str], config: EmbeddingConfig | None = None) -> list[list[float]]:
    """Embed a batch of texts for ingestion.

    Unlike :func:`embed`, errors propagate: a partially embedded batch
    must not be written to the index.
    """
    if not texts:
        return []
    cfg = config or EmbeddingConfig()
    client = _get_client(cfg)
    with client:
        response = client.embed(model=cfg.model, input=texts)
    return _validate(response["embeddings"], len(texts))
