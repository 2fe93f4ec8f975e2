"""Chat pipeline: retrieve knowledge, ask the model, extract its
judgments and attach partner shops when the policy calls for it."""

import logging

from laundry_rag import llm_client, retriever
from laundry_rag.config import AppConfig
from laundry_rag.metadata import extract_metadata
from laundry_rag.models import ChatReply, Query
from laundry_rag.policy import recommendation_reasons

logger = logging.getLogger(__name__)


def process_chat(
    message: str,
    zipcode: str | None = None,
    *,
    knowledge,
    partners,
    config: AppConfig | None = None,
) -> ChatReply:
    """Answer one laundry question.

    Steps run strictly in order: knowledge retrieval, context formatting,
    completion, metadata extraction, recommendation decision and, only
    when recommended, partner shop retrieval.

    Retrieval problems never fail the request; they only mean less
    context or no shops. Completion errors propagate to the caller.

    Args:
        message: The user's question.
        zipcode: Optional zipcode used to narrow partner shops.
        knowledge: ChromaDB collection of laundry knowledge.
        partners: ChromaDB collection of partner shops.
        config: Application configuration. Uses defaults if not provided.

    Returns:
        The assembled ChatReply.

    Raises:
        laundry_rag.errors.CompletionError: If the completion request fails.
    """
    cfg = config or AppConfig()
    query = Query(text=message, zipcode=zipcode or None)

    records = retriever.retrieve_knowledge(
        query.text, knowledge, top_k=cfg.chat.knowledge_top_k, config=cfg.embedding
    )
    context = retriever.format_knowledge_as_context(records)
    logger.info("Knowledge context: %d records, %d chars", len(records), len(context))

    if context:
        completion = llm_client.complete(query.text, context, config=cfg.llm)
    else:
        completion = llm_client.complete(query.text, config=cfg.llm)

    metadata, answer = extract_metadata(completion.text)
    if metadata.is_empty:
        logger.info("Model answer carried no metadata block.")

    reasons = recommendation_reasons(query.text, metadata)
    shops = []
    if reasons:
        logger.info("Recommending partner shops: %s", ", ".join(reasons))
        shops = retriever.retrieve_partners(
            query.text,
            partners,
            zipcode=query.zipcode,
            top_k=cfg.chat.partner_top_k,
            config=cfg.embedding,
        )

    return ChatReply(answer=answer, metadata=metadata, recommended_shops=shops)
