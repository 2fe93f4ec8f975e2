"""Centralized configuration for the laundry advice pipeline."""

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class LLMConfig(BaseSettings):
    """Completion service settings."""

    model_config = SettingsConfigDict(env_prefix="LLM_", frozen=True)

    host: str = "https://ollama.com"
    api_key: SecretStr | None = None
    model: str = "gpt-oss:20b"
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=1500, gt=0)
    timeout: float = Field(default=25.0, gt=0)


class EmbeddingConfig(BaseSettings):
    """Embedding service settings."""

    model_config = SettingsConfigDict(env_prefix="EMBEDDING_", frozen=True)

    host: str = "https://ollama.com"
    api_key: SecretStr | None = None
    model: str = "embeddinggemma"
    timeout: float = Field(default=10.0, gt=0)


class VectorStoreConfig(BaseSettings):
    """ChromaDB similarity index settings.

    When ``host`` is set the indices are reached over HTTP, otherwise an
    embedded on-disk database at ``db_path`` is used.
    """

    model_config = SettingsConfigDict(env_prefix="VS_", frozen=True)

    db_path: str = "./chroma_db"
    host: str | None = None
    port: int = Field(default=8000, gt=0, le=65535)
    ssl: bool = False
    auth_token: SecretStr | None = None
    knowledge_collection: str = "laundry_knowledge"
    partner_collection: str = "partner_shops"
    batch_size: int = Field(default=100, gt=0)


class ChatConfig(BaseSettings):
    """Per-request pipeline limits."""

    model_config = SettingsConfigDict(env_prefix="CHAT_", frozen=True)

    knowledge_top_k: int = Field(default=3, gt=0)
    partner_top_k: int = Field(default=3, gt=0)
    max_message_length: int = Field(default=1000, gt=0)


class AppConfig(BaseSettings):
    """Top-level application configuration."""

    model_config = SettingsConfigDict(frozen=True)

    data_dir: str = "./data"
    llm: LLMConfig = Field(default_factory=LLMConfig)
    embedding: EmbeddingConfig = Field(default_factory=EmbeddingConfig)
    vector_store: VectorStoreConfig = Field(default_factory=VectorStoreConfig)
    chat: ChatConfig = Field(default_factory=ChatConfig)
