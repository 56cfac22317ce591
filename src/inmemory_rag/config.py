"""Centralized configuration using Pydantic BaseSettings"""

from pathlib import Path
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class RagSettings(BaseSettings):
    """Settings read from RAG_* environment variables or a .env file"""

    # Retrieval
    similarity_threshold: float = Field(
        default=0.7, description="Minimum cosine similarity for a document to be used"
    )
    max_results: int = Field(
        default=2, ge=0, description="Maximum number of documents injected as context"
    )
    prompt_template_path: Path | None = Field(
        default=None,
        description="Prompt template with {context} and {question}; bundled template if unset",
    )

    # Embedding
    embedding_backend: Literal["sentence-transformers", "openai"] = Field(
        default="sentence-transformers", description="Embedding capability implementation"
    )
    embedding_model: str = Field(
        default="sentence-transformers/all-MiniLM-L6-v2", description="Embedding model name"
    )
    embedding_dimension: int | None = Field(
        default=None, ge=1, description="Enforce this dimension on insert (unchecked if unset)"
    )

    # Generation
    generation_backend: Literal["claude-code", "openai"] = Field(
        default="claude-code", description="Generation capability implementation"
    )
    chat_model: str = Field(default="gpt-4o-mini", description="Chat model for the openai backend")
    generation_timeout: float = Field(
        default=120.0, gt=0, description="Seconds to wait for one generation call"
    )

    # OpenAI-compatible API
    openai_api_key: SecretStr | None = Field(default=None, description="API key")
    openai_base_url: str = Field(
        default="https://api.openai.com/v1", description="Base URL of the OpenAI-compatible API"
    )
    request_timeout: float = Field(
        default=30.0, gt=0, description="HTTP timeout in seconds for embedding requests"
    )

    # Ingestion
    chunk_size: int = Field(default=500, ge=1, description="Characters per chunk")
    chunk_overlap: int = Field(default=50, ge=0, description="Overlap between chunks")

    # Shell
    log_level: str = Field(default="INFO", description="Logging level name")
    api_host: str = Field(default="127.0.0.1", description="HTTP bind address")
    api_port: int = Field(default=8080, ge=1, le=65535, description="HTTP port")

    model_config = SettingsConfigDict(
        env_prefix="RAG_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instance
settings = RagSettings()
