"""Configuration module for the video chatbot pipeline."""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load environment variables from .env file
load_dotenv()


class ChatbotConfig(BaseModel):
    """Configuration for the video chatbot pipeline.

    This configuration class manages all settings for transcript fetching,
    chunking, embedding, vector storage, and retrieval. All settings can be
    overridden via environment variables.
    """

    # Supadata API settings
    supadata_api_key: str = Field(
        default_factory=lambda: os.getenv("SUPADATA_API_KEY", "")
    )
    transcript_lang: str = Field(
        default_factory=lambda: os.getenv("TRANSCRIPT_LANG", "en")
    )

    # Chunking settings (character-based)
    chunk_size: int = Field(
        default_factory=lambda: int(os.getenv("CHUNK_SIZE", "1000"))
    )
    chunk_overlap: int = Field(
        default_factory=lambda: int(os.getenv("CHUNK_OVERLAP", "200"))
    )

    # Embedding settings
    embedding_provider: str = Field(
        default_factory=lambda: os.getenv("EMBEDDING_PROVIDER", "openai")
    )
    embedding_base_url: str = Field(
        default_factory=lambda: os.getenv(
            "EMBEDDING_BASE_URL", "https://api.openai.com/v1"
        )
    )
    embedding_api_key: str = Field(
        default_factory=lambda: os.getenv("EMBEDDING_API_KEY", "")
    )
    embedding_model: str = Field(
        default_factory=lambda: os.getenv(
            "EMBEDDING_MODEL_CHOICE", "text-embedding-3-small"
        )
    )
    embedding_dimension: int = Field(
        default_factory=lambda: int(os.getenv("EMBEDDING_DIMENSION", "1536"))
    )
    batch_size: int = Field(
        default_factory=lambda: int(os.getenv("EMBEDDING_BATCH_SIZE", "5"))
    )

    # Pinecone settings
    pinecone_api_key: str = Field(
        default_factory=lambda: os.getenv("PINECONE_API_KEY", "")
    )
    pinecone_index: str = Field(
        default_factory=lambda: os.getenv("PINECONE_INDEX", "youtube-chatbot")
    )
    pinecone_cloud: str = Field(
        default_factory=lambda: os.getenv("PINECONE_CLOUD", "aws")
    )
    pinecone_region: str = Field(
        default_factory=lambda: os.getenv("PINECONE_REGION", "us-east-1")
    )
    pinecone_metric: str = Field(
        default_factory=lambda: os.getenv("PINECONE_METRIC", "cosine")
    )
    index_ready_timeout: float = Field(
        default_factory=lambda: float(os.getenv("PINECONE_READY_TIMEOUT", "60"))
    )
    index_poll_interval: float = Field(
        default_factory=lambda: float(os.getenv("PINECONE_POLL_INTERVAL", "1"))
    )
    upsert_batch_size: int = Field(
        default_factory=lambda: int(os.getenv("PINECONE_UPSERT_BATCH_SIZE", "100"))
    )

    # Retrieval settings (maximal marginal relevance)
    retrieval_k: int = Field(
        default_factory=lambda: int(os.getenv("RETRIEVAL_K", "2"))
    )
    retrieval_fetch_k: int = Field(
        default_factory=lambda: int(os.getenv("RETRIEVAL_FETCH_K", "6"))
    )
    mmr_lambda: float = Field(
        default_factory=lambda: float(os.getenv("MMR_LAMBDA", "0.7"))
    )


def get_config() -> ChatbotConfig:
    """Get validated configuration instance.

    Returns:
        ChatbotConfig: Validated configuration object with all settings.

    Raises:
        ValidationError: If environment variables hold invalid values.
    """
    return ChatbotConfig()
