"""Client initialization utilities.

Provides functions for initializing the external service clients
(OpenAI-compatible embeddings, Pinecone, Supadata) used by the pipeline.
"""

from openai import AsyncOpenAI
from pinecone import Pinecone
from supadata import Supadata

from src.video_pipeline.config import ChatbotConfig


def get_embedding_client(config: ChatbotConfig) -> AsyncOpenAI:
    """Initialize an OpenAI-compatible client for the embedding provider.

    Ollama does not check API keys, so a placeholder key is used for it.
    Every other provider requires EMBEDDING_API_KEY.

    Args:
        config: Pipeline configuration with embedding provider settings.

    Returns:
        Configured AsyncOpenAI client instance.

    Raises:
        ValueError: If the API key is missing for a provider that needs one.
    """
    if config.embedding_provider == "ollama":
        return AsyncOpenAI(base_url=config.embedding_base_url, api_key="ollama")

    if not config.embedding_api_key:
        raise ValueError("EMBEDDING_API_KEY environment variable is required")

    return AsyncOpenAI(
        base_url=config.embedding_base_url,
        api_key=config.embedding_api_key,
    )


def get_pinecone_client(config: ChatbotConfig) -> Pinecone:
    """Initialize the Pinecone control-plane client.

    Args:
        config: Pipeline configuration with Pinecone credentials.

    Returns:
        Pinecone client instance.

    Raises:
        ValueError: If PINECONE_API_KEY is missing.
    """
    if not config.pinecone_api_key:
        raise ValueError("PINECONE_API_KEY environment variable is required")

    return Pinecone(api_key=config.pinecone_api_key)


def get_supadata_client(config: ChatbotConfig) -> Supadata:
    """Initialize the Supadata client used for transcripts and video metadata.

    Args:
        config: Pipeline configuration with the Supadata API key.

    Returns:
        Supadata client instance.

    Raises:
        ValueError: If SUPADATA_API_KEY is missing.
    """
    if not config.supadata_api_key:
        raise ValueError("SUPADATA_API_KEY environment variable is required")

    return Supadata(api_key=config.supadata_api_key)
