"""Embedding service for generating text embeddings via OpenAI-compatible APIs."""

import asyncio

from src.utils.clients import get_embedding_client
from src.utils.logging import get_logger

from .config import ChatbotConfig

logger = get_logger(__name__)

MAX_CONCURRENT_REQUESTS = 5


class EmbeddingService:
    """Service for generating text embeddings.

    Supports OpenAI, Ollama and OpenRouter through OpenAI-compatible APIs.
    Batch embedding sends several texts per request and keeps a bounded
    number of requests in flight.
    """

    def __init__(self, config: ChatbotConfig):
        """Initialize embedding service with configuration.

        Args:
            config: Configuration object with embedding provider settings.
        """
        self.config = config
        self.client = get_embedding_client(config)
        logger.info(
            "embedding_service_initialized",
            provider=config.embedding_provider,
            model=config.embedding_model,
            base_url=config.embedding_base_url,
        )

    async def embed_text(self, text: str) -> list[float]:
        """Generate embedding for a single text.

        Args:
            text: Text content to embed.

        Returns:
            Embedding vector as a list of floats.

        Raises:
            Exception: If embedding generation fails.
        """
        embeddings = await self._embed_request([text])
        return embeddings[0]

    async def embed_batch(
        self, texts: list[str], batch_size: int | None = None
    ) -> list[list[float]]:
        """Generate embeddings for multiple texts.

        Texts are grouped into requests of `batch_size` inputs, and at most
        MAX_CONCURRENT_REQUESTS requests run at once. The result preserves
        input order.

        Args:
            texts: List of text strings to embed.
            batch_size: Texts per request (default: config.batch_size).

        Returns:
            List of embedding vectors in the same order as input texts.

        Raises:
            Exception: If any batch request fails.
        """
        if not texts:
            return []

        batch_size = batch_size or self.config.batch_size
        batches = [texts[i : i + batch_size] for i in range(0, len(texts), batch_size)]

        logger.info(
            "batch_embedding_started",
            count=len(texts),
            batch_size=batch_size,
            batches=len(batches),
        )

        semaphore = asyncio.Semaphore(MAX_CONCURRENT_REQUESTS)

        async def run(batch_num: int, batch: list[str]) -> list[list[float]]:
            async with semaphore:
                try:
                    return await self._embed_request(batch)
                except Exception as e:
                    logger.exception(
                        "batch_embedding_failed",
                        batch_num=batch_num,
                        error_type=type(e).__name__,
                    )
                    raise

        results = await asyncio.gather(
            *[run(num, batch) for num, batch in enumerate(batches, 1)]
        )
        embeddings = [embedding for batch in results for embedding in batch]

        logger.info("batch_embedding_completed", total_embeddings=len(embeddings))
        return embeddings

    async def _embed_request(self, inputs: list[str]) -> list[list[float]]:
        """Send one embeddings request and return vectors in input order."""
        try:
            response = await self.client.embeddings.create(
                input=inputs,
                model=self.config.embedding_model,
            )
        except Exception as e:
            logger.exception(
                "embedding_failed",
                inputs=len(inputs),
                error_type=type(e).__name__,
            )
            raise

        data = sorted(response.data, key=lambda item: item.index)
        embeddings = [item.embedding for item in data]
        logger.debug(
            "embedding_generated",
            inputs=len(inputs),
            embedding_dim=len(embeddings[0]) if embeddings else 0,
        )
        return embeddings
