"""Unit tests for embedding service."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.video_pipeline.config import ChatbotConfig
from src.video_pipeline.embedding_service import EmbeddingService


def make_response(vectors: list[list[float]]) -> MagicMock:
    """Build a mock embeddings response with indexed items."""
    response = MagicMock()
    response.data = [MagicMock(index=i, embedding=vector) for i, vector in enumerate(vectors)]
    return response


@pytest.mark.unit
class TestEmbeddingService:
    """Test suite for EmbeddingService class."""

    @pytest.fixture
    def config_openai(self) -> ChatbotConfig:
        """Create test configuration for OpenAI provider."""
        return ChatbotConfig(
            embedding_provider="openai",
            embedding_base_url="https://api.openai.com/v1",
            embedding_api_key="test_api_key",
            embedding_model="text-embedding-3-small",
            batch_size=5,
        )

    @pytest.fixture
    def config_ollama(self) -> ChatbotConfig:
        """Create test configuration for Ollama provider."""
        return ChatbotConfig(
            embedding_provider="ollama",
            embedding_base_url="http://localhost:11434/v1",
            embedding_model="nomic-embed-text",
        )

    def test_service_initialization_openai(self, config_openai: ChatbotConfig) -> None:
        """Test service initialization with OpenAI provider."""
        with patch("src.utils.clients.AsyncOpenAI") as mock_openai:
            service = EmbeddingService(config_openai)

            assert service.config == config_openai
            mock_openai.assert_called_once_with(
                base_url="https://api.openai.com/v1",
                api_key="test_api_key",
            )

    def test_service_initialization_ollama(self, config_ollama: ChatbotConfig) -> None:
        """Test service initialization with Ollama provider."""
        with patch("src.utils.clients.AsyncOpenAI") as mock_openai:
            EmbeddingService(config_ollama)

            # Ollama should use "ollama" as API key
            mock_openai.assert_called_once_with(
                base_url="http://localhost:11434/v1",
                api_key="ollama",
            )

    def test_service_initialization_missing_key(self) -> None:
        """Test a missing API key is rejected for hosted providers."""
        config = ChatbotConfig(embedding_provider="openai", embedding_api_key="")

        with pytest.raises(ValueError, match="EMBEDDING_API_KEY"):
            EmbeddingService(config)

    @pytest.mark.asyncio
    async def test_embed_text_success(self, config_openai: ChatbotConfig) -> None:
        """Test successful text embedding generation."""
        with patch("src.utils.clients.AsyncOpenAI") as mock_openai:
            mock_client = MagicMock()
            mock_client.embeddings.create = AsyncMock(
                return_value=make_response([[0.1, 0.2, 0.3, 0.4, 0.5]])
            )
            mock_openai.return_value = mock_client

            service = EmbeddingService(config_openai)
            embedding = await service.embed_text("Test text to embed")

            assert embedding == [0.1, 0.2, 0.3, 0.4, 0.5]
            mock_client.embeddings.create.assert_called_once_with(
                input=["Test text to embed"],
                model="text-embedding-3-small",
            )

    @pytest.mark.asyncio
    async def test_embed_text_failure(self, config_openai: ChatbotConfig) -> None:
        """Test embedding generation handles errors properly."""
        with patch("src.utils.clients.AsyncOpenAI") as mock_openai:
            mock_client = MagicMock()
            mock_client.embeddings.create = AsyncMock(side_effect=Exception("API Error"))
            mock_openai.return_value = mock_client

            service = EmbeddingService(config_openai)

            with pytest.raises(Exception, match="API Error"):
                await service.embed_text("Test text")

    @pytest.mark.asyncio
    async def test_embed_batch_groups_requests(self, config_openai: ChatbotConfig) -> None:
        """Test batch embedding sends batch_size texts per request."""
        with patch("src.utils.clients.AsyncOpenAI") as mock_openai:

            async def mock_embed(input: list[str], model: str) -> MagicMock:
                return make_response([[float(len(text)), 0.0] for text in input])

            mock_client = MagicMock()
            mock_client.embeddings.create = AsyncMock(side_effect=mock_embed)
            mock_openai.return_value = mock_client

            service = EmbeddingService(config_openai)
            texts = [f"Text {'x' * i}" for i in range(7)]
            embeddings = await service.embed_batch(texts, batch_size=3)

            # 7 texts in batches of 3 -> 3 requests
            assert mock_client.embeddings.create.call_count == 3
            assert len(embeddings) == 7

    @pytest.mark.asyncio
    async def test_embed_batch_preserves_order(self, config_openai: ChatbotConfig) -> None:
        """Test results follow input order even when items come back shuffled."""
        with patch("src.utils.clients.AsyncOpenAI") as mock_openai:

            async def mock_embed(input: list[str], model: str) -> MagicMock:
                response = make_response([[float(len(text))] for text in input])
                response.data.reverse()
                return response

            mock_client = MagicMock()
            mock_client.embeddings.create = AsyncMock(side_effect=mock_embed)
            mock_openai.return_value = mock_client

            service = EmbeddingService(config_openai)
            texts = ["a", "bb", "ccc", "dddd", "eeeee", "ffffff"]
            embeddings = await service.embed_batch(texts, batch_size=4)

            assert embeddings == [[1.0], [2.0], [3.0], [4.0], [5.0], [6.0]]

    @pytest.mark.asyncio
    async def test_embed_batch_uses_config_batch_size(self, config_openai: ChatbotConfig) -> None:
        """Test the configured batch size applies by default."""
        with patch("src.utils.clients.AsyncOpenAI") as mock_openai:

            async def mock_embed(input: list[str], model: str) -> MagicMock:
                return make_response([[0.1] for _ in input])

            mock_client = MagicMock()
            mock_client.embeddings.create = AsyncMock(side_effect=mock_embed)
            mock_openai.return_value = mock_client

            service = EmbeddingService(config_openai)
            await service.embed_batch([f"Text {i}" for i in range(12)])

            # batch_size=5 -> 5, 5, 2
            assert mock_client.embeddings.create.call_count == 3

    @pytest.mark.asyncio
    async def test_embed_batch_empty_list(self, config_openai: ChatbotConfig) -> None:
        """Test batch embedding with empty list."""
        with patch("src.utils.clients.AsyncOpenAI") as mock_openai:
            mock_client = MagicMock()
            mock_client.embeddings.create = AsyncMock()
            mock_openai.return_value = mock_client

            service = EmbeddingService(config_openai)
            embeddings = await service.embed_batch([])

            assert embeddings == []
            mock_client.embeddings.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_embed_batch_handles_error(self, config_openai: ChatbotConfig) -> None:
        """Test batch embedding propagates a failed batch."""
        with patch("src.utils.clients.AsyncOpenAI") as mock_openai:
            call_count = 0

            async def mock_embed(input: list[str], model: str) -> MagicMock:
                nonlocal call_count
                call_count += 1
                if call_count > 1:
                    raise Exception("Batch processing error")
                return make_response([[0.1] for _ in input])

            mock_client = MagicMock()
            mock_client.embeddings.create = AsyncMock(side_effect=mock_embed)
            mock_openai.return_value = mock_client

            service = EmbeddingService(config_openai)
            texts = [f"Text {i}" for i in range(5)]

            with pytest.raises(Exception, match="Batch processing error"):
                await service.embed_batch(texts, batch_size=2)
