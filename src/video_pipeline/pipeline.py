"""Pipeline orchestrator for processing videos and answering questions."""

import time

from src.agent.agent import AnswerGenerator
from src.utils.logging import get_logger

from .chunking_service import ChunkingService
from .config import ChatbotConfig, get_config
from .embedding_service import EmbeddingService
from .errors import (
    ChatbotError,
    ChunkingError,
    InvalidVideoError,
    VideoFetchError,
    VideoNotProcessedError,
)
from .schemas import ChatAnswer, ProcessResult, StorageStats
from .vector_store import VectorStoreService
from .youtube_service import YouTubeService, is_valid_video_id

logger = get_logger(__name__)


def generate_conversation_id() -> str:
    """Return a new conversation id derived from the current time."""
    return f"conv_{int(time.time() * 1000)}"


class VideoChatPipeline:
    """Orchestrates video processing and question answering.

    Coordinates the transcript fetcher, chunker, vector store and answer
    generator. Holds no per-request state; each call is a single chain of
    calls to the external services.
    """

    def __init__(self, config: ChatbotConfig | None = None):
        """Initialize pipeline with all required services.

        Args:
            config: Configuration object. If None, loads from environment.
        """
        self.config = config or get_config()
        self.youtube_service = YouTubeService(self.config)
        self.chunking_service = ChunkingService(self.config)
        self.embedding_service = EmbeddingService(self.config)
        self.vector_store = VectorStoreService(self.config, self.embedding_service)
        self.answer_generator = AnswerGenerator()

        logger.info("pipeline_initialized", index_name=self.config.pinecone_index)

    async def process_video(self, video_id: str) -> ProcessResult:
        """Fetch, chunk, embed and store a video's transcript.

        Processing the same video again overwrites its namespace.

        Args:
            video_id: 11-character YouTube video ID.

        Returns:
            ProcessResult with the chunk count and video metadata.

        Raises:
            InvalidVideoError: If video_id is not a YouTube video id.
            TranscriptUnavailableError: If the video has no transcript.
            VideoFetchError: If fetching the transcript or metadata failed.
            ChunkingError: If the transcript produced no chunks.
            Exception: If embedding or storage fails.
        """
        if not is_valid_video_id(video_id):
            raise InvalidVideoError("Invalid YouTube URL or video ID")

        logger.info("video_processing_started", video_id=video_id)

        try:
            transcript, video_info = await self.youtube_service.fetch_video(video_id)
        except ChatbotError:
            raise
        except Exception as e:
            logger.warning(
                "video_fetch_failed",
                video_id=video_id,
                error_type=type(e).__name__,
                error=str(e),
            )
            raise VideoFetchError(f"Failed to fetch video transcript: {e}") from e

        chunks = self.chunking_service.split_text(transcript, video_info)
        if not chunks:
            logger.error("video_processing_failed", video_id=video_id, reason="no_chunks")
            raise ChunkingError("Failed to process transcript chunks")

        chunks_count = await self.vector_store.create_vector_store(chunks, video_id)

        logger.info("video_processed", video_id=video_id, chunks=chunks_count)
        return ProcessResult(
            video_id=video_id,
            chunks_count=chunks_count,
            video_info=video_info,
        )

    async def answer_question(
        self,
        video_id: str,
        question: str,
        conversation_id: str | None = None,
    ) -> ChatAnswer:
        """Answer a question about a processed video.

        Conversation ids are echoed back (or generated) but no history is
        kept; every question is answered on its own.

        Args:
            video_id: YouTube video ID.
            question: User question.
            conversation_id: Optional id supplied by the client.

        Returns:
            ChatAnswer with the answer text and number of source chunks.

        Raises:
            VideoNotProcessedError: If the video has no stored vectors.
            Exception: If retrieval or generation fails.
        """
        logger.info(
            "chat_request_started",
            video_id=video_id,
            question_length=len(question),
        )

        if not await self.vector_store.exists(video_id):
            logger.warning("chat_request_rejected", video_id=video_id, reason="not_processed")
            raise VideoNotProcessedError(
                "Video not processed yet. Please process the video first."
            )

        relevant_chunks = await self.vector_store.similarity_search(video_id, question)
        response = await self.answer_generator.generate(question, relevant_chunks)

        logger.info(
            "chat_request_completed",
            video_id=video_id,
            sources=len(relevant_chunks),
        )
        return ChatAnswer(
            response=response,
            sources=len(relevant_chunks),
            conversation_id=conversation_id or generate_conversation_id(),
        )

    async def is_processed(self, video_id: str) -> bool:
        """Return True if the video's namespace holds vectors."""
        return await self.vector_store.exists(video_id)

    async def delete_video(self, video_id: str) -> None:
        """Delete all stored vectors for a video."""
        logger.info("video_deletion_started", video_id=video_id)
        await self.vector_store.delete_vector_store(video_id)

    async def get_processed_videos(self) -> list[str]:
        """Return ids of all processed videos."""
        return await self.vector_store.get_processed_videos()

    async def get_storage_stats(self) -> StorageStats:
        """Return index statistics."""
        return await self.vector_store.get_storage_stats()

    def clear_cache(self) -> None:
        """Drop cached namespace handles."""
        self.vector_store.clear_memory_cache()
