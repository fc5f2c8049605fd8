"""Chunking service for splitting transcripts into overlapping segments."""

from typing import Any

from langchain_text_splitters import RecursiveCharacterTextSplitter
from transformers import AutoTokenizer

from src.utils.logging import get_logger

from .config import ChatbotConfig
from .schemas import Chunk, Transcript, VideoInfo

logger = get_logger(__name__)


class ChunkingService:
    """Service for chunking transcripts into fixed-size overlapping pieces.

    Text is split recursively on paragraph, line, sentence and word
    boundaries so each chunk stays under `chunk_size` characters while
    sharing `chunk_overlap` characters with its neighbour. Each chunk also
    records its token count under the embedding model's tokenizer.
    """

    def __init__(self, config: ChatbotConfig):
        """Initialize chunking service with configuration.

        Args:
            config: Configuration object with chunk sizes and embedding model.
        """
        self.config = config
        self.splitter = RecursiveCharacterTextSplitter(
            chunk_size=config.chunk_size,
            chunk_overlap=config.chunk_overlap,
            separators=["\n\n", "\n", ". ", " ", ""],
            keep_separator="end",
        )
        self.tokenizer = self._get_tokenizer(config.embedding_model)
        logger.info(
            "chunking_service_initialized",
            chunk_size=config.chunk_size,
            chunk_overlap=config.chunk_overlap,
            model=config.embedding_model,
        )

    def _get_tokenizer(self, embedding_model: str) -> Any:
        """Get appropriate tokenizer for the embedding model.

        Maps embedding model names to compatible HuggingFace tokenizers.

        Args:
            embedding_model: Name of the embedding model.

        Returns:
            Configured AutoTokenizer instance (untyped due to transformers library).
        """
        tokenizer_map = {
            "text-embedding-3-small": "sentence-transformers/all-MiniLM-L6-v2",
            "text-embedding-3-large": "sentence-transformers/all-MiniLM-L6-v2",
            "nomic-embed-text": "bert-base-uncased",
            "all-MiniLM-L6-v2": "sentence-transformers/all-MiniLM-L6-v2",
        }

        tokenizer_name = tokenizer_map.get(
            embedding_model, "sentence-transformers/all-MiniLM-L6-v2"
        )
        logger.info("loading_tokenizer", tokenizer=tokenizer_name)
        return AutoTokenizer.from_pretrained(tokenizer_name)  # type: ignore

    def count_tokens(self, text: str) -> int:
        """Return the number of tokens in text for the embedding tokenizer."""
        return len(self.tokenizer.encode(text, add_special_tokens=False))

    def split_text(
        self, transcript: Transcript, video_info: VideoInfo | None = None
    ) -> list[Chunk]:
        """Split a transcript into overlapping chunks.

        Args:
            transcript: Plain-text transcript of the video.
            video_info: Optional video metadata copied onto each chunk.

        Returns:
            List of Chunk objects with contiguous chunk indices, empty if the
            transcript has no text.
        """
        logger.info(
            "chunking_started",
            video_id=transcript.video_id,
            characters=len(transcript.text),
        )

        pieces = [p.strip() for p in self.splitter.split_text(transcript.text)]
        pieces = [p for p in pieces if p]

        metadata: dict[str, Any] = {"lang": transcript.lang}
        if video_info is not None:
            metadata["video_title"] = video_info.title
            metadata["video_url"] = video_info.url
            if video_info.channel:
                metadata["channel"] = video_info.channel

        chunks = [
            Chunk(
                video_id=transcript.video_id,
                chunk_index=index,
                text_content=piece,
                token_count=self.count_tokens(piece),
                metadata=dict(metadata),
            )
            for index, piece in enumerate(pieces)
        ]

        logger.info(
            "chunking_completed",
            video_id=transcript.video_id,
            chunks_created=len(chunks),
        )
        return chunks
