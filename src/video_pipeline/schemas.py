"""Pydantic schemas for the video chatbot pipeline."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class VideoInfo(BaseModel):
    """YouTube video metadata.

    Returned to clients alongside the processing result so they can show
    what was indexed.
    """

    id: str
    url: str
    title: str = ""
    channel: str | None = None
    channel_id: str | None = None
    description: str | None = None
    view_count: int | None = None
    duration_seconds: int | None = None
    thumbnail: str | None = None
    published_at: datetime | None = None


class Transcript(BaseModel):
    """Full plain-text transcript of a video."""

    video_id: str
    text: str
    lang: str
    available_langs: list[str] = Field(default_factory=list)


class Chunk(BaseModel):
    """Overlapping transcript segment ready for embedding."""

    video_id: str
    chunk_index: int
    text_content: str
    token_count: int
    metadata: dict[str, Any] = Field(default_factory=dict)


class ChunkWithEmbedding(Chunk):
    """Chunk with embedding vector.

    This is what gets upserted into the video's vector namespace.
    """

    embedding: list[float]


class RetrievedChunk(BaseModel):
    """Chunk returned by a vector search."""

    id: str
    text_content: str
    score: float
    metadata: dict[str, Any] = Field(default_factory=dict)


class ProcessResult(BaseModel):
    """Result of processing a single video."""

    video_id: str
    chunks_count: int
    video_info: VideoInfo


class ChatAnswer(BaseModel):
    """Answer to a question about a processed video.

    `sources` is the number of transcript chunks the answer was grounded on.
    """

    response: str
    sources: int
    conversation_id: str


class StorageStats(BaseModel):
    """Summary of what the vector index currently holds."""

    processed_videos: int = 0
    memory_cache_size: int = 0
    video_ids: list[str] = Field(default_factory=list)
    total_vectors: int = 0
    index_dimension: int = 0
