"""FastAPI application for the YouTube video chatbot.

Provides endpoints to process a video into its vector namespace, chat about
a processed video, check processing status, and delete a video's data.
"""

import os
import traceback
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from src.utils.logging import get_logger
from src.video_pipeline.config import get_config
from src.video_pipeline.errors import ChatbotError
from src.video_pipeline.pipeline import VideoChatPipeline
from src.video_pipeline.youtube_service import extract_video_id

logger = get_logger(__name__)

# Check if we're in production
is_production = os.getenv("ENVIRONMENT") == "production"

if not is_production:
    # Development: prioritize .env file
    project_root = Path(__file__).resolve().parent.parent.parent
    dotenv_path = project_root / ".env"
    load_dotenv(dotenv_path, override=True)
else:
    # Production: use cloud platform env vars only
    load_dotenv()

# Global pipeline initialized in lifespan
pipeline: VideoChatPipeline | None = None


# ==============================================================================
# Lifespan Management
# ==============================================================================


async def lifespan(app: FastAPI):  # type: ignore[misc]
    """Lifecycle manager for the FastAPI application.

    Builds the pipeline (and its service clients) once at startup.
    """
    global pipeline

    logger.info("application_startup_started")

    try:
        pipeline = VideoChatPipeline(get_config())
        logger.info("application_startup_completed")

    except Exception:
        logger.exception("application_startup_failed")
        raise

    yield  # Application runs here

    logger.info("application_shutdown_started")
    if pipeline:
        pipeline.clear_cache()
    logger.info("application_shutdown_completed")


# ==============================================================================
# FastAPI Application Setup
# ==============================================================================

app = FastAPI(
    title="YouTube Chatbot API",
    description="Chat with YouTube videos using transcript retrieval",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ==============================================================================
# Request Models
# ==============================================================================


class ProcessVideoRequest(BaseModel):
    """Request model for the process-video endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    video_id: str | None = Field(default=None, alias="videoId")
    video_url: str | None = Field(default=None, alias="videoUrl")
    metadata: dict[str, Any] | None = None


class ChatRequest(BaseModel):
    """Request model for the chat endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    video_id: str | None = Field(default=None, alias="videoId")
    question: str | None = None
    conversation_id: str | None = Field(default=None, alias="conversationId")


# ==============================================================================
# Helper Functions
# ==============================================================================


def error_response(status_code: int, message: str, error: Exception | None = None) -> JSONResponse:
    """Build a JSON error response.

    The traceback is attached as `details` outside production.

    Args:
        status_code: HTTP status code.
        message: Error message shown to the client.
        error: Exception that caused the failure, if any.

    Returns:
        JSONResponse with `error` and `details` keys.
    """
    details = None
    if error is not None and not is_production:
        details = "".join(traceback.format_exception(error))

    return JSONResponse(status_code=status_code, content={"error": message, "details": details})


def get_pipeline() -> VideoChatPipeline:
    """Return the initialized pipeline.

    Raises:
        RuntimeError: If the application has not finished startup.
    """
    if pipeline is None:
        raise RuntimeError("Pipeline not initialized")
    return pipeline


# ==============================================================================
# API Endpoints
# ==============================================================================


@app.get("/health")
async def health_check():
    """Health check endpoint.

    Returns:
        Health status and timestamp.
    """
    return {
        "status": "healthy",
        "timestamp": datetime.now(UTC).isoformat(),
        "services": {
            "pipeline": pipeline is not None,
        },
    }


@app.post("/api/chatbot/process-video")
async def process_video(request: ProcessVideoRequest):
    """Fetch, chunk and index a video's transcript.

    Args:
        request: Video id or URL to process.

    Returns:
        Processing summary with chunk count and video metadata.
    """
    if not request.video_id and not request.video_url:
        return error_response(400, "Video ID or URL is required")

    video_id = extract_video_id(request.video_id or request.video_url)
    if not video_id:
        logger.warning(
            "process_request_rejected",
            reason="invalid_video",
            video_id=request.video_id,
            video_url=request.video_url,
        )
        return error_response(400, "Invalid YouTube URL or video ID")

    logger.info("process_request_started", video_id=video_id)

    try:
        result = await get_pipeline().process_video(video_id)

    except ChatbotError as e:
        logger.warning("process_request_failed", video_id=video_id, error=e.message)
        return error_response(e.status_code, e.message, e)

    except Exception as e:
        logger.exception("process_request_failed", video_id=video_id)
        return error_response(500, str(e) or "Failed to process video", e)

    return {
        "success": True,
        "message": "Video processed successfully",
        "videoId": result.video_id,
        "chunksCount": result.chunks_count,
        "videoInfo": result.video_info.model_dump(mode="json"),
    }


@app.post("/api/chatbot/chat")
async def chat(request: ChatRequest):
    """Answer a question about a processed video.

    Args:
        request: Video id, question and optional conversation id.

    Returns:
        Answer text, number of source chunks and conversation id.
    """
    if not request.video_id or not request.question:
        return error_response(400, "Video ID and question are required")

    try:
        answer = await get_pipeline().answer_question(
            request.video_id,
            request.question,
            request.conversation_id,
        )

    except ChatbotError as e:
        return error_response(e.status_code, e.message, e)

    except Exception as e:
        logger.exception("chat_request_failed", video_id=request.video_id)
        return error_response(500, f"Failed to generate response: {e}", e)

    return {
        "success": True,
        "response": answer.response,
        "sources": answer.sources,
        "conversationId": answer.conversation_id,
    }


@app.get("/api/chatbot/video-status/{video_id}")
async def video_status(video_id: str):
    """Report whether a video has stored vectors."""
    try:
        processed = await get_pipeline().is_processed(video_id)
    except Exception:
        logger.exception("video_status_check_failed", video_id=video_id)
        processed = False

    return {
        "videoId": video_id,
        "processed": processed,
        "timestamp": datetime.now(UTC).isoformat(),
    }


@app.delete("/api/chatbot/video/{video_id}")
async def delete_video(video_id: str):
    """Delete all stored data for a video."""
    try:
        await get_pipeline().delete_video(video_id)
    except Exception as e:
        logger.exception("video_delete_failed", video_id=video_id)
        return error_response(500, f"Failed to delete video data: {e}", e)

    return {
        "success": True,
        "message": f"Video data for {video_id} deleted successfully",
    }


@app.get("/api/chatbot/processed-videos")
async def processed_videos():
    """List ids of all processed videos."""
    try:
        video_ids = await get_pipeline().get_processed_videos()
    except Exception as e:
        logger.exception("processed_videos_list_failed")
        return error_response(500, f"Failed to list processed videos: {e}", e)

    return {"videoIds": video_ids, "count": len(video_ids)}


@app.get("/api/chatbot/storage-stats")
async def storage_stats():
    """Summarize the vector index contents."""
    try:
        stats = await get_pipeline().get_storage_stats()
    except Exception as e:
        logger.exception("storage_stats_failed")
        return error_response(500, f"Failed to get storage stats: {e}", e)

    return {
        "processedVideos": stats.processed_videos,
        "memoryCacheSize": stats.memory_cache_size,
        "videoIds": stats.video_ids,
        "totalVectors": stats.total_vectors,
        "indexDimension": stats.index_dimension,
    }


@app.post("/api/chatbot/clear-cache")
async def clear_cache():
    """Drop the in-memory namespace handle cache."""
    if pipeline is not None:
        pipeline.clear_cache()
    return {"success": True, "message": "Memory cache cleared"}
