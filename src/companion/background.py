"""Background worker routing companion messages to the backend."""

import time
from typing import Any

from src.utils.logging import get_logger

from .api_client import ChatbotAPIClient, ChatbotAPIError
from .messages import ExtensionMessage, MessageType, unknown_message_response
from .storage import CHAT_REQUEST_KEY, CURRENT_VIDEO_KEY, LocalStorage, chat_key, processed_key

logger = get_logger(__name__)


def now_millis() -> int:
    """Current time in milliseconds since the epoch."""
    return int(time.time() * 1000)


class BackgroundWorker:
    """Routes messages from the page watcher and popup.

    Keeps the current video, calls the backend for processing, chat and
    status, and records results in local storage.
    """

    def __init__(self, api_client: ChatbotAPIClient, storage: LocalStorage):
        self.api_client = api_client
        self.storage = storage
        self.current_video_data: dict[str, Any] | None = None

    async def handle_message(self, message: ExtensionMessage | dict[str, Any]) -> dict[str, Any]:
        """Dispatch a message and return its response.

        Args:
            message: Message object or its wire dict.

        Returns:
            Response dict with `success` and a payload or `error`.
        """
        try:
            if isinstance(message, dict):
                message = ExtensionMessage.model_validate(message)

            kind = message.kind()
            logger.info(
                "message_received", type=str(message.type), video_id=message.video_id
            )

            if kind is MessageType.VIDEO_CHANGED:
                self.handle_video_changed(message)
                return {"success": True}

            if kind is MessageType.PROCESS_VIDEO:
                return await self.process_video(message.video_id)

            if kind is MessageType.SEND_CHAT_MESSAGE:
                return await self.send_chat_message(message.video_id, message.message)

            if kind is MessageType.CHECK_VIDEO_STATUS:
                return await self.check_video_status(message.video_id)

            if kind is MessageType.OPEN_CHAT:
                self.open_chat(message)
                return {"success": True}

            if kind is MessageType.GET_CURRENT_VIDEO:
                return {"success": True, "videoData": self.current_video_data}

        except (OSError, ValueError) as e:
            logger.exception("message_handling_failed", error_type=type(e).__name__)
            return {"success": False, "error": str(e)}

        return unknown_message_response()

    def handle_video_changed(self, message: ExtensionMessage) -> None:
        """Remember the video now shown on the page."""
        self.current_video_data = {
            "videoId": message.video_id,
            "metadata": message.metadata,
            "timestamp": now_millis(),
        }
        self.storage.set({CURRENT_VIDEO_KEY: self.current_video_data})

    async def process_video(self, video_id: str | None) -> dict[str, Any]:
        """Process a video and record the outcome under `processed_<id>`."""
        if not video_id:
            return {"success": False, "error": "Video ID is required"}

        try:
            result = await self.api_client.process_video(video_id)
        except ChatbotAPIError as e:
            self.storage.set(
                {
                    processed_key(video_id): {
                        "status": "failed",
                        "timestamp": now_millis(),
                        "error": e.message,
                    }
                }
            )
            return {"success": False, "error": e.message}

        self.storage.set(
            {
                processed_key(video_id): {
                    "status": "completed",
                    "timestamp": now_millis(),
                    "chunksCount": result.get("chunksCount"),
                }
            }
        )
        logger.info("video_processed", video_id=video_id, chunks=result.get("chunksCount"))
        return {"success": True, "message": "Video processed successfully", "data": result}

    async def send_chat_message(self, video_id: str | None, message: str | None) -> dict[str, Any]:
        """Send a question and append both turns to the video's chat history."""
        if not video_id or not message:
            return {"success": False, "error": "Video ID and message are required"}

        try:
            result = await self.api_client.chat(video_id, message)
        except ChatbotAPIError as e:
            return {"success": False, "error": e.message}

        history = self.get_chat_history(video_id)
        history.append({"type": "user", "message": message, "timestamp": now_millis()})
        history.append(
            {
                "type": "assistant",
                "message": result.get("response"),
                "timestamp": now_millis(),
                "sources": result.get("sources"),
            }
        )
        self.storage.set({chat_key(video_id): history})

        return {
            "success": True,
            "response": result.get("response"),
            "sources": result.get("sources"),
            "conversationId": result.get("conversationId"),
        }

    async def check_video_status(self, video_id: str | None) -> dict[str, Any]:
        """Ask the backend whether a video has been processed.

        Args:
            video_id: YouTube video ID.

        Returns:
            Response dict with `success` and `processed`, or `error`.
        """
        if not video_id:
            return {"success": False, "error": "Video ID is required"}

        try:
            result = await self.api_client.check_video_status(video_id)
        except ChatbotAPIError as e:
            return {"success": False, "error": e.message}

        return {"success": True, "processed": bool(result.get("processed"))}

    def open_chat(self, message: ExtensionMessage) -> None:
        """Record a request for the popup to open a chat for the video."""
        self.storage.set(
            {
                CHAT_REQUEST_KEY: {
                    "videoId": message.video_id,
                    "metadata": message.metadata,
                    "timestamp": now_millis(),
                }
            }
        )

    def get_chat_history(self, video_id: str) -> list[dict[str, Any]]:
        """Return the stored chat turns for a video, oldest first."""
        return list(self.storage.get(chat_key(video_id), []))

    def clear_chat_history(self, video_id: str) -> None:
        self.storage.remove(chat_key(video_id))
