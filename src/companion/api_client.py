"""HTTP client for the chatbot backend."""

from typing import Any

import httpx

from src.utils.logging import get_logger

from .config import CompanionConfig, get_companion_config

logger = get_logger(__name__)


class ChatbotAPIError(Exception):
    """Raised when a backend call fails.

    Carries the backend's `error` text when one was returned.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ChatbotAPIClient:
    """Async client for the `/api/chatbot` endpoints.

    Every call is a single attempt. Non-2xx responses and transport failures
    both raise ChatbotAPIError.
    """

    def __init__(
        self,
        config: CompanionConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize the client.

        Args:
            config: Companion configuration. If None, loads from environment.
            http_client: Pre-built httpx client (default: one owned by this instance).
        """
        self.config = config or get_companion_config()
        self._owns_client = http_client is None
        self.http_client = http_client or httpx.AsyncClient(timeout=self.config.request_timeout)

    async def __aenter__(self) -> "ChatbotAPIClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.http_client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        default_error: str,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        url = f"{self.config.api_base_url}{path}"

        try:
            response = await self.http_client.request(method, url, json=json)
        except httpx.HTTPError as e:
            logger.warning("api_request_failed", method=method, path=path, error=str(e))
            raise ChatbotAPIError(str(e) or default_error) from e

        try:
            data = response.json()
        except ValueError:
            data = {}

        if response.is_error:
            message = data.get("error") if isinstance(data, dict) else None
            logger.warning(
                "api_request_failed",
                method=method,
                path=path,
                status_code=response.status_code,
                error=message,
            )
            raise ChatbotAPIError(message or default_error, response.status_code)

        return data

    async def process_video(
        self, video_id: str, metadata: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Ask the backend to process a video."""
        return await self._request(
            "POST",
            "/process-video",
            "Failed to process video",
            json={"videoId": video_id, "metadata": metadata},
        )

    async def check_video_status(self, video_id: str) -> dict[str, Any]:
        """Return `{videoId, processed, timestamp}` for a video."""
        return await self._request(
            "GET", f"/video-status/{video_id}", "Failed to check video status"
        )

    async def chat(
        self, video_id: str, question: str, conversation_id: str | None = None
    ) -> dict[str, Any]:
        """Ask a question about a processed video."""
        return await self._request(
            "POST",
            "/chat",
            "Failed to get response",
            json={"videoId": video_id, "question": question, "conversationId": conversation_id},
        )

    async def delete_video(self, video_id: str) -> dict[str, Any]:
        """Delete a video's stored data."""
        return await self._request("DELETE", f"/video/{video_id}", "Failed to delete video data")
