"""Watch-page tracker.

Follows navigation on a YouTube page, reports video changes to the
background worker and answers the popup's questions about the page.
"""

import re
from collections.abc import Awaitable, Callable
from typing import Any
from urllib.parse import parse_qs, urlparse

from src.utils.logging import get_logger

from .messages import ExtensionMessage, MessageType, PageMetadata, unknown_message_response

logger = get_logger(__name__)

WATCH_PATH_RE = re.compile(r"/watch/([^/?]+)")

SendMessage = Callable[[ExtensionMessage], Awaitable[dict[str, Any]]]


def extract_page_video_id(url: str) -> str | None:
    """Get the video id shown by a watch page URL.

    Reads the `v` query parameter, falling back to a `/watch/<id>` path.

    Examples:
        >>> extract_page_video_id("https://www.youtube.com/watch?v=dQw4w9WgXcQ&t=42")
        'dQw4w9WgXcQ'
        >>> extract_page_video_id("https://www.youtube.com/feed/subscriptions") is None
        True
    """
    parsed = urlparse(url)
    video_ids = parse_qs(parsed.query).get("v")
    if video_ids and video_ids[0]:
        return video_ids[0]

    match = WATCH_PATH_RE.search(parsed.path)
    return match.group(1) if match else None


def is_video_page(url: str) -> bool:
    """Return True if url is a watch page showing a video."""
    path = urlparse(url).path
    watch_path = path == "/watch" or path.startswith("/watch/")
    return watch_path and extract_page_video_id(url) is not None


class VideoPageWatcher:
    """Tracks the video on the current page.

    `navigate` is called with every URL change. A VIDEO_CHANGED message is
    sent only when the id differs from the last one seen.
    """

    def __init__(self, send_message: SendMessage):
        """Initialize the watcher.

        Args:
            send_message: Coroutine delivering messages to the background worker.
        """
        self.send_message = send_message
        self.current_video_id: str | None = None
        self.last_known_video_id: str | None = None
        self.url = ""
        self.metadata = PageMetadata()

    async def navigate(
        self,
        url: str,
        title: str | None = None,
        channel: str | None = None,
        views: str | None = None,
    ) -> bool:
        """Record a new page URL.

        Returns:
            True if the video changed and VIDEO_CHANGED was sent.
        """
        self.url = url
        self.metadata = PageMetadata.from_page(url, title=title, channel=channel, views=views)

        new_video_id = extract_page_video_id(url)
        if not new_video_id or new_video_id == self.last_known_video_id:
            return False

        self.last_known_video_id = new_video_id
        self.current_video_id = new_video_id
        logger.info("page_video_changed", video_id=new_video_id)

        await self.send_message(
            ExtensionMessage(
                type=MessageType.VIDEO_CHANGED,
                video_id=new_video_id,
                metadata=self.metadata.model_dump(),
            )
        )
        return True

    async def open_chat(self) -> dict[str, Any]:
        """Ask the worker to open a chat for the current video."""
        if not self.current_video_id:
            return {
                "success": False,
                "error": "No video detected. Please make sure you are on a YouTube video page.",
            }

        return await self.send_message(
            ExtensionMessage(
                type=MessageType.OPEN_CHAT,
                video_id=self.current_video_id,
                metadata=self.metadata.model_dump(),
            )
        )

    async def handle_message(self, message: ExtensionMessage) -> dict[str, Any]:
        """Answer a message from the popup."""
        kind = message.kind()

        if kind is MessageType.GET_CURRENT_VIDEO:
            return {
                "success": True,
                "videoId": self.current_video_id,
                "metadata": self.metadata.model_dump(),
            }

        if kind is MessageType.CHECK_VIDEO_STATUS:
            on_video_page = self.current_video_id is not None
            return {
                "success": True,
                "isOnVideoPage": on_video_page,
                "videoId": self.current_video_id,
                "metadata": self.metadata.model_dump() if on_video_page else None,
            }

        return unknown_message_response()
