"""Message types exchanged between the page watcher, worker and popup."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

UNKNOWN_TITLE = "Unknown Title"
UNKNOWN_CHANNEL = "Unknown Channel"
UNKNOWN_VIEWS = "Unknown Views"


class MessageType(str, Enum):
    """Known message types, matching the wire `type` field."""

    VIDEO_CHANGED = "VIDEO_CHANGED"
    PROCESS_VIDEO = "PROCESS_VIDEO"
    SEND_CHAT_MESSAGE = "SEND_CHAT_MESSAGE"
    CHECK_VIDEO_STATUS = "CHECK_VIDEO_STATUS"
    OPEN_CHAT = "OPEN_CHAT"
    GET_CURRENT_VIDEO = "GET_CURRENT_VIDEO"


class PageMetadata(BaseModel):
    """What the watch page shows about the current video."""

    title: str = UNKNOWN_TITLE
    channel: str = UNKNOWN_CHANNEL
    views: str = UNKNOWN_VIEWS
    url: str = ""

    @classmethod
    def from_page(
        cls,
        url: str,
        title: str | None = None,
        channel: str | None = None,
        views: str | None = None,
    ) -> "PageMetadata":
        """Build metadata from raw page text, substituting defaults for blanks."""
        return cls(
            title=(title or "").strip() or UNKNOWN_TITLE,
            channel=(channel or "").strip() or UNKNOWN_CHANNEL,
            views=(views or "").strip() or UNKNOWN_VIEWS,
            url=url,
        )


class ExtensionMessage(BaseModel):
    """A routed message.

    `type` accepts any string so unknown types can be answered with an error
    instead of failing validation.
    """

    model_config = ConfigDict(populate_by_name=True)

    type: MessageType | str
    video_id: str | None = Field(default=None, alias="videoId")
    message: str | None = None
    metadata: dict[str, Any] | None = None

    def kind(self) -> MessageType | None:
        """Return the message type, or None when it is not a known type."""
        try:
            return MessageType(self.type)
        except ValueError:
            return None


def unknown_message_response() -> dict[str, Any]:
    """Response sent for a message type no handler recognizes."""
    return {"success": False, "error": "Unknown message type"}
