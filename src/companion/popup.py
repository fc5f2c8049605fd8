"""Chat popup for the current video, with a terminal front-end.

Usage:
    python -m src.companion.popup https://www.youtube.com/watch?v=dQw4w9WgXcQ
"""

import argparse
import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from src.utils.logging import get_logger

from .api_client import ChatbotAPIClient, ChatbotAPIError
from .background import BackgroundWorker
from .config import get_companion_config
from .content import SendMessage, VideoPageWatcher, is_video_page
from .messages import ExtensionMessage, MessageType
from .storage import LocalStorage

logger = get_logger(__name__)

PROCESSED_MESSAGE = "Video processed successfully! You can now ask questions about it."
CHAT_FAILED_MESSAGE = "Sorry, something went wrong. Please try again."


@dataclass
class ChatMessage:
    role: str  # "user" or "bot"
    text: str


class ChatPopup:
    """Chat session for the video on the current page.

    On open it resolves the current video, checks whether it is processed
    and processes it if not. A failed processing run can be retried
    manually with `retry`.
    """

    def __init__(
        self,
        api_client: ChatbotAPIClient,
        send_to_page: SendMessage,
        on_message: Callable[[ChatMessage], None] | None = None,
    ):
        """Initialize the popup.

        Args:
            api_client: Backend client.
            send_to_page: Coroutine delivering messages to the page watcher.
            on_message: Called with every message added to the conversation.
        """
        self.api_client = api_client
        self.send_to_page = send_to_page
        self.on_message = on_message

        self.video_id: str | None = None
        self.metadata: dict[str, Any] | None = None
        self.conversation_id: str | None = None
        self.messages: list[ChatMessage] = []
        self.is_processing = False
        self.chat_enabled = False
        self.can_retry = False

    def add_message(self, text: str, role: str) -> None:
        message = ChatMessage(role=role, text=text)
        self.messages.append(message)
        if self.on_message:
            self.on_message(message)

    def show_error(self, message: str) -> None:
        self.add_message(f"Error: {message}", "bot")

    async def open(self) -> None:
        """Resolve the current video and make sure it is processed."""
        try:
            response = await self.send_to_page(
                ExtensionMessage(type=MessageType.GET_CURRENT_VIDEO)
            )
        except Exception:
            logger.exception("current_video_lookup_failed")
            self.show_error("Failed to connect to YouTube page")
            return

        if not response.get("success") or not response.get("videoId"):
            self.show_error("No video detected")
            return

        self.video_id = response["videoId"]
        self.metadata = response.get("metadata")
        await self.check_video_status()

    async def check_video_status(self) -> None:
        try:
            status = await self.api_client.check_video_status(self.video_id)
        except ChatbotAPIError:
            logger.warning("video_status_check_failed", video_id=self.video_id)
            self.show_error("Failed to check video status")
            return

        if status.get("processed"):
            self.chat_enabled = True
        else:
            await self.process_video()

    async def process_video(self) -> bool:
        """Process the current video.

        Returns:
            True on success. On failure an error is shown and retry is offered.
        """
        self.is_processing = True
        try:
            result = await self.api_client.process_video(self.video_id, self.metadata)
            if not result.get("success"):
                raise ChatbotAPIError(result.get("error") or "Failed to process video")
        except ChatbotAPIError as e:
            logger.warning("video_processing_failed", video_id=self.video_id, error=e.message)
            self.show_error(e.message or "Failed to process video transcript")
            self.can_retry = True
            return False
        finally:
            self.is_processing = False

        self.can_retry = False
        self.chat_enabled = True
        self.add_message(PROCESSED_MESSAGE, "bot")
        return True

    async def retry(self) -> bool:
        """Retry processing after a failure."""
        if not self.can_retry:
            return False
        return await self.process_video()

    async def send_question(self, question: str) -> str | None:
        """Send a question and add the answer to the conversation.

        Returns:
            The answer text, or None if nothing was sent or the call failed.
        """
        question = question.strip()
        if not question or not self.video_id:
            return None

        self.add_message(question, "user")
        try:
            response = await self.api_client.chat(self.video_id, question, self.conversation_id)
        except ChatbotAPIError as e:
            logger.warning("chat_message_failed", video_id=self.video_id, error=e.message)
            self.add_message(CHAT_FAILED_MESSAGE, "bot")
            return None

        self.conversation_id = response.get("conversationId")
        answer = response.get("response", "")
        self.add_message(answer, "bot")
        return answer


def print_message(message: ChatMessage) -> None:
    prefix = "you" if message.role == "user" else "bot"
    print(f"[{prefix}] {message.text}")


async def main(argv: list[str] | None = None) -> int:
    """Run the popup in a terminal against the video at the given URL.

    Returns:
        Process exit code.
    """
    parser = argparse.ArgumentParser(description="Chat with a YouTube video")
    parser.add_argument("url", help="YouTube watch page URL")
    parser.add_argument("--title", help="Video title shown on the page")
    parser.add_argument("--channel", help="Channel name shown on the page")
    args = parser.parse_args(argv)

    if not is_video_page(args.url):
        print("Please navigate to a YouTube video page")
        return 2

    config = get_companion_config()

    async with ChatbotAPIClient(config) as api_client:
        worker = BackgroundWorker(api_client, LocalStorage(config.storage_path))
        watcher = VideoPageWatcher(worker.handle_message)
        await watcher.navigate(args.url, title=args.title, channel=args.channel)

        popup = ChatPopup(api_client, watcher.handle_message, on_message=print_message)
        print(f"\n{watcher.metadata.title} ({watcher.metadata.channel})")
        await popup.open()

        if not popup.video_id:
            return 1

        print("Type a question, /retry to reprocess after a failure, /quit to exit.")
        while True:
            try:
                line = await asyncio.to_thread(input, "> ")
            except EOFError:
                break

            command = line.strip()
            if command == "/quit":
                break
            if command == "/retry":
                if not await popup.retry():
                    print("Nothing to retry")
                continue
            if not popup.chat_enabled:
                print("Video is not processed yet. Use /retry.")
                continue
            await popup.send_question(command)

    return 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
