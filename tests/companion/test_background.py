"""Unit tests for the companion background worker."""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.companion.api_client import ChatbotAPIError
from src.companion.background import BackgroundWorker
from src.companion.messages import ExtensionMessage, MessageType
from src.companion.storage import LocalStorage

VIDEO_ID = "dQw4w9WgXcQ"


@pytest.mark.unit
class TestBackgroundWorker:
    """Test suite for BackgroundWorker class."""

    @pytest.fixture
    def api_client(self) -> MagicMock:
        """Create mock API client."""
        client = MagicMock()
        client.process_video = AsyncMock(return_value={"success": True, "chunksCount": 7})
        client.chat = AsyncMock(
            return_value={
                "success": True,
                "response": "An answer.",
                "sources": 2,
                "conversationId": "conv_1",
            }
        )
        client.check_video_status = AsyncMock(return_value={"videoId": VIDEO_ID, "processed": True})
        return client

    @pytest.fixture
    def storage(self, tmp_path: Path) -> LocalStorage:
        """Create storage in a temporary directory."""
        return LocalStorage(tmp_path / "storage.json")

    @pytest.fixture
    def worker(self, api_client: MagicMock, storage: LocalStorage) -> BackgroundWorker:
        """Create worker with mocked API client."""
        return BackgroundWorker(api_client, storage)

    @pytest.mark.asyncio
    async def test_video_changed_stores_current_video(
        self, worker: BackgroundWorker, storage: LocalStorage
    ) -> None:
        """Test the current video is kept and persisted."""
        response = await worker.handle_message(
            {"type": "VIDEO_CHANGED", "videoId": VIDEO_ID, "metadata": {"title": "Song"}}
        )

        assert response == {"success": True}
        stored = storage.get("currentVideo")
        assert stored["videoId"] == VIDEO_ID
        assert stored["metadata"] == {"title": "Song"}

        current = await worker.handle_message({"type": "GET_CURRENT_VIDEO"})
        assert current["videoData"]["videoId"] == VIDEO_ID

    @pytest.mark.asyncio
    async def test_process_video_records_completion(
        self, worker: BackgroundWorker, storage: LocalStorage
    ) -> None:
        """Test a successful run records the chunk count."""
        response = await worker.handle_message(
            ExtensionMessage(type=MessageType.PROCESS_VIDEO, video_id=VIDEO_ID)
        )

        assert response["success"] is True
        assert response["message"] == "Video processed successfully"
        record = storage.get(f"processed_{VIDEO_ID}")
        assert record["status"] == "completed"
        assert record["chunksCount"] == 7

    @pytest.mark.asyncio
    async def test_process_video_records_failure(
        self, worker: BackgroundWorker, api_client: MagicMock, storage: LocalStorage
    ) -> None:
        """Test a failed run records the error."""
        api_client.process_video.side_effect = ChatbotAPIError(
            "No transcript available for this video", 404
        )

        response = await worker.handle_message(
            ExtensionMessage(type=MessageType.PROCESS_VIDEO, video_id=VIDEO_ID)
        )

        assert response == {"success": False, "error": "No transcript available for this video"}
        record = storage.get(f"processed_{VIDEO_ID}")
        assert record["status"] == "failed"
        assert record["error"] == "No transcript available for this video"

    @pytest.mark.asyncio
    async def test_chat_appends_history(
        self, worker: BackgroundWorker, api_client: MagicMock
    ) -> None:
        """Test each exchange appends a user and an assistant turn."""
        for _ in range(2):
            response = await worker.handle_message(
                ExtensionMessage(
                    type=MessageType.SEND_CHAT_MESSAGE, video_id=VIDEO_ID, message="Why?"
                )
            )

        assert response["response"] == "An answer."
        assert response["sources"] == 2
        history = worker.get_chat_history(VIDEO_ID)
        assert [turn["type"] for turn in history] == ["user", "assistant", "user", "assistant"]
        assert history[1]["message"] == "An answer."
        assert history[1]["sources"] == 2
        api_client.chat.assert_awaited_with(VIDEO_ID, "Why?")

    @pytest.mark.asyncio
    async def test_chat_failure_keeps_history(
        self, worker: BackgroundWorker, api_client: MagicMock
    ) -> None:
        """Test failed chats are reported and not recorded."""
        api_client.chat.side_effect = ChatbotAPIError("Video not processed yet.", 404)

        response = await worker.handle_message(
            {"type": "SEND_CHAT_MESSAGE", "videoId": VIDEO_ID, "message": "Why?"}
        )

        assert response == {"success": False, "error": "Video not processed yet."}
        assert worker.get_chat_history(VIDEO_ID) == []

    @pytest.mark.asyncio
    async def test_check_video_status(self, worker: BackgroundWorker) -> None:
        """Test status is forwarded from the backend."""
        response = await worker.handle_message(
            {"type": "CHECK_VIDEO_STATUS", "videoId": VIDEO_ID}
        )

        assert response == {"success": True, "processed": True}

    @pytest.mark.asyncio
    async def test_open_chat_stores_request(
        self, worker: BackgroundWorker, storage: LocalStorage
    ) -> None:
        """Test open chat records the chat request."""
        response = await worker.handle_message({"type": "OPEN_CHAT", "videoId": VIDEO_ID})

        assert response == {"success": True}
        assert storage.get("chatRequest")["videoId"] == VIDEO_ID

    @pytest.mark.asyncio
    async def test_unknown_message_type(self, worker: BackgroundWorker) -> None:
        """Test unknown types get an error response."""
        response = await worker.handle_message({"type": "SELF_DESTRUCT"})

        assert response == {"success": False, "error": "Unknown message type"}

    @pytest.mark.asyncio
    async def test_malformed_message_returns_error(
        self, worker: BackgroundWorker, api_client: MagicMock
    ) -> None:
        """Test a wire dict that fails validation is answered with an error."""
        response = await worker.handle_message({"videoId": VIDEO_ID, "message": 42})

        assert response["success"] is False
        assert response["error"]
        api_client.process_video.assert_not_called()
        api_client.chat.assert_not_called()

    def test_clear_chat_history(self, worker: BackgroundWorker, storage: LocalStorage) -> None:
        """Test a video's history can be cleared."""
        storage.set({f"chat_{VIDEO_ID}": [{"type": "user", "message": "Hi"}]})

        worker.clear_chat_history(VIDEO_ID)

        assert worker.get_chat_history(VIDEO_ID) == []
