"""Unit tests for the YouTube service and video id extraction."""

from datetime import datetime
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
from supadata.types import YoutubeVideo

from src.video_pipeline.config import ChatbotConfig
from src.video_pipeline.errors import TranscriptUnavailableError
from src.video_pipeline.youtube_service import (
    YouTubeService,
    extract_video_id,
    is_valid_video_id,
)

VIDEO_ID = "dQw4w9WgXcQ"


class FakeSupadataError(Exception):
    """Stand-in for supadata.SupadataError with the same attributes."""

    def __init__(self, error: str, message: str = ""):
        super().__init__(message or error)
        self.error = error
        self.message = message


@pytest.mark.unit
class TestExtractVideoId:
    """Test suite for extract_video_id."""

    @pytest.mark.parametrize(
        "value",
        [
            VIDEO_ID,
            f"https://www.youtube.com/watch?v={VIDEO_ID}",
            f"https://youtube.com/watch?v={VIDEO_ID}&t=42s",
            f"https://m.youtube.com/watch?feature=share&v={VIDEO_ID}",
            f"https://music.youtube.com/watch?v={VIDEO_ID}",
            f"https://youtu.be/{VIDEO_ID}",
            f"https://youtu.be/{VIDEO_ID}?si=abc",
            f"https://www.youtube.com/embed/{VIDEO_ID}",
            f"https://www.youtube-nocookie.com/embed/{VIDEO_ID}",
            f"https://www.youtube.com/shorts/{VIDEO_ID}",
            f"https://www.youtube.com/live/{VIDEO_ID}",
            f"https://www.youtube.com/v/{VIDEO_ID}",
            f"www.youtube.com/watch?v={VIDEO_ID}",
            f"  youtu.be/{VIDEO_ID}  ",
        ],
    )
    def test_recognized_forms_yield_same_id(self, value: str) -> None:
        """Test every supported form resolves to the same id."""
        assert extract_video_id(value) == VIDEO_ID

    @pytest.mark.parametrize(
        "value",
        [
            None,
            "",
            "not a url",
            "https://example.com/watch?v=dQw4w9WgXcQ",
            "https://www.youtube.com/watch?v=short",
            "https://www.youtube.com/watch",
            "https://www.youtube.com/channel/UCabcdefghijk",
            "https://youtu.be/",
        ],
    )
    def test_unrecognized_input_returns_none(self, value: str | None) -> None:
        """Test invalid inputs produce None."""
        assert extract_video_id(value) is None

    def test_is_valid_video_id(self) -> None:
        """Test the id pattern check."""
        assert is_valid_video_id(VIDEO_ID)
        assert is_valid_video_id("a_b-C123456")
        assert not is_valid_video_id("dQw4w9WgXc")
        assert not is_valid_video_id("dQw4w9WgXc!")
        assert not is_valid_video_id(None)


@pytest.mark.unit
class TestYouTubeService:
    """Test suite for YouTubeService class."""

    @pytest.fixture
    def config(self) -> ChatbotConfig:
        """Create test configuration."""
        return ChatbotConfig(supadata_api_key="test_key", transcript_lang="en")

    @pytest.fixture
    def mock_client(self) -> MagicMock:
        """Create mock Supadata client."""
        return MagicMock()

    @pytest.fixture
    def service(self, config: ChatbotConfig, mock_client: MagicMock) -> YouTubeService:
        """Create service with a mocked Supadata client."""
        with patch(
            "src.video_pipeline.youtube_service.get_supadata_client",
            return_value=mock_client,
        ):
            return YouTubeService(config)

    def test_get_transcript_success(self, service: YouTubeService, mock_client: MagicMock) -> None:
        """Test transcript text and languages are returned."""
        mock_client.youtube.transcript.return_value = SimpleNamespace(
            content="Never gonna give you up.",
            lang="en",
            available_langs=["en", "de"],
        )

        transcript = service.get_transcript(VIDEO_ID)

        assert transcript.video_id == VIDEO_ID
        assert transcript.text == "Never gonna give you up."
        assert transcript.available_langs == ["en", "de"]
        mock_client.youtube.transcript.assert_called_once_with(
            video_id=VIDEO_ID, lang="en", text=True
        )

    def test_get_transcript_joins_segments(
        self, service: YouTubeService, mock_client: MagicMock
    ) -> None:
        """Test segment lists are joined into one text."""
        mock_client.youtube.transcript.return_value = SimpleNamespace(
            content=[SimpleNamespace(text="Hello"), SimpleNamespace(text="world")],
            lang="en",
            available_langs=None,
        )

        transcript = service.get_transcript(VIDEO_ID)

        assert transcript.text == "Hello world"
        assert transcript.available_langs == []

    def test_get_transcript_empty_raises(
        self, service: YouTubeService, mock_client: MagicMock
    ) -> None:
        """Test a blank transcript counts as unavailable."""
        mock_client.youtube.transcript.return_value = SimpleNamespace(
            content="   ", lang="en", available_langs=[]
        )

        with pytest.raises(TranscriptUnavailableError):
            service.get_transcript(VIDEO_ID)

    def test_get_transcript_unavailable_error(
        self, service: YouTubeService, mock_client: MagicMock
    ) -> None:
        """Test Supadata's transcript-unavailable error is translated."""
        mock_client.youtube.transcript.side_effect = FakeSupadataError(
            "transcript-unavailable", "No transcript"
        )

        with (
            patch("src.video_pipeline.youtube_service.SupadataError", FakeSupadataError),
            pytest.raises(TranscriptUnavailableError),
        ):
            service.get_transcript(VIDEO_ID)

    def test_get_transcript_other_error_propagates(
        self, service: YouTubeService, mock_client: MagicMock
    ) -> None:
        """Test other Supadata errors are re-raised unchanged."""
        mock_client.youtube.transcript.side_effect = FakeSupadataError("limit-exceeded", "Slow down")

        with (
            patch("src.video_pipeline.youtube_service.SupadataError", FakeSupadataError),
            pytest.raises(FakeSupadataError),
        ):
            service.get_transcript(VIDEO_ID)

    def test_get_video_info(self, service: YouTubeService, mock_client: MagicMock) -> None:
        """Test video metadata is mapped onto VideoInfo."""
        mock_client.youtube.video.return_value = YoutubeVideo(
            id=VIDEO_ID,
            title="Never Gonna Give You Up",
            channel={"id": "UCuAXFkgsw1L7xaCfnd5JJOw", "name": "Rick Astley"},
            description="Official video",
            view_count=1_000_000,
            duration=213,
            thumbnail="https://i.ytimg.com/vi/dQw4w9WgXcQ/hqdefault.jpg",
            uploaded_date=datetime(2009, 10, 25, 6, 57, 33),
        )

        info = service.get_video_info(VIDEO_ID)

        assert info.id == VIDEO_ID
        assert info.url == f"https://www.youtube.com/watch?v={VIDEO_ID}"
        assert info.title == "Never Gonna Give You Up"
        assert info.channel == "Rick Astley"
        assert info.channel_id == "UCuAXFkgsw1L7xaCfnd5JJOw"
        assert info.view_count == 1_000_000
        assert info.duration_seconds == 213
        assert info.published_at == datetime(2009, 10, 25, 6, 57, 33)

    @pytest.mark.asyncio
    async def test_fetch_video_returns_both(
        self, service: YouTubeService, mock_client: MagicMock
    ) -> None:
        """Test transcript and metadata are fetched together."""
        mock_client.youtube.transcript.return_value = SimpleNamespace(
            content="Some words", lang="en", available_langs=["en"]
        )
        mock_client.youtube.video.return_value = SimpleNamespace(title="A video", channel=None)

        transcript, info = await service.fetch_video(VIDEO_ID)

        assert transcript.text == "Some words"
        assert info.title == "A video"
        assert info.channel is None
