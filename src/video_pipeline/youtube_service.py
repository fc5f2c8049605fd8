"""YouTube service for resolving video ids and fetching transcripts via Supadata."""

import asyncio
import re
from urllib.parse import parse_qs, urlparse

from supadata import SupadataError

from src.utils.clients import get_supadata_client
from src.utils.logging import get_logger

from .config import ChatbotConfig
from .errors import TranscriptUnavailableError
from .schemas import Transcript, VideoInfo

logger = get_logger(__name__)

YOUTUBE_WATCH_URL_TEMPLATE = "https://www.youtube.com/watch?v={video_id}"

VIDEO_ID_RE = re.compile(r"^[A-Za-z0-9_-]{11}$")

# Hosts whose /watch?v=<id> URLs carry the video id in the query string
WATCH_HOSTS = {"youtube.com", "m.youtube.com", "music.youtube.com", "youtube-nocookie.com"}

# Path prefixes that are followed directly by the video id
PATH_PREFIXES = ("embed", "shorts", "live", "v", "watch")


def is_valid_video_id(value: str | None) -> bool:
    """Return True if value looks like an 11-character YouTube video id."""
    return bool(value) and bool(VIDEO_ID_RE.match(value))


def extract_video_id(value: str | None) -> str | None:
    """Extract a YouTube video id from a bare id or a YouTube URL.

    Recognized forms include bare ids, youtube.com/watch?v=ID (desktop,
    mobile and music hosts), youtu.be/ID, and /embed/, /shorts/, /live/,
    /v/ paths. A missing scheme is tolerated.

    Args:
        value: Video id or URL provided by the caller.

    Returns:
        The 11-character video id, or None if the input is not recognized.

    Examples:
        >>> extract_video_id("https://youtu.be/dQw4w9WgXcQ?t=42")
        "dQw4w9WgXcQ"
        >>> extract_video_id("https://example.com/watch?v=dQw4w9WgXcQ")
        None
    """
    if not value:
        return None

    value = value.strip()
    if is_valid_video_id(value):
        return value

    if "://" not in value:
        value = f"https://{value}"

    try:
        parsed = urlparse(value)
    except ValueError:
        return None

    host = (parsed.hostname or "").lower()
    if host.startswith("www."):
        host = host[4:]

    segments = [s for s in parsed.path.split("/") if s]
    candidate: str | None = None

    if host == "youtu.be":
        candidate = segments[0] if segments else None
    elif host in WATCH_HOSTS:
        if parsed.path.rstrip("/") == "/watch":
            candidate = parse_qs(parsed.query).get("v", [None])[0]
        elif len(segments) >= 2 and segments[0] in PATH_PREFIXES:
            candidate = segments[1]

    return candidate if is_valid_video_id(candidate) else None


class YouTubeService:
    """Service for fetching YouTube data via the Supadata API.

    Provides the plain-text transcript and the metadata for a single video.
    The Supadata SDK is synchronous, so the two calls are run in worker
    threads when fetched together.
    """

    def __init__(self, config: ChatbotConfig):
        """Initialize YouTube service with configuration.

        Args:
            config: Configuration object with Supadata API key and language.
        """
        self.config = config
        self.client = get_supadata_client(config)
        logger.info("youtube_service_initialized", lang=config.transcript_lang)

    def get_transcript(self, video_id: str) -> Transcript:
        """Fetch the plain-text transcript for a video.

        Args:
            video_id: YouTube video ID.

        Returns:
            Transcript with full text and language info.

        Raises:
            TranscriptUnavailableError: If the video has no usable transcript.
            SupadataError: If the API request fails for another reason.
        """
        logger.info("fetching_transcript", video_id=video_id)

        try:
            response = self.client.youtube.transcript(
                video_id=video_id,
                lang=self.config.transcript_lang,
                text=True,
            )
        except SupadataError as e:
            if "transcript-unavailable" in f"{e.error} {e.message}".lower():
                logger.warning("transcript_unavailable", video_id=video_id)
                raise TranscriptUnavailableError(
                    "No transcript available for this video"
                ) from e

            logger.exception(
                "transcript_fetch_error",
                video_id=video_id,
                error_type=type(e).__name__,
            )
            raise

        content = response.content
        if isinstance(content, list):
            content = " ".join(segment.text for segment in content)

        if not content or not content.strip():
            logger.warning("transcript_empty", video_id=video_id)
            raise TranscriptUnavailableError("Empty transcript received")

        transcript = Transcript(
            video_id=video_id,
            text=content,
            lang=response.lang,
            available_langs=list(response.available_langs or []),
        )

        logger.info(
            "transcript_fetched",
            video_id=video_id,
            characters=len(content),
            lang=response.lang,
        )
        return transcript

    def get_video_info(self, video_id: str) -> VideoInfo:
        """Fetch title, channel and view metadata for a video.

        Args:
            video_id: YouTube video ID.

        Returns:
            VideoInfo populated from the Supadata video endpoint.

        Raises:
            SupadataError: If the API request fails.
        """
        logger.info("fetching_video_info", video_id=video_id)

        try:
            video = self.client.youtube.video(id=video_id)
        except Exception as e:
            logger.exception(
                "video_info_fetch_error",
                video_id=video_id,
                error_type=type(e).__name__,
            )
            raise

        channel = getattr(video, "channel", None) or {}
        info = VideoInfo(
            id=video_id,
            url=YOUTUBE_WATCH_URL_TEMPLATE.format(video_id=video_id),
            title=getattr(video, "title", "") or "",
            channel=channel.get("name"),
            channel_id=channel.get("id"),
            description=getattr(video, "description", None),
            view_count=getattr(video, "view_count", None),
            duration_seconds=getattr(video, "duration", None),
            thumbnail=getattr(video, "thumbnail", None),
            published_at=getattr(video, "uploaded_date", None),
        )

        logger.info("video_info_fetched", video_id=video_id, title=info.title)
        return info

    async def fetch_video(self, video_id: str) -> tuple[Transcript, VideoInfo]:
        """Fetch transcript and metadata concurrently.

        Args:
            video_id: YouTube video ID.

        Returns:
            Tuple of (Transcript, VideoInfo).

        Raises:
            Exception: Whichever of the two fetches failed first.
        """
        transcript, info = await asyncio.gather(
            asyncio.to_thread(self.get_transcript, video_id),
            asyncio.to_thread(self.get_video_info, video_id),
        )
        return transcript, info
