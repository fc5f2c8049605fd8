"""Error types raised by the video chatbot pipeline.

Each error carries the HTTP status code the API reports it with, so the
endpoints can pass collaborator failures through without re-classifying them.
"""


class ChatbotError(Exception):
    """Base class for pipeline errors with an associated HTTP status."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidVideoError(ChatbotError):
    """The request did not resolve to a valid YouTube video id."""

    status_code = 400


class TranscriptUnavailableError(ChatbotError):
    """The video has no transcript (captions disabled or empty)."""

    status_code = 404


class VideoFetchError(ChatbotError):
    """Fetching the transcript or video metadata failed."""

    status_code = 404


class VideoNotProcessedError(ChatbotError):
    """The video's vector namespace holds no vectors yet."""

    status_code = 404


class ChunkingError(ChatbotError):
    """Splitting the transcript produced no chunks."""

    status_code = 500


class IndexNotReadyError(ChatbotError):
    """The vector index did not become ready before the timeout expired."""

    status_code = 503
