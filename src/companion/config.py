"""Configuration for the companion client."""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()


class CompanionConfig(BaseModel):
    """Companion settings loaded from environment variables."""

    api_base_url: str = Field(
        default_factory=lambda: os.getenv(
            "CHATBOT_API_BASE_URL", "http://localhost:8030/api/chatbot"
        ).rstrip("/")
    )
    storage_path: Path = Field(
        default_factory=lambda: Path(
            os.getenv("CHATBOT_STORAGE_PATH", "~/.youtube-chatbot/storage.json")
        ).expanduser()
    )
    request_timeout: float = Field(
        default_factory=lambda: float(os.getenv("CHATBOT_REQUEST_TIMEOUT", "120"))
    )


def get_companion_config() -> CompanionConfig:
    """Get companion configuration from environment."""
    return CompanionConfig()
