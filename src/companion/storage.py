"""JSON-file key/value storage for companion state."""

import json
from pathlib import Path
from typing import Any

CURRENT_VIDEO_KEY = "currentVideo"
CHAT_REQUEST_KEY = "chatRequest"


def processed_key(video_id: str) -> str:
    """Storage key holding the processing outcome for a video."""
    return f"processed_{video_id}"


def chat_key(video_id: str) -> str:
    """Storage key holding the chat history for a video."""
    return f"chat_{video_id}"


class LocalStorage:
    """Persistent key/value store backed by a single JSON file.

    The file is read on every access so separate processes (worker and
    popup) see each other's writes.
    """

    def __init__(self, path: Path | str):
        """Initialize storage.

        Args:
            path: JSON file to read and write. Created on first write.
        """
        self.path = Path(path)

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        content = self.path.read_text(encoding="utf-8")
        return json.loads(content) if content.strip() else {}

    def _save(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        tmp_path.replace(self.path)

    def get(self, key: str, default: Any = None) -> Any:
        """Return the stored value for key, or default when absent."""
        return self._load().get(key, default)

    def set(self, items: dict[str, Any]) -> None:
        """Store several keys at once."""
        data = self._load()
        data.update(items)
        self._save(data)

    def remove(self, key: str) -> None:
        """Delete key if it is stored."""
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)
