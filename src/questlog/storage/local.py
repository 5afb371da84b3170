"""Local file-based storage for client-side state."""

import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path

from pydantic import ValidationError

from questlog.models import SessionState

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path.home() / ".questlog"


def default_data_dir() -> Path:
    """Data directory, overridable with QUESTLOG_DATA_DIR."""
    env_dir = os.getenv("QUESTLOG_DATA_DIR")
    return Path(env_dir) if env_dir else DEFAULT_DATA_DIR


class Storage:
    """File-based storage for the login session."""

    def __init__(self, data_dir: Path | str | None = None):
        self.data_dir = Path(data_dir) if data_dir else default_data_dir()
        self.data_dir.mkdir(parents=True, exist_ok=True)

        self.session_path = self.data_dir / "session.json"

    def load_session(self) -> SessionState:
        """Load the session from disk, or start logged out.

        A corrupted or outdated file is treated as logged out.
        """
        if self.session_path.exists():
            try:
                with open(self.session_path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                    return SessionState.model_validate(data)
            except (json.JSONDecodeError, ValidationError) as e:
                logger.warning("Ignoring unreadable session file %s: %s", self.session_path, e)
                return SessionState()
        return SessionState()

    def save_session(self, state: SessionState) -> None:
        """Save the session to disk."""
        state.updated_at = datetime.now(timezone.utc)
        with open(self.session_path, "w", encoding="utf-8") as f:
            json.dump(state.model_dump(mode="json"), f, indent=2, default=str)

    def clear_session(self) -> None:
        """Remove the stored session."""
        if self.session_path.exists():
            self.session_path.unlink()
