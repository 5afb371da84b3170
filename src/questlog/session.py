"""Login session.

Sign-in is simulated: no credentials are checked. The session only records
that the user is logged in and which store user id their data belongs to.
The id comes from QUESTLOG_USER_ID.
"""

import logging
import os

from questlog.models import LoginForm, SessionState, SignupForm
from questlog.storage import Storage

logger = logging.getLogger(__name__)

DEFAULT_AUTH_DELAY = 1.0


class SessionError(Exception):
    """Raised when the session cannot be used."""

    pass


def auth_delay() -> float:
    """Seconds a simulated sign-in takes (QUESTLOG_AUTH_DELAY)."""
    try:
        return float(os.getenv("QUESTLOG_AUTH_DELAY", DEFAULT_AUTH_DELAY))
    except ValueError:
        return DEFAULT_AUTH_DELAY


class Session:
    """Login state, persisted between runs."""

    def __init__(self, storage: Storage | None = None, user_id: str | None = None):
        self.storage = storage or Storage()
        self.default_user_id = user_id or os.getenv("QUESTLOG_USER_ID")
        self.state = self.storage.load_session()

    @property
    def is_logged_in(self) -> bool:
        return self.state.logged_in and self.state.user_id is not None

    @property
    def user_id(self) -> str | None:
        return self.state.user_id if self.state.logged_in else None

    def require_user(self) -> str:
        """Return the logged-in user's id or raise SessionError."""
        if not self.is_logged_in:
            raise SessionError("You need to log in first.")
        return self.state.user_id

    def login(self, form: LoginForm) -> SessionState:
        """Mark the session as logged in for the configured user."""
        if not self.default_user_id:
            raise SessionError(
                "No user configured. Set QUESTLOG_USER_ID environment variable."
            )
        logger.info("Logging in as %s", form.email)
        self.state = SessionState(logged_in=True, user_id=self.default_user_id, email=form.email)
        self.storage.save_session(self.state)
        return self.state

    def signup(self, form: SignupForm) -> None:
        """Accept a sign-up; the user still has to log in afterwards."""
        logger.info("Signing up %s as %s", form.email, form.username)

    def logout(self) -> None:
        self.state = SessionState()
        self.storage.clear_session()
