"""Shared session collaborator: the single owner of auth state.

Every store and the ApiClient receive the same Session instance explicitly.
Only the ApiClient calls `on_unauthorized()`; stores never log the user out
themselves. Logout is idempotent so simultaneous 401 responses tear the
session down once.
"""
from typing import Callable, List, Optional

from marketplace.core.logging import get_logger

logger = get_logger(__name__)

ADMIN_ROLE = "ROLE_ADMIN"

LogoutListener = Callable[[], None]


class Session:
    """In-memory authentication state: token, user id and role."""

    def __init__(
        self,
        token: Optional[str] = None,
        user_id: Optional[str] = None,
        role: Optional[str] = None,
    ):
        self._token = token
        self.user_id = user_id
        self.role = role
        self._listeners: List[LogoutListener] = []
        self.logout_count = 0

    def get_token(self) -> Optional[str]:
        """Return the bearer token, or None when blank or absent."""
        if not self._token or not isinstance(self._token, str) or not self._token.strip():
            return None
        return self._token

    @property
    def is_authenticated(self) -> bool:
        return self.get_token() is not None

    @property
    def is_admin(self) -> bool:
        return self.is_authenticated and self.role == ADMIN_ROLE

    def login(self, token: str, user_id: Optional[str] = None, role: Optional[str] = None) -> None:
        self._token = token
        self.user_id = user_id
        self.role = role
        logger.info("Session started for user %s", user_id)

    def logout(self) -> None:
        if self._token is None and self.user_id is None and self.role is None:
            return
        self._token = None
        self.user_id = None
        self.role = None
        self.logout_count += 1
        logger.info("Session closed")
        for listener in list(self._listeners):
            listener()

    def on_unauthorized(self) -> None:
        """Called by the HTTP layer when the backend answers 401."""
        if not self.is_authenticated:
            return
        logger.warning("Backend rejected the session token, logging out")
        self.logout()

    def add_logout_listener(self, listener: LogoutListener) -> None:
        self._listeners.append(listener)
