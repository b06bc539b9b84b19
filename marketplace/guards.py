"""Route guards: gate pages on the shared session's auth and role state."""
from typing import Optional

from pydantic import BaseModel

from marketplace.core.session import Session

LOGIN_REQUIRED = "Debes iniciar sesión para acceder a esta página"
ADMIN_REQUIRED = "No tienes permisos para acceder a esta página"


class GuardDecision(BaseModel):
    allowed: bool
    redirect_to: Optional[str] = None
    message: Optional[str] = None


def require_authenticated(session: Session) -> GuardDecision:
    if not session.is_authenticated:
        return GuardDecision(allowed=False, redirect_to="/login", message=LOGIN_REQUIRED)
    return GuardDecision(allowed=True)


def require_admin(session: Session) -> GuardDecision:
    """Anonymous users go to /login; authenticated non-admins go home."""
    decision = require_authenticated(session)
    if not decision.allowed:
        return decision
    if not session.is_admin:
        return GuardDecision(allowed=False, redirect_to="/", message=ADMIN_REQUIRED)
    return GuardDecision(allowed=True)
