"""Report resolution state machine.

PENDING ──APPROVE──▶ RESOLVED
PENDING ──DISMISS──▶ REJECTED

RESOLVED and REJECTED are terminal: nothing goes back to PENDING.
UNKNOWN (a status the server added later) is never resolvable from here.
"""
from typing import Union

from marketplace.core.exceptions import InvalidTransitionError
from marketplace.schemas.report_schema import ReportAction, ReportStatus

_TRANSITIONS = {
    ReportAction.APPROVE: ReportStatus.RESOLVED,
    ReportAction.DISMISS: ReportStatus.REJECTED,
}

_SUCCESS_MESSAGES = {
    ReportAction.APPROVE: "Reporte aprobado exitosamente",
    ReportAction.DISMISS: "Reporte descartado exitosamente",
}


def parse_action(action: Union[str, ReportAction]) -> ReportAction:
    try:
        return ReportAction(action)
    except ValueError:
        raise InvalidTransitionError(f"Acción de reporte inválida: {action}")


def next_status(current: Union[str, ReportStatus], action: Union[str, ReportAction]) -> ReportStatus:
    """Target status for `action` applied to a report in `current`."""
    action = parse_action(action)
    try:
        current = ReportStatus(current)
    except ValueError:
        current = ReportStatus.UNKNOWN
    if current is ReportStatus.UNKNOWN:
        raise InvalidTransitionError(
            "El reporte tiene un estado desconocido y no puede resolverse",
            detail={"action": action.value},
        )
    if current is not ReportStatus.PENDING:
        raise InvalidTransitionError(
            f"El reporte ya fue procesado ({current.value})",
            detail={"status": current.value, "action": action.value},
        )
    return _TRANSITIONS[action]


def success_message(action: ReportAction) -> str:
    return _SUCCESS_MESSAGES[action]
