"""Client-side search, status filters and stats over the currently loaded page.

These never hit the server: they only narrow what a store already holds.
"""
from typing import Any, Dict, Iterable, List, Optional

from marketplace.schemas.publication_schema import PublicationStatus, PublicationView
from marketplace.schemas.report_schema import ReportStatus, ReportView
from marketplace.services.mapper_service import display_status

ALL = "ALL"


def _contains(value: Any, needle: str) -> bool:
    if value is None:
        return False
    return needle in str(value).lower()


def _status_value(status: Any) -> Optional[str]:
    return getattr(status, "value", status)


def filter_publications(
    publications: Iterable[PublicationView],
    term: str = "",
    status: str = ALL,
) -> List[PublicationView]:
    """Match free text against title/description/publisher/location/id."""
    items = list(publications)

    status = _status_value(status) or ALL
    if status != ALL:
        items = [p for p in items if display_status(p) == status or p.status == status]

    needle = (term or "").strip().lower()
    if not needle:
        return items

    return [
        p for p in items
        if _contains(p.title, needle)
        or _contains(p.description, needle)
        or _contains(p.publisher_name, needle)
        or _contains(p.location, needle)
        or _contains(p.id, needle)
    ]


def filter_reports(
    reports: Iterable[ReportView],
    term: str = "",
    status: str = ALL,
) -> List[ReportView]:
    """Match free text against reason/description/reporter/publication id/id."""
    items = list(reports)

    status = _status_value(status) or ALL
    if status != ALL:
        items = [r for r in items if r.status.value == status]

    needle = (term or "").strip().lower()
    if not needle:
        return items

    return [
        r for r in items
        if _contains(r.reason, needle)
        or _contains(r.description, needle)
        or _contains(r.reporter_name, needle)
        or _contains(r.publication_id, needle)
        or _contains(r.id, needle)
    ]


def publication_stats(publications: Iterable[PublicationView]) -> Dict[str, int]:
    items = list(publications)
    return {
        "active": sum(1 for p in items if p.status == PublicationStatus.ACTIVE.value),
        "inactive": sum(1 for p in items if p.status == PublicationStatus.INACTIVE.value),
        "reported": sum(
            1 for p in items
            if p.status == PublicationStatus.REPORTED.value or p.is_reported
        ),
        "total": len(items),
    }


def report_stats(reports: Iterable[ReportView]) -> Dict[str, int]:
    items = list(reports)
    return {
        "pending": sum(1 for r in items if r.status == ReportStatus.PENDING),
        "resolved": sum(1 for r in items if r.status == ReportStatus.RESOLVED),
        "rejected": sum(1 for r in items if r.status == ReportStatus.REJECTED),
        "total": len(items),
    }
