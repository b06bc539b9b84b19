"""Reports store: admin moderation of user reports.

Resolution is never patched locally when the refresh works: after the server
accepts APPROVE/DISMISS the whole page is re-fetched, because approving a
report may also change the reported publication server-side.
"""
from typing import Dict, FrozenSet, List, Optional, Union

from marketplace.config import settings
from marketplace.core.exceptions import AppException, InvalidTransitionError
from marketplace.core.logging import get_logger
from marketplace.core.messages import IN_PROGRESS, describe_error
from marketplace.schemas.base_schema import Page, StoreResult
from marketplace.schemas.report_schema import ReportAction, ReportView
from marketplace.services.filter_service import ALL, filter_reports, report_stats
from marketplace.services.mapper_service import page_from_dto, report_from_dto
from marketplace.services.report_workflow import next_status, parse_action, success_message
from marketplace.stores.base_store import BaseStore, StoreState

logger = get_logger(__name__)

ReportId = Union[int, str]


class ReportsState(StoreState):
    reports: List[ReportView] = []
    total_pages: int = 0
    current_page: int = 0
    total_elements: int = 0
    page_size: int = settings.reports_page_size
    status_filter: str = ALL
    resolving: FrozenSet[ReportId] = frozenset()


class ReportsStore(BaseStore[ReportsState]):
    state_class = ReportsState

    async def fetch_reports(
        self,
        page: int = 0,
        size: Optional[int] = None,
        status_filter: str = ALL,
    ) -> Optional[Page[ReportView]]:
        """Load one page of reports, replacing the cached page atomically.

        Failures are recorded in `state.error` (the page offers a retry) and
        None is returned.
        """
        current_size = size or self.state.page_size
        self._begin("fetch_reports")

        params = {"page": page, "size": current_size}
        if status_filter and status_filter != ALL:
            params["status"] = status_filter

        try:
            body = await self.api.get("/reports/admin/all", params=params)
            result = page_from_dto(body, report_from_dto, page_size=current_size)
        except AppException as e:
            message = describe_error(e, "Error al cargar los reportes")
            logger.error("Failed to load reports: %s", message)
            self._fail(message)
            return None

        self._set(
            reports=result.items,
            total_pages=result.total_pages,
            current_page=result.current_page,
            total_elements=result.total_elements,
            page_size=current_size,
            status_filter=status_filter or ALL,
            loading=False,
            error=None,
        )
        return result

    async def refresh_reports(self) -> Optional[Page[ReportView]]:
        return await self.fetch_reports(
            self.state.current_page,
            self.state.page_size,
            self.state.status_filter,
        )

    async def resolve_report(
        self,
        report_id: ReportId,
        action: Union[str, ReportAction],
        feedback: Optional[str] = None,
    ) -> StoreResult:
        """Approve (→ RESOLVED) or dismiss (→ REJECTED) a pending report.

        On failure the report stays PENDING and the result carries the message,
        so the resolution dialog can stay open for a retry.
        """
        try:
            action = parse_action(action)
            cached = self.find(report_id)
            if cached is not None:
                next_status(cached.status, action)
        except InvalidTransitionError as e:
            return StoreResult(success=False, message=e.message)

        if report_id in self.state.resolving:
            return StoreResult(success=False, message=IN_PROGRESS)

        self._set(resolving=self.state.resolving | {report_id})
        payload = {"action": action.value, "feedback": (feedback or "").strip() or None}

        try:
            body = await self.api.put(f"/reports/admin/{report_id}/resolve", json=payload)
        except AppException as e:
            message = describe_error(e, "Error al resolver el reporte")
            logger.warning(
                "Resolving report %s failed: %s",
                report_id,
                message,
                extra={"report_id": report_id},
            )
            self._set(resolving=self.state.resolving - {report_id})
            return StoreResult(success=False, message=message)

        self._set(resolving=self.state.resolving - {report_id})
        logger.info(
            "Report %s resolved with %s",
            report_id,
            action.value,
            extra={"report_id": report_id, "status": action.value},
        )

        refreshed = await self.refresh_reports()
        if refreshed is None:
            # Server accepted the resolution but the list could not be reloaded
            self._patch_status(report_id, action)

        message = (body or {}).get("message") if isinstance(body, dict) else None
        return StoreResult(success=True, message=message or success_message(action))

    resolve = resolve_report

    def _patch_status(self, report_id: ReportId, action: ReportAction) -> None:
        self._set(
            reports=[
                r.model_copy(update=_resolved(r, action))
                if r.id == report_id and not r.is_terminal
                else r
                for r in self.state.reports
            ]
        )

    def stats(self) -> Dict[str, int]:
        return report_stats(self.state.reports)

    def search(self, term: str = "", status: str = ALL) -> List[ReportView]:
        return filter_reports(self.state.reports, term, status)

    def find(self, report_id: ReportId) -> Optional[ReportView]:
        return next((r for r in self.state.reports if r.id == report_id), None)


def _resolved(report: ReportView, action: ReportAction) -> dict:
    status = next_status(report.status, action)
    return {"status": status, "raw_status": status.value}
