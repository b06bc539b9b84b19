"""Admin publications store: moderation of every publication on the platform.

Update-then-reconcile: `set_status` only touches the cached entry after the
server accepted the change; `moderate` additionally re-fetches the page so
server-computed fields (reportCount, isReported) are current.
"""
from typing import Dict, FrozenSet, List, Optional, Union

from marketplace.config import settings
from marketplace.core.exceptions import AppException
from marketplace.core.logging import get_logger
from marketplace.core.messages import IN_PROGRESS, describe_error
from marketplace.schemas.base_schema import Page, StoreResult
from marketplace.schemas.publication_schema import (
    MODERATION_STATUSES,
    PublicationView,
)
from marketplace.services.filter_service import ALL, filter_publications, publication_stats
from marketplace.services.mapper_service import TitleStrategy, page_from_dto, publication_from_dto
from marketplace.stores.base_store import BaseStore, StoreState

logger = get_logger(__name__)

PublicationId = Union[int, str]


class AdminPublicationsState(StoreState):
    publications: List[PublicationView] = []
    total_pages: int = 0
    current_page: int = 0
    total_elements: int = 0
    page_size: int = settings.admin_page_size
    status_filter: str = ALL
    moderating: FrozenSet[PublicationId] = frozenset()


def _admin_publication(dto: dict) -> PublicationView:
    return publication_from_dto(dto, title=TitleStrategy.PROPERTY_OR_GENERATED)


class AdminPublicationsStore(BaseStore[AdminPublicationsState]):
    state_class = AdminPublicationsState

    @property
    def is_updating(self) -> bool:
        return bool(self.state.moderating)

    async def fetch_all_publications(
        self,
        page: int = 0,
        size: Optional[int] = None,
        status_filter: str = ALL,
    ) -> Page[PublicationView]:
        """Load one page of all publications (active, inactive and reported).

        Replaces the cached page and its metadata in one step. Raises the
        ApiError after recording the message so callers can react.
        """
        current_size = size or self.state.page_size
        self._begin("fetch_all_publications")

        params = {"page": page, "size": current_size}
        if status_filter and status_filter != ALL:
            params["status"] = status_filter

        try:
            body = await self.api.get("/publications/admin/all", params=params)
            result = page_from_dto(body, _admin_publication, page_size=current_size)
        except AppException as e:
            self._fail(describe_error(e, "Error al cargar las publicaciones"))
            raise

        self._set(
            publications=result.items,
            total_pages=result.total_pages,
            current_page=result.current_page,
            total_elements=result.total_elements,
            page_size=current_size,
            status_filter=status_filter or ALL,
            loading=False,
            error=None,
        )
        logger.info(
            "Loaded %d admin publications (page %d/%d)",
            len(result.items),
            result.current_page,
            result.total_pages,
        )
        return result

    async def refresh_publications(self) -> Page[PublicationView]:
        """Re-fetch with the same page, size and status filter."""
        return await self.fetch_all_publications(
            self.state.current_page,
            self.state.page_size,
            self.state.status_filter,
        )

    async def set_status(self, publication_id: PublicationId, new_status: str) -> StoreResult:
        """Change a publication's status to ACTIVE or INACTIVE."""
        new_status = getattr(new_status, "value", new_status)
        if new_status not in MODERATION_STATUSES:
            return StoreResult(success=False, message=f"Estado no permitido: {new_status}")

        if publication_id in self.state.moderating:
            return StoreResult(success=False, message=IN_PROGRESS)

        self._begin("set_status", loading=False)
        self._set(moderating=self.state.moderating | {publication_id})

        try:
            body = await self.api.put(
                f"/publications/admin/{publication_id}/status",
                json={"status": new_status},
            )
        except AppException as e:
            message = describe_error(e, "Error al actualizar el estado")
            logger.warning(
                "Status update failed for publication %s: %s",
                publication_id,
                message,
                extra={"publication_id": publication_id, "status": new_status},
            )
            self._set(
                error=message,
                moderating=self.state.moderating - {publication_id},
            )
            return StoreResult(success=False, message=message)

        self._set(
            publications=[
                p.model_copy(update={"status": new_status}) if p.id == publication_id else p
                for p in self.state.publications
            ],
            moderating=self.state.moderating - {publication_id},
        )
        logger.info(
            "Publication %s set to %s",
            publication_id,
            new_status,
            extra={"publication_id": publication_id, "status": new_status},
        )
        message = (body or {}).get("message") if isinstance(body, dict) else None
        return StoreResult(success=True, message=message or "Estado actualizado exitosamente")

    update_publication_status = set_status

    async def moderate(self, publication_id: PublicationId, new_status: str) -> StoreResult:
        """Admin page flow: change status, then reload the page from the server."""
        result = await self.set_status(publication_id, new_status)
        if result.success:
            try:
                await self.refresh_publications()
            except AppException as e:
                logger.warning("Refresh after moderation failed: %s", e.message)
        return result

    def stats(self) -> Dict[str, int]:
        return publication_stats(self.state.publications)

    def search(self, term: str = "", status: str = ALL) -> List[PublicationView]:
        return filter_publications(self.state.publications, term, status)

    def find(self, publication_id: PublicationId) -> Optional[PublicationView]:
        return next((p for p in self.state.publications if p.id == publication_id), None)

