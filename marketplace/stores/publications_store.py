"""Publications store: public feed, search, detail, reporting and editing.

Title handling: the server sometimes answers the detail/update endpoints with
a null `propertyTitle` right after an edit. When that happens the title
already cached for the same id (or one supplied by the caller) is kept
instead of blanking the card.
"""
import asyncio
import time
from typing import Any, Dict, List, Optional, Union

from marketplace.core.exceptions import AppException
from marketplace.core.logging import get_logger
from marketplace.core.messages import describe_error
from marketplace.schemas.publication_form_schema import PublicationForm
from marketplace.schemas.publication_schema import PublicationStatus, PublicationView
from marketplace.schemas.report_schema import ReportCreate
from marketplace.services.filter_service import ALL, filter_publications
from marketplace.services.mapper_service import publication_from_dto
from marketplace.services.wizard_service import PublicationWizard
from marketplace.stores.base_store import BaseStore, StoreState

logger = get_logger(__name__)

PublicationId = Union[int, str]


class PublicationsState(StoreState):
    publications: List[PublicationView] = []
    filtered_results: Optional[List[PublicationView]] = None
    last_fetch_time: Optional[float] = None


def _upsert(items: List[PublicationView], publication: PublicationView) -> List[PublicationView]:
    if any(p.id == publication.id for p in items):
        return [publication if p.id == publication.id else p for p in items]
    return [*items, publication]


def _preserve_title(
    publication: PublicationView,
    existing: Optional[PublicationView],
    fallback_title: Optional[str] = None,
) -> PublicationView:
    if publication.property_title:
        return publication
    title = None
    if existing is not None:
        title = existing.property_title or existing.title
    title = title or fallback_title
    if not title:
        return publication
    logger.info("Preserving cached title for publication %s", publication.id,
                extra={"publication_id": publication.id})
    return publication.model_copy(update={"title": title, "property_title": title})


class PublicationsStore(BaseStore[PublicationsState]):
    state_class = PublicationsState

    def active_publications(self) -> List[PublicationView]:
        return [
            p for p in self.state.publications
            if (p.status or "").upper() != PublicationStatus.INACTIVE.value
        ]

    def find(self, publication_id: PublicationId) -> Optional[PublicationView]:
        return next((p for p in self.state.publications if p.id == publication_id), None)

    def search(self, term: str = "", status: str = ALL) -> List[PublicationView]:
        source = self.state.filtered_results
        if source is None:
            source = self.state.publications
        return filter_publications(source, term, status)

    async def fetch_publications(self) -> List[PublicationView]:
        """Load every public publication (token optional)."""
        self._begin("fetch_publications")
        try:
            body = await self.api.get("/publications/All", require_auth=False)
        except AppException as e:
            self._set(
                loading=False,
                error=describe_error(e, "Error al cargar las publicaciones"),
                last_fetch_time=None,
            )
            return []

        publications = [publication_from_dto(dto) for dto in body or []]
        self._set(
            publications=publications,
            filtered_results=publications,
            loading=False,
            error=None,
            last_fetch_time=time.time(),
        )
        logger.info("Loaded %d publications", len(publications))
        return publications

    async def refresh_publications(self) -> List[PublicationView]:
        self._set(last_fetch_time=None)
        return await self.fetch_publications()

    def clear_filters(self) -> None:
        self._set(filtered_results=None)

    async def check_favorite_status(self, publication_id: PublicationId) -> bool:
        try:
            body = await self.api.get(f"/favorites/check/{publication_id}")
        except AppException as e:
            logger.warning("Error checking favorite status: %s", e.message,
                           extra={"publication_id": publication_id})
            return False
        return bool((body or {}).get("isFavorite"))

    async def search_publications(self, filters: Dict[str, Any]) -> List[PublicationView]:
        """Server-side search; empty filter values are not sent."""
        self._begin("search_publications")
        params = {key: value for key, value in filters.items() if value}

        try:
            body = await self.api.get("/publications", params=params)
        except AppException as e:
            self._fail(describe_error(e, "Error al buscar las publicaciones"))
            raise

        dtos = body or []
        favorites = await asyncio.gather(
            *(self.check_favorite_status(dto.get("id")) for dto in dtos)
        )
        results = [
            publication_from_dto(dto, is_new=True, favorited=favorited)
            for dto, favorited in zip(dtos, favorites)
        ]
        self._set(filtered_results=results, loading=False)
        return results

    async def fetch_publication_by_id(
        self,
        publication_id: PublicationId,
        fallback_title: Optional[str] = None,
    ) -> PublicationView:
        """Load one publication and upsert it into the cache."""
        self._begin("fetch_publication_by_id")
        try:
            dto = await self.api.get(
                "/publications/publicationById",
                params={"publicationId": publication_id},
                require_auth=False,
            )
        except AppException as e:
            self._fail(describe_error(e, "Error al cargar la publicación"))
            raise

        publication = publication_from_dto(dto or {}, is_new=True)
        publication = _preserve_title(publication, self.find(publication_id), fallback_title)

        self._set(
            publications=_upsert(self.state.publications, publication),
            loading=False,
            error=None,
        )
        return publication

    async def report_publication(self, report: ReportCreate) -> Any:
        """File a user report against a publication."""
        try:
            body = await self.api.post("/reports/create", json=report.to_payload())
        except AppException as e:
            logger.error("Error reporting publication: %s", e.message,
                         extra={"publication_id": report.publication_id})
            raise
        logger.info("Publication %s reported", report.publication_id,
                    extra={"publication_id": report.publication_id})
        return body

    async def update_publication(
        self,
        publication_id: PublicationId,
        form: PublicationForm,
        *,
        available_times_changed: bool = True,
        files: Optional[list] = None,
    ) -> PublicationView:
        """PUT the edited publication as multipart and refresh the cached copy."""
        self._begin("update_publication")
        fields = form.to_form_fields(available_times_changed)
        upload = [("files", f) for f in files or []]

        try:
            dto = await self.api.put(
                f"/publications/{publication_id}",
                data=fields,
                files=upload or None,
            )
        except AppException as e:
            self._fail(describe_error(e, "Error al actualizar la publicación"))
            raise

        publication = publication_from_dto(dto or {})
        publication = _preserve_title(publication, None, (form.title or "").strip())

        filtered = self.state.filtered_results
        if filtered is not None and any(p.id == publication_id for p in filtered):
            filtered = [publication if p.id == publication_id else p for p in filtered]

        self._set(
            publications=_upsert(self.state.publications, publication),
            filtered_results=filtered,
            loading=False,
            error=None,
        )
        logger.info("Publication %s updated", publication_id,
                    extra={"publication_id": publication_id})
        return publication

    async def submit_wizard(self, publication_id: PublicationId, wizard: PublicationWizard) -> PublicationView:
        """Validate every wizard step and send the edit."""
        form = wizard.submission()
        return await self.update_publication(
            publication_id,
            form,
            available_times_changed=wizard.times_changed(),
            files=wizard.files,
        )
