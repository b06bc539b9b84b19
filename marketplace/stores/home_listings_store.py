"""Home listings store: the two public feeds on the landing page."""
from typing import Iterable, List, Optional, Set, Union

from marketplace.core.exceptions import AppException, NotFoundError
from marketplace.core.logging import get_logger
from marketplace.core.messages import INVALID_FORMAT, payload_message
from marketplace.schemas.publication_schema import PublicationView
from marketplace.services.mapper_service import TitleStrategy, publication_from_dto
from marketplace.stores.base_store import BaseStore, StoreState

logger = get_logger(__name__)

PublicationId = Union[int, str]


class HomeListingsState(StoreState):
    popular_properties: List[PublicationView] = []
    new_listings: List[PublicationView] = []
    is_data_loaded: bool = False


def _transform_and_deduplicate(dtos: Iterable[dict], is_new: bool) -> List[PublicationView]:
    seen: Set[PublicationId] = set()
    result = []
    for dto in dtos:
        publication = publication_from_dto(dto, title=TitleStrategy.GENERATED, is_new=is_new)
        if publication.id in seen:
            continue
        seen.add(publication.id)
        result.append(publication)
    return result


class HomeListingsStore(BaseStore[HomeListingsState]):
    state_class = HomeListingsState

    async def fetch_home_listings(self) -> None:
        """Load popular and latest publications once; later calls are no-ops."""
        if self.state.is_data_loaded:
            return

        self._begin("fetch_home_listings")
        try:
            popular = await self.api.get("/publications/mostPopularPublications", require_auth=False)
            latest = await self.api.get("/publications/lastPublications", require_auth=False)
        except AppException as e:
            message = payload_message(e)
            if message is None:
                if isinstance(e, NotFoundError):
                    message = "No se encontraron publicaciones"
                else:
                    message = "Error al cargar las publicaciones"
            logger.error("Error in fetch_home_listings: %s", message)
            self._fail(message)
            return

        if not isinstance(popular, list) or not isinstance(latest, list):
            logger.error("Home feeds did not return lists")
            self._fail(INVALID_FORMAT)
            return

        self._set(
            popular_properties=_transform_and_deduplicate(popular, is_new=False),
            new_listings=_transform_and_deduplicate(latest, is_new=True),
            loading=False,
            is_data_loaded=True,
        )

    async def refresh_home_listings(self) -> None:
        self._set(is_data_loaded=False)
        await self.fetch_home_listings()

    def update_favorite_status(
        self,
        publication_id: Optional[PublicationId],
        favorited: bool = False,
        favorite_ids: Optional[Set[PublicationId]] = None,
    ) -> None:
        """Mark one card, or sync every card against a full set of favorite ids."""
        def mark(p: PublicationView) -> PublicationView:
            if favorite_ids is not None:
                return p.model_copy(update={"favorited": p.id in favorite_ids})
            if p.id == publication_id:
                return p.model_copy(update={"favorited": favorited})
            return p

        self._set(
            popular_properties=[mark(p) for p in self.state.popular_properties],
            new_listings=[mark(p) for p in self.state.new_listings],
        )
