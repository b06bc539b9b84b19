"""Favorites store: the authenticated user's favorite publications.

Two toggle flavours:
- toggle_favorite: waits for the server and trusts its answer
- toggle_favorite_optimistic: removes the card immediately, then confirms;
  any failure restores favorites/total_elements/total_pages/current_page
  exactly as they were

`pending_toggles` makes the optimistic toggle exclusive per publication id:
a second call for the same id while the first is in flight is refused
without touching the network.
"""
import math
from typing import FrozenSet, List, Set, Union

from marketplace.config import settings
from marketplace.core.exceptions import AppException
from marketplace.core.logging import get_logger
from marketplace.core.messages import IN_PROGRESS, MISSING_TOKEN, describe_error
from marketplace.schemas.base_schema import Page, StoreResult
from marketplace.schemas.publication_schema import PublicationView
from marketplace.services.mapper_service import favorite_from_dto, page_from_dto
from marketplace.services.optimistic import OptimisticUpdate
from marketplace.stores.base_store import BaseStore, StoreState

logger = get_logger(__name__)

PublicationId = Union[int, str]

TOGGLE_FORBIDDEN = "No tienes permiso para realizar esta acción. Por favor, verifica tu sesión."
TOGGLE_NOT_FOUND = "La publicación no fue encontrada."
FETCH_FORBIDDEN = "No tienes permiso para acceder a esta información."
NOT_IN_FAVORITES = "Propiedad no encontrada"

# Fields restored on rollback
_SNAPSHOT_FIELDS = ("favorites", "total_elements", "total_pages", "current_page")


class FavoritesState(StoreState):
    favorites: List[PublicationView] = []
    total_pages: int = 0
    current_page: int = 0
    total_elements: int = 0
    pending_toggles: FrozenSet[PublicationId] = frozenset()


class FavoritesStore(BaseStore[FavoritesState]):
    state_class = FavoritesState

    async def fetch_favorites(self, page: int = 0) -> Page[PublicationView] | None:
        if self.session.get_token() is None:
            self._fail(MISSING_TOKEN)
            return None

        self._begin("fetch_favorites")
        try:
            body = await self.api.get("/favorites/my-favorites", params={"page": page})
            result = page_from_dto(body, favorite_from_dto)
        except AppException as e:
            message = describe_error(e, "Error al cargar favoritos", forbidden=FETCH_FORBIDDEN)
            logger.error("Error fetching favorites: %s", message)
            self._fail(message)
            return None

        self._set(
            favorites=result.items,
            total_pages=result.total_pages,
            current_page=result.current_page,
            total_elements=result.total_elements,
            loading=False,
            error=None,
        )
        return result

    async def refresh_favorites(self) -> Page[PublicationView] | None:
        return await self.fetch_favorites(self.state.current_page)

    def favorite_ids(self) -> Set[PublicationId]:
        return {f.id for f in self.state.favorites}

    async def _post_toggle(self, publication_id: PublicationId):
        return await self.api.post("/favorites/toggle", json={"publicationId": publication_id})

    def _toggle_error(self, exc: Exception) -> str:
        return describe_error(
            exc,
            "Error al actualizar favoritos",
            forbidden=TOGGLE_FORBIDDEN,
            not_found=TOGGLE_NOT_FOUND,
        )

    async def toggle_favorite(self, publication_id: PublicationId) -> StoreResult:
        """Flip membership and trust the server's answer."""
        if self.session.get_token() is None:
            return StoreResult(success=False, message=MISSING_TOKEN)

        try:
            body = await self._post_toggle(publication_id)
        except AppException as e:
            message = self._toggle_error(e)
            logger.warning(
                "Error toggling favorite: %s",
                message,
                extra={"publication_id": publication_id},
            )
            return StoreResult(success=False, message=message)

        return StoreResult(success=True, data=body)

    async def toggle_favorite_optimistic(self, publication_id: PublicationId) -> StoreResult:
        """Remove from the favorites page now, confirm with the server, roll back on failure."""
        if self.session.get_token() is None:
            return StoreResult(success=False, message=MISSING_TOKEN)

        if publication_id in self.state.pending_toggles:
            return StoreResult(success=False, message=IN_PROGRESS)

        favorites = self.state.favorites
        if not any(f.id == publication_id for f in favorites):
            return StoreResult(success=False, message=NOT_IN_FAVORITES)

        update = OptimisticUpdate(self, _SNAPSHOT_FIELDS)

        remaining = [f for f in favorites if f.id != publication_id]
        total_elements = max(0, self.state.total_elements - 1)
        total_pages = math.ceil(total_elements / settings.favorites_page_size)
        current_page = self.state.current_page
        if not remaining and current_page > 0:
            current_page -= 1

        update.apply(
            favorites=remaining,
            total_elements=total_elements,
            total_pages=total_pages,
            current_page=current_page,
        )
        self._set(pending_toggles=self.state.pending_toggles | {publication_id})

        try:
            body = await self._post_toggle(publication_id)
        except AppException as e:
            update.rollback()
            message = self._toggle_error(e)
            logger.warning(
                "Optimistic favorite toggle reverted: %s",
                message,
                extra={"publication_id": publication_id},
            )
            return StoreResult(success=False, message=message)
        finally:
            self._set(pending_toggles=self.state.pending_toggles - {publication_id})

        update.commit()
        return StoreResult(success=True, data=body)
