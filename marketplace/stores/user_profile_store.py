"""Public user profile: only the data its owner authorized."""
from typing import Optional, Union

from marketplace.core.exceptions import AppException
from marketplace.core.logging import get_logger
from marketplace.core.messages import payload_message
from marketplace.schemas.profile_schema import UserProfileView
from marketplace.services.mapper_service import profile_from_dto
from marketplace.stores.base_store import BaseStore, StoreState

logger = get_logger(__name__)


class UserProfileState(StoreState):
    profile: Optional[UserProfileView] = None


class UserProfileStore(BaseStore[UserProfileState]):
    state_class = UserProfileState

    async def fetch_user_profile(self, user_id: Union[int, str]) -> UserProfileView:
        self._begin("fetch_user_profile")
        try:
            body = await self.api.get(f"/user/{user_id}/public-profile", require_auth=False)
        except AppException as e:
            message = payload_message(e) or "Error al cargar el perfil del usuario"
            self._set(loading=False, error=message, profile=None)
            raise

        profile = profile_from_dto(body or {})
        self._set(profile=profile, loading=False, error=None)
        return profile

    def clear_profile(self) -> None:
        self._set(profile=None, error=None)
