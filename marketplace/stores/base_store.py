"""Shared plumbing for client-side stores.

A store owns one pydantic `state` object and replaces it wholesale on every
change (`_set`), so a reader never observes a half-applied update.
"""
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel

from marketplace.api.client import ApiClient
from marketplace.core.logging import begin_action, get_logger
from marketplace.core.session import Session

logger = get_logger(__name__)

S = TypeVar("S", bound=BaseModel)


class StoreState(BaseModel):
    loading: bool = False
    error: Optional[str] = None


class BaseStore(Generic[S]):
    state_class: type

    def __init__(self, api: ApiClient):
        self.api = api
        self.state: S = self.state_class()

    @property
    def session(self) -> Session:
        return self.api.session

    def _set(self, **changes: Any) -> None:
        self.state = self.state.model_copy(update=changes)

    def _begin(self, action: str, *, loading: bool = True) -> str:
        """Start a store action: new correlation id, error cleared.

        Per-item actions pass `loading=False` and track progress in their own
        state field, so `loading` keeps describing the page fetch.
        """
        cid = begin_action(f"{type(self).__name__}.{action}")
        logger.debug("%s.%s started", type(self).__name__, action)
        if loading:
            self._set(loading=True, error=None)
        else:
            self._set(error=None)
        return cid

    def _fail(self, message: str) -> None:
        self._set(loading=False, error=message)

    def reset(self) -> None:
        self.state = self.state_class()
