from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """One zero-indexed page of a server-side collection."""
    items: List[T] = []
    current_page: int = Field(0, ge=0)
    total_pages: int = Field(0, ge=0)
    total_elements: int = Field(0, ge=0)
    page_size: Optional[int] = None


class StoreResult(BaseModel):
    """Immediate feedback returned by store mutations."""
    success: bool
    message: Optional[str] = None
    data: Optional[Any] = None

    @property
    def error(self) -> Optional[str]:
        return None if self.success else self.message
