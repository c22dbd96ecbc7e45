from collections.abc import Callable
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")
U = TypeVar("U")


class PaginationResult(BaseModel, Generic[T]):
    """One page of a list endpoint."""

    items: list[T] = Field(..., description="List of items in current page")
    total: int = Field(..., description="Total number of items across all pages", ge=0)
    limit: int = Field(..., description="Maximum items per page", ge=1)
    offset: int = Field(..., description="Number of items skipped", ge=0)

    @property
    def has_more(self) -> bool:
        """Whether there are more items beyond the current page."""
        return self.offset + len(self.items) < self.total

    def map_items(self, func: Callable[[T], U]) -> "PaginationResult[U]":
        """Same page with every item converted, e.g. domain models to views."""
        return PaginationResult(
            items=[func(item) for item in self.items], total=self.total, limit=self.limit, offset=self.offset
        )
