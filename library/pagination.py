"""Page request / page result value types shared by repositories and routes."""

from __future__ import annotations

import dataclasses
import math
from typing import Callable, Generic, List, TypeVar

T = TypeVar("T")
R = TypeVar("R")


@dataclasses.dataclass(frozen=True)
class PageRequest:
    page: int = 0  # 0-based
    size: int = 20

    @property
    def offset(self) -> int:
        return self.page * self.size


@dataclasses.dataclass
class Page(Generic[T]):
    content: List[T]
    total_elements: int
    request: PageRequest

    @property
    def total_pages(self) -> int:
        if self.request.size <= 0:
            return 0
        return math.ceil(self.total_elements / self.request.size)

    def map(self, func: Callable[[T], R]) -> "Page[R]":
        """Return a page with the same totals and each item converted by *func*."""
        return Page(
            content=[func(item) for item in self.content],
            total_elements=self.total_elements,
            request=self.request,
        )
