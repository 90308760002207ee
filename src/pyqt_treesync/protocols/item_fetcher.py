"""Item list fetcher protocol for pluggable listing backends."""

from dataclasses import dataclass
from typing import Callable, Hashable, Optional, Protocol, Tuple

SelectionKey = Optional[Hashable]
ItemId = Hashable


@dataclass(frozen=True)
class FetchResult:
    """Outcome of one item list request that reached the server.

    found is False when the server reports no such collection or no matches;
    that is an answer, not a transport failure.
    """
    found: bool
    items: Tuple[ItemId, ...] = ()
    count: int = 0

    @classmethod
    def not_found(cls) -> "FetchResult":
        return cls(found=False)


@dataclass(frozen=True)
class CollectionInfo:
    """One selectable collection as listed by the catalogue endpoint."""
    key: Hashable
    name: str
    description: str = ""


class ItemListFetcher(Protocol):
    """Protocol for services that resolve a selection key into item ids."""

    def fetch_item_list(
        self,
        selection_key: SelectionKey,
        limit_hint: int,
        on_result: Callable[[FetchResult], None],
        on_error: Callable[[Exception], None],
    ) -> None:
        """Start a request; exactly one callback is invoked later on the main thread."""
        ...


_item_fetcher: Optional[ItemListFetcher] = None


def register_item_fetcher(fetcher: Optional[ItemListFetcher]) -> None:
    """Register a global item fetcher implementation."""
    global _item_fetcher
    _item_fetcher = fetcher


def get_item_fetcher() -> Optional[ItemListFetcher]:
    """Get the registered item fetcher implementation."""
    return _item_fetcher
