"""
HTTP item list fetcher.

Resolves a selection key into an ordered list of item ids with one GET
against the listing service, running the blocking request on a worker
thread and delivering the outcome on the Qt main thread.

Response contract of the item endpoint:
    200 {"success": true, "count": 3, "product_ids": [10, 20, 30], ...}
    404 no such collection, or no items in it  -> FetchResult(found=False)
    other non-2xx / network failure            -> TransportError
"""

import logging
from typing import Any, Callable, List, Optional

import httpx

from pyqt_treesync.core import BackgroundTaskPool
from pyqt_treesync.io.exceptions import TransportError
from pyqt_treesync.protocols import (
    CollectionInfo,
    FetchResult,
    SelectionKey,
    TreeSyncConfig,
    get_sync_config,
)

logger = logging.getLogger(__name__)


class HttpItemListFetcher:
    """ItemListFetcher backed by httpx.

    Usage:
        fetcher = HttpItemListFetcher(base_url="https://shop.example")
        register_item_fetcher(fetcher)

        # Blocking variant (worker threads, tests):
        result = fetcher.request_item_list(5, limit_hint=8)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        client: Optional[httpx.Client] = None,
        config: Optional[TreeSyncConfig] = None,
    ):
        self._config = config or get_sync_config()
        self._base_url = base_url if base_url is not None else self._config.base_url
        self._client = client
        self._tasks = BackgroundTaskPool()

    @property
    def client(self) -> httpx.Client:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                base_url=self._base_url,
                headers={"Accept": "application/json"},
                timeout=httpx.Timeout(self._config.fetch_timeout_s),
                follow_redirects=True,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    # ---------- Blocking requests ----------

    def request_item_list(self, selection_key: SelectionKey, limit_hint: int) -> FetchResult:
        """Fetch the item ids for one selection key.

        Raises:
            TransportError: network failure, timeout, unexpected status or body
        """
        path = self._config.items_endpoint.format(key=selection_key)
        params = {"return_ids_only": "true", "limit": limit_hint}
        logger.debug(f"GET {path} params={params}")

        response = self._get(path, params=params)
        if response.status_code == 404:
            logger.info(f"No items for selection {selection_key!r} (404)")
            return FetchResult.not_found()

        data = self._decode(response)
        ids = data.get(self._config.ids_field) if isinstance(data, dict) else None
        if not isinstance(data, dict) or not data.get("success") or not isinstance(ids, list):
            logger.info(f"No item ids in response for selection {selection_key!r}")
            return FetchResult.not_found()

        items = tuple(ids)
        count = data.get("count", len(items))
        if not isinstance(count, int) or isinstance(count, bool):
            count = len(items)

        logger.debug(f"Received {len(items)} item ids for selection {selection_key!r}: {list(items)}")
        return FetchResult(found=True, items=items, count=count)

    def request_collections(self) -> List[CollectionInfo]:
        """Fetch the collection catalogue used for display names."""
        response = self._get(self._config.collections_endpoint)
        data = self._decode(response)

        if not isinstance(data, dict) or not data.get("success") or not isinstance(data.get("data"), list):
            logger.warning("No collections found or invalid response format")
            return []

        collections = []
        for entry in data["data"]:
            if not isinstance(entry, dict) or "id" not in entry:
                continue
            key = entry["id"]
            collections.append(CollectionInfo(
                key=key,
                name=entry.get("name") or self._config.collection_label_template.format(key=key),
                description=entry.get("description") or "",
            ))
        return collections

    # ---------- Asynchronous (ItemListFetcher protocol) ----------

    def fetch_item_list(
        self,
        selection_key: SelectionKey,
        limit_hint: int,
        on_result: Callable[[FetchResult], None],
        on_error: Callable[[Exception], None],
    ) -> None:
        """Run request_item_list on a worker thread."""
        self._tasks.run(
            target=self.request_item_list,
            args=(selection_key, limit_hint),
            on_success=on_result,
            on_error=on_error,
        )

    def fetch_collections(
        self,
        on_result: Callable[[List[CollectionInfo]], None],
        on_error: Callable[[Exception], None],
    ) -> None:
        """Run request_collections on a worker thread."""
        self._tasks.run(target=self.request_collections, on_success=on_result, on_error=on_error)

    def cleanup(self) -> None:
        """Wait for outstanding requests and close the client."""
        self._tasks.cleanup()
        self.close()

    # ---------- Helpers ----------

    def _get(self, path: str, params: Optional[dict] = None) -> httpx.Response:
        try:
            return self.client.get(path, params=params)
        except httpx.TimeoutException as err:
            raise TransportError(f"Request timed out: {path}") from err
        except httpx.HTTPError as err:
            raise TransportError(f"Request failed: {err}") from err

    def _decode(self, response: httpx.Response) -> Any:
        if not response.is_success:
            raise TransportError(f"HTTP error! status: {response.status_code}", response.status_code)
        try:
            return response.json()
        except ValueError as err:
            raise TransportError("Invalid response format from listing service", response.status_code) from err
