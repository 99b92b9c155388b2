"""Response cache: de-duplicated dispersal responses keyed by request id."""

import threading
from collections import OrderedDict
from typing import Optional, Protocol, runtime_checkable

from eigenda_client.logging_config import get_logger
from eigenda_client.metrics import metrics
from eigenda_client.status import BlobResponse

logger = get_logger(__name__)


@runtime_checkable
class ResponseCache(Protocol):
    """Storage for dispersal responses.

    Inserting a response whose request id is already cached replaces the
    existing entry.
    """

    capacity: int

    def put(self, response: BlobResponse) -> None:
        ...

    def get(self, request_id: str) -> Optional[BlobResponse]:
        ...

    def __contains__(self, request_id: object) -> bool:
        ...

    def __len__(self) -> int:
        ...


class LruResponseCache:
    """Capacity-bounded cache that evicts the least recently used response.

    Inserts and lookups are serialized by a lock, so one instance can be
    shared by concurrent dispersals.
    """

    def __init__(self, capacity: int = 1024):
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self.capacity = capacity
        self._lock = threading.Lock()
        self._entries: "OrderedDict[str, BlobResponse]" = OrderedDict()

    def put(self, response: BlobResponse) -> None:
        with self._lock:
            key = response.request_id
            if key in self._entries:
                self._entries.move_to_end(key)
            self._entries[key] = response
            while len(self._entries) > self.capacity:
                evicted, _ = self._entries.popitem(last=False)
                metrics.record_cache_eviction()
                logger.debug("Evicted cached response", request_id=evicted)
            metrics.update_cache_size(len(self._entries))

    def get(self, request_id: str) -> Optional[BlobResponse]:
        with self._lock:
            response = self._entries.get(request_id)
            if response is not None:
                self._entries.move_to_end(request_id)
        metrics.record_cache_lookup(response is not None)
        return response

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            metrics.update_cache_size(0)

    def __contains__(self, request_id: object) -> bool:
        with self._lock:
            return request_id in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
