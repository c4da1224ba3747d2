"""Scan requests and the queue the scanner takes them from."""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass
from typing import Callable, Optional

from neutrino_elements.watchitem import WatchItem


@dataclass
class ScanRequest:
    """A request to look for an item from a given block height onwards."""

    client_id: uuid.UUID = uuid.UUID(int=0)
    start_height: int = 0
    item: Optional[WatchItem] = None
    is_persistent: bool = False


ScanRequestOption = Callable[[ScanRequest], None]


def with_watch_item(item: WatchItem) -> ScanRequestOption:
    """Set the item to watch."""

    def apply(request: ScanRequest) -> None:
        request.item = item

    return apply


def with_start_block(height: int) -> ScanRequestOption:
    """Set the height the scan starts from."""

    def apply(request: ScanRequest) -> None:
        request.start_height = height

    return apply


def with_persistent_watch() -> ScanRequestOption:
    """Keep watching the item after it has been found."""

    def apply(request: ScanRequest) -> None:
        request.is_persistent = True

    return apply


def with_request_id(request_id: uuid.UUID) -> ScanRequestOption:
    """Set the id of the client sending the request."""

    def apply(request: ScanRequest) -> None:
        request.client_id = request_id

    return apply


def new_scan_request(*options: ScanRequestOption) -> ScanRequest:
    """Build a request by applying ``options`` to a default one."""
    request = ScanRequest()
    for option in options:
        option(request)
    return request


class ScanRequestQueue:
    """A thread-safe queue of pending scan requests."""

    def __init__(self) -> None:
        self._requests: list[ScanRequest] = []
        self._cond = threading.Condition(threading.Lock())

    def enqueue(self, request: ScanRequest) -> None:
        with self._cond:
            self._requests.append(request)
            self._cond.notify()

    def dequeue_at_height(self, height: int) -> list[ScanRequest]:
        """Remove and return every request starting at ``height``, in order."""
        with self._cond:
            selected = [r for r in self._requests if r.start_height == height]
            self._requests = [r for r in self._requests if r.start_height != height]
            return selected

    def peek(self) -> Optional[ScanRequest]:
        """Return the oldest request without removing it, or None."""
        with self._cond:
            return self._requests[0] if self._requests else None

    def is_empty(self) -> bool:
        with self._cond:
            return not self._requests

    def wait_for_request(self, timeout: Optional[float] = None) -> bool:
        """Block until the queue holds a request; False if ``timeout`` ran out."""
        with self._cond:
            return self._cond.wait_for(lambda: bool(self._requests), timeout)

    def __len__(self) -> int:
        with self._cond:
            return len(self._requests)