"""Scans blocks for watched items using compact block filters."""

from __future__ import annotations

import abc
import logging
import queue
import threading
import uuid
from dataclasses import dataclass, field
from typing import Optional, Sequence

from neutrino_elements.gcs import derive_key
from neutrino_elements.repository import (
    BlockHeaderRepository,
    FilterKey,
    FilterNotFoundError,
    FilterRepository,
    FilterType,
)
from neutrino_elements.request import (
    ScanRequest,
    ScanRequestOption,
    ScanRequestQueue,
    new_scan_request,
    with_persistent_watch,
    with_request_id,
    with_start_block,
    with_watch_item,
)
from neutrino_elements.watchitem import Transaction

_log = logging.getLogger(__name__)

_IDLE_INTERVAL = 0.05


class BlockServiceBlockNotFoundError(LookupError):
    """Raised by a block service that cannot find a block."""

    def __init__(self, message: str = "block not found") -> None:
        super().__init__(message)


@dataclass
class Block:
    """A block's height and transactions."""

    height: int
    transactions: list[Transaction] = field(default_factory=list)


class BlockService(abc.ABC):
    """Fetches full blocks by hash."""

    @abc.abstractmethod
    def get_block(self, block_hash: bytes) -> Block:
        """Return the block or raise BlockServiceBlockNotFoundError."""


@dataclass
class Report:
    """A transaction found for a request, and where it was found."""

    transaction: Transaction
    block_hash: bytes
    block_height: int
    request: ScanRequest


class Scanner:
    """Resolves scan requests in a background thread and reports matches."""

    def __init__(
        self,
        filter_db: FilterRepository,
        header_db: BlockHeaderRepository,
        block_service: BlockService,
        genesis_hash: bytes,
    ) -> None:
        self._filter_db = filter_db
        self._header_db = header_db
        self._block_service = block_service
        self._genesis_hash = bytes(genesis_hash)
        self._queue = ScanRequestQueue()
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def started(self) -> bool:
        return self._thread is not None

    def start(self) -> "queue.Queue[Report]":
        """Start resolving requests; return the queue reports are put on."""
        _log.debug("scanner: starting scanner ...")
        with self._lock:
            if self._thread is not None:
                raise RuntimeError("scanner already started")
            self._stop_event = threading.Event()
            reports: queue.Queue[Report] = queue.Queue()
            self._thread = threading.Thread(
                target=self._requests_manager,
                args=(reports, self._stop_event),
                name="scanner",
                daemon=True,
            )
            self._thread.start()
        return reports

    def stop(self) -> None:
        """Stop the background thread and wait for it to finish."""
        _log.debug("scanner: stopping scanner ...")
        with self._lock:
            thread, self._thread = self._thread, None
            if thread is None:
                return
            self._stop_event.set()
        thread.join()

    def watch(self, *options: ScanRequestOption) -> ScanRequest:
        """Queue a new request built from ``options``."""
        request = new_scan_request(*options)
        self._queue.enqueue(request)
        return request

    def _requests_manager(
        self, reports: "queue.Queue[Report]", stop_event: threading.Event
    ) -> None:
        while not stop_event.is_set():
            if not self._queue.wait_for_request(_IDLE_INTERVAL):
                continue
            request = self._queue.peek()
            if request is None:
                continue
            try:
                self._request_worker(request.start_height, reports)
            except Exception:
                _log.exception("error while scanning")
            stop_event.wait(_IDLE_INTERVAL)

    def _request_worker(
        self, start_height: int, reports: "queue.Queue[Report]"
    ) -> None:
        batch: list[ScanRequest] = []
        height = start_height
        tip = self._header_db.chain_tip()

        while height <= tip.height:
            batch.extend(self._queue.dequeue_at_height(height))
            items = [request.item.to_bytes() for request in batch]

            if height == 0:
                block_hash = self._genesis_hash
            else:
                block_hash = bytes(self._header_db.get_block_hash_by_height(height))

            if self._block_filter_matches(items, block_hash):
                found, batch = self._extract_block_matches(block_hash, batch)
                for report in found:
                    reports.put(report)
                    if report.request.is_persistent:
                        self.watch(
                            with_request_id(report.request.client_id),
                            with_start_block(report.block_height + 1),
                            with_watch_item(report.request.item),
                            with_persistent_watch(),
                        )

            height += 1
            tip = self._header_db.chain_tip()

        for request in batch:
            self._queue.enqueue(request)

    def _block_filter_matches(self, items: Sequence[bytes], block_hash: bytes) -> bool:
        key = FilterKey(block_hash=block_hash, filter_type=FilterType.REGULAR)
        try:
            entry = self._filter_db.get_filter(key)
        except FilterNotFoundError:
            return False
        return entry.gcs_filter().match_any(derive_key(block_hash), items)

    def _extract_block_matches(
        self, block_hash: bytes, requests: list[ScanRequest]
    ) -> tuple[list[Report], list[ScanRequest]]:
        try:
            block = self._block_service.get_block(block_hash)
        except BlockServiceBlockNotFoundError:
            return [], requests

        reports: list[Report] = []
        remaining: list[ScanRequest] = []
        for request in requests:
            matches = [tx for tx in block.transactions if request.item.match(tx)]
            reports.extend(
                Report(
                    transaction=tx,
                    block_hash=block_hash,
                    block_height=block.height,
                    request=request,
                )
                for tx in matches
            )
            if not matches:
                remaining.append(request)
        return reports, remaining


def new_request_id() -> uuid.UUID:
    """A fresh random client id for scan requests."""
    return uuid.uuid4()