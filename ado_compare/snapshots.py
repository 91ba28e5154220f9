"""
Storage for pulled process snapshots.

Snapshots are saved as ``<connectionId>_<processId>.json`` files in the
snapshot directory. Loaded snapshots are kept in a small TTL/LRU cache; the
cached objects are shared between comparisons, which is safe because the
comparison engine never mutates its input.
"""

import json
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from opentelemetry import metrics, trace
from pydantic import ValidationError

from .comparison.models import ProcessInput, ProcessSnapshot
from .errors import SnapshotFormatError, SnapshotNotFoundError

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)
meter = metrics.get_meter(__name__)


@dataclass
class CacheEntry:
    """A cache entry with data and expiration time."""

    data: Any
    expires_at: float

    def is_expired(self) -> bool:
        """Check if this cache entry has expired."""
        return time.time() > self.expires_at


class SnapshotCache:
    """TTL cache with LRU eviction for loaded snapshots."""

    def __init__(self, ttl_seconds: int = 300, max_size: int = 100):
        self._cache: Dict[str, CacheEntry] = {}
        self._access_order: List[str] = []  # For LRU tracking
        self.ttl_seconds = ttl_seconds
        self.max_size = max_size

        self._cache_hit_counter = meter.create_counter(
            name="ado_compare_snapshot_cache_hits", description="Number of cache hits", unit="1"
        )
        self._cache_miss_counter = meter.create_counter(
            name="ado_compare_snapshot_cache_misses", description="Number of cache misses", unit="1"
        )
        self._cache_eviction_counter = meter.create_counter(
            name="ado_compare_snapshot_cache_evictions",
            description="Number of cache entries evicted",
            unit="1",
        )

    def get(self, key: str) -> Optional[Any]:
        """Get a cache entry if it exists and is valid."""
        entry = self._cache.get(key)
        if entry is not None and not entry.is_expired():
            self._cache_hit_counter.add(1)
            self._touch(key)
            logger.debug(f"Cache hit for key: {key}")
            return entry.data

        if entry is not None:
            self.invalidate(key)
            self._cache_eviction_counter.add(1, {"reason": "expired"})
            self._cache_miss_counter.add(1, {"reason": "expired"})
        else:
            self._cache_miss_counter.add(1, {"reason": "not_found"})
        return None

    def set(self, key: str, data: Any) -> None:
        """Set a cache entry and enforce the size limit."""
        self._touch(key)
        self._cache[key] = CacheEntry(data=data, expires_at=time.time() + self.ttl_seconds)

        while len(self._cache) > self.max_size and self._access_order:
            lru_key = self._access_order.pop(0)
            if self._cache.pop(lru_key, None) is not None:
                self._cache_eviction_counter.add(1, {"reason": "lru_eviction"})
                logger.debug(f"Evicted LRU cache entry: {lru_key}")

    def invalidate(self, key: str) -> None:
        self._cache.pop(key, None)
        if key in self._access_order:
            self._access_order.remove(key)

    def clear(self) -> None:
        self._cache.clear()
        self._access_order.clear()

    def __len__(self) -> int:
        return len(self._cache)

    def _touch(self, key: str) -> None:
        if key in self._access_order:
            self._access_order.remove(key)
        self._access_order.append(key)


def _check_identifier(kind: str, value: str) -> None:
    if not value or Path(value).name != value or value in (".", ".."):
        raise SnapshotFormatError(f"Invalid {kind}: {value!r}", context={kind: value})


class SnapshotStore:
    """
    Reads and writes pulled process snapshots on disk.

    Resolution lives here rather than in the comparison engine, which only
    ever sees fully loaded snapshots.
    """

    def __init__(self, snapshot_dir: str | Path, cache: Optional[SnapshotCache] = None):
        self.snapshot_dir = Path(snapshot_dir)
        self.cache = cache or SnapshotCache()

    def _file_path(self, connection_id: str, process_id: str) -> Path:
        _check_identifier("connectionId", connection_id)
        _check_identifier("processId", process_id)
        return self.snapshot_dir / f"{connection_id}_{process_id}.json"

    def get(self, connection_id: str, process_id: str) -> Optional[ProcessSnapshot]:
        """
        Load a snapshot.

        Args:
            connection_id: Connection the process was pulled with
            process_id: Process identifier

        Returns:
            ProcessSnapshot, or None if no snapshot was saved for the pair

        Raises:
            SnapshotFormatError: the stored file is not a valid snapshot
        """
        path = self._file_path(connection_id, process_id)
        cache_key = f"{connection_id}:{process_id}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        with tracer.start_as_current_span("snapshot_load") as span:
            span.set_attribute("snapshot.path", str(path))
            try:
                raw = path.read_text(encoding="utf-8")
            except FileNotFoundError:
                logger.info(f"No snapshot stored for connection '{connection_id}', process '{process_id}'")
                return None

            try:
                snapshot = ProcessSnapshot.model_validate(json.loads(raw))
            except (json.JSONDecodeError, ValidationError) as e:
                logger.error(f"Failed to parse snapshot {path}: {e}")
                raise SnapshotFormatError(
                    f"Snapshot {path.name} is not valid: {e}",
                    context={"connectionId": connection_id, "processId": process_id},
                    original_exception=e,
                ) from e

        self.cache.set(cache_key, snapshot)
        logger.info(
            f"Loaded snapshot for process '{process_id}' with {len(snapshot.workItemTypes)} work item types"
        )
        return snapshot

    def save(self, connection_id: str, process_id: str, data: dict[str, Any] | ProcessSnapshot) -> Path:
        """Validate and write a snapshot, replacing any existing one."""
        path = self._file_path(connection_id, process_id)
        try:
            snapshot = (
                data if isinstance(data, ProcessSnapshot) else ProcessSnapshot.model_validate(data)
            )
        except ValidationError as e:
            raise SnapshotFormatError(
                f"Snapshot for process '{process_id}' is not valid: {e}",
                context={"connectionId": connection_id, "processId": process_id},
                original_exception=e,
            ) from e

        self.snapshot_dir.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(snapshot.model_dump(exclude_unset=True), indent=2), encoding="utf-8"
        )
        self.cache.invalidate(f"{connection_id}:{process_id}")
        logger.info(f"Saved snapshot for connection '{connection_id}', process '{process_id}'")
        return path

    def list_snapshots(self, connection_id: Optional[str] = None) -> List[Dict[str, str]]:
        """List stored ``{connectionId, processId}`` pairs, optionally for one connection."""
        if not self.snapshot_dir.is_dir():
            return []

        entries = []
        for path in sorted(self.snapshot_dir.glob("*.json")):
            if connection_id is not None:
                # Connection ids may contain "_"; match the whole prefix
                prefix = f"{connection_id}_"
                if not path.stem.startswith(prefix):
                    continue
                stored_connection, process_id = connection_id, path.stem[len(prefix):]
            else:
                stored_connection, _, process_id = path.stem.partition("_")
            if not stored_connection or not process_id:
                continue
            entries.append({"connectionId": stored_connection, "processId": process_id})
        return entries

    def load_many(self, requests: List[Dict[str, str]]) -> List[ProcessInput]:
        """
        Resolve ``{connectionId, processId}`` pairs into comparison inputs.

        Raises:
            SnapshotNotFoundError: one or more pairs have no stored snapshot
                (all missing pairs are reported together)
        """
        loaded = []
        missing = []
        for request in requests:
            connection_id = request["connectionId"]
            process_id = request["processId"]
            snapshot = self.get(connection_id, process_id)
            if snapshot is None:
                missing.append({"connectionId": connection_id, "processId": process_id})
            else:
                loaded.append(
                    ProcessInput(processId=process_id, data=snapshot, connectionId=connection_id)
                )

        if missing:
            raise SnapshotNotFoundError(missing)
        return loaded
