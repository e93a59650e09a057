"""Concurrent get-or-compile memoization of accessors."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from .compiler import build_accessor
from .descriptors import MemberDescriptor
from .shapes import CallShape
from .validation import validate

logger = logging.getLogger(__name__)

CompileFn = Callable[[MemberDescriptor, CallShape], Callable]


class AccessorCache:
    """Map of (descriptor, shape) to compiled accessor.

    Reads of populated keys take no lock. A miss takes a per-key lock, so
    concurrent first requests for one key compile exactly once while other
    keys keep compiling independently. The first successful compile becomes
    the canonical entry; failed compiles are not stored. Entries are never
    evicted.
    """

    def __init__(self, compile_fn: CompileFn | None = None) -> None:
        self._compile = compile_fn or build_accessor
        self._entries: dict[tuple[MemberDescriptor, CallShape], Callable] = {}
        self._pending: dict[tuple[MemberDescriptor, CallShape], threading.Lock] = {}
        self._lock = threading.Lock()
        # Hit/miss counters are not synchronized; compiles and failures are
        # only updated under the key lock.
        self._stats: dict[str, int] = {"hits": 0, "misses": 0, "compiles": 0, "failures": 0}

    def get_or_compile(self, descriptor: MemberDescriptor, shape: CallShape) -> Callable:
        if not isinstance(descriptor, MemberDescriptor) or not isinstance(shape, CallShape):
            validate(descriptor, shape)
        key = (descriptor, shape)

        accessor = self._entries.get(key)
        if accessor is not None:
            self._stats["hits"] += 1
            return accessor

        with self._lock:
            accessor = self._entries.get(key)
            if accessor is not None:
                self._stats["hits"] += 1
                return accessor
            key_lock = self._pending.get(key)
            if key_lock is None:
                key_lock = self._pending[key] = threading.Lock()

        with key_lock:
            accessor = self._entries.get(key)
            if accessor is not None:
                self._stats["hits"] += 1
                return accessor
            self._stats["misses"] += 1
            logger.debug("accessor cache miss: %s / %s", descriptor, shape.describe())
            try:
                accessor = self._compile(descriptor, shape)
            except Exception:
                # The key lock stays registered until an entry exists.
                self._stats["failures"] += 1
                raise
            self._stats["compiles"] += 1
            with self._lock:
                accessor = self._entries.setdefault(key, accessor)
                self._pending.pop(key, None)
        return accessor

    def get(self, descriptor: MemberDescriptor, shape: CallShape) -> Callable | None:
        return self._entries.get((descriptor, shape))

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def stats(self, *, reset: bool = False) -> dict[str, float | int]:
        hits = self._stats["hits"]
        misses = self._stats["misses"]
        total = hits + misses
        stats: dict[str, float | int] = {
            "hits": hits,
            "misses": misses,
            "compiles": self._stats["compiles"],
            "failures": self._stats["failures"],
            "size": len(self._entries),
            "hit_rate": float(hits / total) if total else 0.0,
        }
        if reset:
            for name in self._stats:
                self._stats[name] = 0
        return stats


_DEFAULT_CACHE = AccessorCache()


def default_cache() -> AccessorCache:
    """The process-wide cache used when callers do not supply their own."""
    return _DEFAULT_CACHE
