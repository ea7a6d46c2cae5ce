"""Single-writer critical sections and compare-and-swap retries for store records."""
import asyncio
from contextlib import asynccontextmanager
from typing import Callable, Optional, TypeVar

import structlog
from pydantic import BaseModel

from shared.errors import ConflictError
from shared.storage import KeyValueStore, VersionConflictError, Write

logger = structlog.get_logger(__name__)

MAX_CAS_ATTEMPTS = 3

ModelT = TypeVar("ModelT", bound=BaseModel)


class KeyedLock:
    """One asyncio.Lock per key, dropped again once nobody holds or waits on it."""

    def __init__(self):
        self._locks: dict[str, list] = {}  # key -> [lock, holders + waiters]

    @asynccontextmanager
    async def hold(self, key: str):
        entry = self._locks.get(key)
        if entry is None:
            entry = self._locks[key] = [asyncio.Lock(), 0]
        entry[1] += 1
        try:
            async with entry[0]:
                yield
        finally:
            entry[1] -= 1
            if entry[1] == 0:
                del self._locks[key]

    def is_held(self, key: str) -> bool:
        entry = self._locks.get(key)
        return entry is not None and entry[0].locked()


async def compare_and_swap(
    store: KeyValueStore,
    namespace: str,
    key: str,
    mutate: Callable[[Optional[str]], ModelT],
    attempts: int = MAX_CAS_ATTEMPTS,
    also: Optional[Callable[[ModelT], list[Write]]] = None,
) -> ModelT:
    """Read the record, let ``mutate`` build its replacement, write it back only
    if nobody else wrote in between. Errors raised by ``mutate`` propagate
    untouched; version conflicts are retried with a fresh read.

    ``also`` builds further writes from the replacement. They are committed
    in the same transaction as the record, and a conflict on one of them is
    raised rather than retried.
    """
    for attempt in range(1, attempts + 1):
        current = await store.get(namespace, key)
        updated = mutate(current.value if current else None)
        write = Write(
            namespace,
            key,
            updated.model_dump_json(),
            expected_version=current.version if current else 0,
        )
        try:
            if also is None:
                await store.set(*write)
            else:
                await store.set_many([write, *also(updated)])
            return updated
        except VersionConflictError as e:
            if (e.namespace, e.key) != (namespace, key):
                raise
            logger.warning("cas_conflict", namespace=namespace, key=key, attempt=attempt, error=str(e))
    raise ConflictError(f"{namespace}/{key} kept changing underneath the update, giving up after {attempts} attempts")
