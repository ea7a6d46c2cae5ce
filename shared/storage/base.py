from typing import NamedTuple, Optional, Protocol

from shared.errors import ConflictError


class VersionedValue(NamedTuple):
    value: str  # JSON document
    version: int


class Write(NamedTuple):
    """One write of a batch passed to ``KeyValueStore.set_many``."""

    namespace: str
    key: str
    value: str
    expected_version: Optional[int] = None


class VersionConflictError(ConflictError):
    """The stored version did not match the one the writer read."""

    def __init__(self, namespace: str, key: str, expected: int, found: int):
        self.namespace = namespace
        self.key = key
        self.expected = expected
        self.found = found
        super().__init__(
            f"{namespace}/{key}: expected version {expected}, found {found}"
        )


class KeyValueStore(Protocol):
    """Namespaced key-value store with per-key versions.

    ``set`` with ``expected_version`` is a compare-and-swap: 0 means the key
    must not exist yet, any other number must equal the current version.
    ``None`` writes unconditionally. The new version is returned.

    ``set_many`` applies a batch of such writes as one transaction: if any
    expected version does not match, ``VersionConflictError`` is raised for
    that write and none of the batch is applied.
    """

    async def get(self, namespace: str, key: str) -> Optional[VersionedValue]: ...

    async def set(
        self, namespace: str, key: str, value: str, expected_version: Optional[int] = None
    ) -> int: ...

    async def set_many(self, writes: list[Write]) -> list[int]: ...

    async def remove(self, namespace: str, key: str) -> None: ...

    async def scan(self, namespace: str) -> list[VersionedValue]: ...
