from typing import Optional

from .base import VersionConflictError, VersionedValue, Write


class InMemoryKeyValueStore:
    """Process-local store. Every call completes without awaiting, so each
    operation is atomic with respect to other coroutines on the loop."""

    def __init__(self):
        self._data: dict[tuple[str, str], VersionedValue] = {}

    async def get(self, namespace: str, key: str) -> Optional[VersionedValue]:
        return self._data.get((namespace, key))

    async def set(
        self, namespace: str, key: str, value: str, expected_version: Optional[int] = None
    ) -> int:
        versions = await self.set_many([Write(namespace, key, value, expected_version)])
        return versions[0]

    async def set_many(self, writes: list[Write]) -> list[int]:
        # Every version is checked against the staged batch before any write lands
        staged: dict[tuple[str, str], VersionedValue] = {}
        versions = []
        for namespace, key, value, expected_version in writes:
            current = staged.get((namespace, key)) or self._data.get((namespace, key))
            current_version = current.version if current else 0
            if expected_version is not None and expected_version != current_version:
                raise VersionConflictError(namespace, key, expected_version, current_version)
            staged[(namespace, key)] = VersionedValue(value, current_version + 1)
            versions.append(current_version + 1)
        self._data.update(staged)
        return versions

    async def remove(self, namespace: str, key: str) -> None:
        self._data.pop((namespace, key), None)

    async def scan(self, namespace: str) -> list[VersionedValue]:
        return [v for (ns, _), v in self._data.items() if ns == namespace]
