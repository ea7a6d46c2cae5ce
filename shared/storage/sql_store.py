from typing import Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from .base import VersionConflictError, VersionedValue, Write
from .models import KVRecord


class SqlKeyValueStore:
    """Key-value store over the kv_records table.

    Every ``set`` or ``set_many`` call is one database transaction: all of its
    writes commit together, or the session rolls back and nothing changes.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, namespace: str, key: str) -> Optional[VersionedValue]:
        result = await self.db.execute(
            select(KVRecord).where(KVRecord.namespace == namespace, KVRecord.key == key)
        )
        record = result.scalars().first()
        if not record:
            return None
        return VersionedValue(record.value, record.version)

    async def set(
        self, namespace: str, key: str, value: str, expected_version: Optional[int] = None
    ) -> int:
        versions = await self.set_many([Write(namespace, key, value, expected_version)])
        return versions[0]

    async def set_many(self, writes: list[Write]) -> list[int]:
        try:
            versions = [await self._stage(write) for write in writes]
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        return versions

    async def _stage(self, write: Write) -> int:
        """Apply one write inside the open transaction without committing it."""
        namespace, key, value, expected_version = write
        if expected_version is None:
            current = await self.get(namespace, key)
            expected_version = current.version if current else 0

        if expected_version == 0:
            try:
                async with self.db.begin_nested():
                    self.db.add(KVRecord(namespace=namespace, key=key, value=value, version=1))
            except IntegrityError:
                raise VersionConflictError(namespace, key, 0, await self._version(namespace, key)) from None
            return 1

        result = await self.db.execute(
            update(KVRecord)
            .where(
                KVRecord.namespace == namespace,
                KVRecord.key == key,
                KVRecord.version == expected_version,
            )
            .values(value=value, version=expected_version + 1)
        )
        if result.rowcount == 0:
            raise VersionConflictError(
                namespace, key, expected_version, await self._version(namespace, key)
            )
        return expected_version + 1

    async def _version(self, namespace: str, key: str) -> int:
        current = await self.get(namespace, key)
        return current.version if current else 0

    async def remove(self, namespace: str, key: str) -> None:
        await self.db.execute(
            delete(KVRecord).where(KVRecord.namespace == namespace, KVRecord.key == key)
        )
        await self.db.commit()

    async def scan(self, namespace: str) -> list[VersionedValue]:
        result = await self.db.execute(
            select(KVRecord).where(KVRecord.namespace == namespace)
        )
        return [VersionedValue(r.value, r.version) for r in result.scalars().all()]
