from shared.config.database import AsyncSessionLocal
from shared.config.settings import STORAGE_BACKEND

from .memory_store import InMemoryKeyValueStore
from .sql_store import SqlKeyValueStore

# Process-local backend, only used when STORAGE_BACKEND=memory
memory_store = InMemoryKeyValueStore()


async def get_store():
    """FastAPI dependency yielding the store every service reads and writes through."""
    if STORAGE_BACKEND == "memory":
        yield memory_store
        return
    async with AsyncSessionLocal() as session:
        yield SqlKeyValueStore(session)
