import asyncio
from datetime import datetime, timezone
from typing import Any

from shared.helper.HelperConfig import HelperConfig
from shared.models.embedding_status import EmbeddingStatusRecord
from shared.stores.StatusStoreInterface import StatusStoreInterface


class StatusStoreMemory(StatusStoreInterface):
    """Process-local store. Records are lost on restart.

    One collection per entity type, keyed by (entity_id, owner_id). Callers
    always receive copies, never the stored instance.
    """

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._collections: dict[str, dict[tuple[str, str], EmbeddingStatusRecord]] = {}
        self._lock = asyncio.Lock()

    def _get_engine_name(self) -> str:
        return "Memory"

    def _collection(self, entity_type: str) -> dict[tuple[str, str], EmbeddingStatusRecord]:
        return self._collections.setdefault(entity_type.lower(), {})

    async def find_one(self, entity_type: str, entity_id: str, owner_id: str) -> EmbeddingStatusRecord | None:
        record = self._collection(entity_type).get((str(entity_id), str(owner_id)))
        return record.model_copy(deep=True) if record else None

    async def find_one_and_upsert(
        self,
        entity_type: str,
        entity_id: str,
        owner_id: str,
        patch: dict[str, Any],
    ) -> EmbeddingStatusRecord:
        key = (str(entity_id), str(owner_id))
        async with self._lock:
            collection = self._collection(entity_type)
            existing = collection.get(key)
            data = existing.model_dump() if existing else {}
            data.update(patch)
            data.update({
                "entity_type": entity_type.lower(),
                "entity_id": key[0],
                "owner_id": key[1],
                "updated_at": datetime.now(timezone.utc),
            })
            record = EmbeddingStatusRecord.model_validate(data)
            collection[key] = record
        self.logging.debug("Stored %s status record %s/%s: %s", entity_type, entity_id, owner_id, record.status.value)
        return record.model_copy(deep=True)

    async def find_one_and_delete(self, entity_type: str, entity_id: str, owner_id: str) -> EmbeddingStatusRecord | None:
        async with self._lock:
            return self._collection(entity_type).pop((str(entity_id), str(owner_id)), None)

    async def count(self, entity_type: str) -> int:
        return len(self._collection(entity_type))
