from abc import ABC, abstractmethod
from typing import Any

from shared.helper.HelperConfig import HelperConfig
from shared.models.embedding_status import EmbeddingStatusRecord


class StatusStoreInterface(ABC):
    """Persistence of embedding status records.

    One record per (entity_type, entity_id, owner_id). Every mutation is
    atomic per record: find_one_and_upsert either creates the record or
    merges the patch into the existing one in a single step.
    """

    def __init__(self, helper_config: HelperConfig):
        self.logging = helper_config.get_logger()
        self._helper_config = helper_config

    ##########################################
    ################ GETTER ##################
    ##########################################

    def get_engine_name(self) -> str:
        """
        Returns the name of the store engine in lowercase. E.g. "memory"
        """
        return self._get_engine_name().lower()

    @abstractmethod
    def _get_engine_name(self) -> str:
        pass

    ##########################################
    ############### LIFECYCLE ################
    ##########################################

    async def boot(self) -> None:
        """Prepare the backing storage (connections, tables). Called once at startup."""
        return None

    async def close(self) -> None:
        """Release any resources held by the store."""
        return None

    ##########################################
    ############### REQUESTS #################
    ##########################################

    @abstractmethod
    async def find_one(self, entity_type: str, entity_id: str, owner_id: str) -> EmbeddingStatusRecord | None:
        """Return the record of an (entity, owner) pair, or None."""
        pass

    @abstractmethod
    async def find_one_and_upsert(
        self,
        entity_type: str,
        entity_id: str,
        owner_id: str,
        patch: dict[str, Any],
    ) -> EmbeddingStatusRecord:
        """Create or update the record of an (entity, owner) pair.

        On creation the patch must carry every field without a default
        (embedding_id, processing_metadata). updated_at is always refreshed;
        created_at is kept from the existing record.

        Args:
            entity_type (str): Entity type of the record.
            entity_id (str): Entity id of the record.
            owner_id (str): Owning user id.
            patch (dict[str, Any]): Fields to set.

        Returns:
            EmbeddingStatusRecord: The record after the update.
        """
        pass

    @abstractmethod
    async def find_one_and_delete(self, entity_type: str, entity_id: str, owner_id: str) -> EmbeddingStatusRecord | None:
        """Delete the record of an (entity, owner) pair and return it, or None if absent."""
        pass

    @abstractmethod
    async def count(self, entity_type: str) -> int:
        """Return the number of records of an entity type."""
        pass
