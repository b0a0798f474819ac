"""Embedding pipeline.

One generic orchestrator for every entity type. The per-type rules (which
text, which metadata, which namespace) come from an EntityProfile; the
lifecycle (status record, embedding, upsert, failure bookkeeping) is shared.
"""

import asyncio
import math
import time
from datetime import datetime, timezone
from typing import Any

from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.clients.source.EntitySourceInterface import EntitySourceInterface
from shared.clients.vector.VectorClientInterface import VectorClientInterface
from shared.exceptions import ConfigError, EntityNotFoundError
from shared.helper.HelperConfig import HelperConfig
from shared.models.embedding_status import EmbeddingStatus, EmbeddingStatusRecord, ProcessingMetadata
from shared.models.entities import EmbeddableEntity
from shared.models.search import HealthStatus
from shared.profiles.EntityProfileInterface import EntityProfileInterface
from shared.profiles.EntityProfileManager import EntityProfileManager
from shared.stores.StatusStoreInterface import StatusStoreInterface
from shared.text.normalizer import normalize

CHARS_PER_TOKEN = 4  # rough estimate used for token_count
REPROCESS_CONCURRENCY = 5  # max parallel entity re-embeds


class EmbeddingService:
    """Keeps the vector index and the status records in line with the CRUD layer."""

    def __init__(
        self,
        helper_config: HelperConfig,
        profile_manager: EntityProfileManager,
        embed_client: EmbedClientInterface,
        vector_client: VectorClientInterface,
        status_store: StatusStoreInterface,
        entity_source: EntitySourceInterface | None = None,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._profiles = profile_manager
        self._embed_client = embed_client
        self._vector_client = vector_client
        self._store = status_store
        self._entity_source = entity_source

    ##########################################
    ################ GETTER ##################
    ##########################################

    def get_profile(self, entity_type: str) -> EntityProfileInterface:
        return self._profiles.get_profile(entity_type)

    def create_embedding_id(self, entity_type: str, entity_id: str) -> str:
        """Return the stable vector id "{entity_type}_{entity_id}"."""
        return self.get_profile(entity_type).create_embedding_id(entity_id)

    async def get_status(self, entity_type: str, entity_id: str, owner_id: str) -> EmbeddingStatusRecord | None:
        """Return the status record of an (entity, owner) pair, or None."""
        profile = self.get_profile(entity_type)
        return await self._store.find_one(profile.get_entity_type(), str(entity_id), str(owner_id))

    ##########################################
    ############### PIPELINE #################
    ##########################################

    async def do_process(
        self,
        entity_type: str,
        entity: EmbeddableEntity | dict[str, Any],
        owner_id: str,
    ) -> EmbeddingStatusRecord:
        """Embed one entity and store its vector.

        The processing record is written before any network call, so an
        interrupted run leaves an inspectable record behind. Any failure after
        parsing turns the record into "failed" and is then re-raised.

        Args:
            entity_type (str): "course", "video" or "roadmap".
            entity (EmbeddableEntity | dict): The entity, parsed or raw.
            owner_id (str): The owning user id.

        Returns:
            EmbeddingStatusRecord: The completed record.

        Raises:
            InputError: If the entity type is unknown, the payload is invalid,
                or the entity carries no embeddable text.
            ConfigError | ProviderCallError | ResponseShapeError: Propagated
                from the embedding or vector client.
        """
        profile = self.get_profile(entity_type)
        parsed = profile.parse_entity(entity)
        owner_id = str(owner_id)
        entity_type = profile.get_entity_type()
        embedding_id = profile.create_embedding_id(parsed.id)
        base_metadata = ProcessingMetadata(
            embedding_model=self._embed_client.get_model_name(),
            vector_namespace=profile.get_namespace(),
        )

        started = time.monotonic()
        try:
            normalized_text = normalize(profile.extract_text(parsed))
            await self._store.find_one_and_upsert(
                entity_type,
                parsed.id,
                owner_id,
                {
                    "embedding_id": embedding_id,
                    "vector_dimension": self._embed_client.get_vector_dimension(),
                    "source_content": profile.build_source_content(parsed, normalized_text),
                    "processing_metadata": base_metadata,
                    "status": EmbeddingStatus.PROCESSING,
                    "error_message": None,
                    "last_embedded_at": datetime.now(timezone.utc),
                },
            )
            self.logging.info("Embedding %s %s for owner %s (%d chars).", entity_type, parsed.id, owner_id, len(normalized_text))

            vector = await self._embed_client.do_embed(normalized_text, use_cache=False)
            await self._vector_client.do_upsert(
                namespace=profile.get_namespace(),
                entity_type=entity_type,
                vector_id=embedding_id,
                vector=vector,
                metadata=profile.build_metadata(parsed, owner_id),
            )

            elapsed_ms = int((time.monotonic() - started) * 1000)
            record = await self._store.find_one_and_upsert(
                entity_type,
                parsed.id,
                owner_id,
                {
                    "status": EmbeddingStatus.COMPLETED,
                    "error_message": None,
                    "processing_metadata": base_metadata.model_copy(update={
                        "processing_time_ms": elapsed_ms,
                        "token_count": math.ceil(len(normalized_text) / CHARS_PER_TOKEN),
                    }),
                },
            )
        except Exception as e:
            self.logging.error("Embedding %s %s for owner %s failed: %s", entity_type, parsed.id, owner_id, e)
            await self._mark_failed(entity_type, parsed.id, owner_id, embedding_id, base_metadata, e)
            raise

        self.logging.info("Embedded %s %s as %s in %d ms.", entity_type, parsed.id, embedding_id, elapsed_ms, color="green")
        return record

    async def do_process_by_id(self, entity_type: str, entity_id: str, owner_id: str) -> EmbeddingStatusRecord:
        """Fetch the current state of an entity from the CRUD layer and embed it.

        Raises:
            ConfigError: If no entity source is configured.
            EntityNotFoundError: If the CRUD layer does not know the entity.
        """
        if self._entity_source is None:
            raise ConfigError("No entity source configured, cannot fetch entities by id.")
        profile = self.get_profile(entity_type)
        entity_type = profile.get_entity_type()
        entity_id = str(entity_id)
        owner_id = str(owner_id)

        raw = await self._entity_source.do_fetch_entity(entity_type, entity_id)
        if raw is None:
            error = EntityNotFoundError(f"{entity_type.capitalize()} {entity_id} not found.")
            if await self._store.find_one(entity_type, entity_id, owner_id) is not None:
                base_metadata = ProcessingMetadata(
                    embedding_model=self._embed_client.get_model_name(),
                    vector_namespace=profile.get_namespace(),
                )
                await self._mark_failed(
                    entity_type, entity_id, owner_id, profile.create_embedding_id(entity_id), base_metadata, error
                )
            raise error
        return await self.do_process(entity_type, raw, owner_id)

    async def do_process_many(self, entity_type: str, targets: list[tuple[str, str]]) -> dict[str, int]:
        """Re-embed several entities fetched by id, with bounded parallelism.

        One failing entity does not stop the others; each failure is already
        recorded on its status record.

        Args:
            entity_type (str): Entity type of all targets.
            targets (list[tuple[str, str]]): (entity_id, owner_id) pairs.

        Returns:
            dict[str, int]: {"completed": n, "failed": m}.
        """
        sem = asyncio.Semaphore(REPROCESS_CONCURRENCY)

        async def _run(entity_id: str, owner_id: str) -> EmbeddingStatusRecord:
            async with sem:
                return await self.do_process_by_id(entity_type, entity_id, owner_id)

        results = await asyncio.gather(
            *[_run(entity_id, owner_id) for entity_id, owner_id in targets],
            return_exceptions=True,
        )
        failed = sum(1 for r in results if isinstance(r, Exception))
        self.logging.info(
            "Reprocessed %d %s entities: %d completed, %d failed.",
            len(targets), entity_type, len(targets) - failed, failed,
        )
        return {"completed": len(targets) - failed, "failed": failed}

    async def do_remove(self, entity_type: str, entity_id: str, owner_id: str) -> bool:
        """Remove the vector and the status record of an entity.

        The vector delete is best effort. The status record delete is the
        authoritative cleanup and propagates its errors.

        Returns:
            bool: True if a status record existed and was deleted.
        """
        profile = self.get_profile(entity_type)
        entity_id = str(entity_id)
        embedding_id = profile.create_embedding_id(entity_id)

        await self._vector_client.do_delete_one(profile.get_namespace(), embedding_id)
        deleted = await self._store.find_one_and_delete(profile.get_entity_type(), entity_id, str(owner_id))
        if deleted is None:
            self.logging.info("No status record for %s %s / owner %s, vector delete only.", profile.get_entity_type(), entity_id, owner_id)
            return False
        self.logging.info("Removed embedding %s for owner %s.", embedding_id, owner_id)
        return True

    ##########################################
    ################ HEALTH ##################
    ##########################################

    async def do_check_health(self) -> HealthStatus:
        """Make a minimal real call against the embedding and vector providers.

        Never raises; any failure of a provider call is reported in HealthStatus.errors.
        """
        status = HealthStatus()
        try:
            await self._embed_client.do_healthcheck()
            status.embed = True
        except Exception as e:
            status.errors.append(f"Embedding provider ({self._embed_client.get_engine_name()}): {e}")

        try:
            await self._vector_client.do_healthcheck()
            status.vector = True
        except Exception as e:
            status.errors.append(f"Vector index ({self._vector_client.get_engine_name()}): {e}")

        if status.errors:
            self.logging.warning("Health check reported %d error(s): %s", len(status.errors), "; ".join(status.errors))
        return status

    ##########################################
    ############### HELPERS ##################
    ##########################################

    async def _mark_failed(
        self,
        entity_type: str,
        entity_id: str,
        owner_id: str,
        embedding_id: str,
        base_metadata: ProcessingMetadata,
        error: BaseException,
    ) -> None:
        """Best-effort switch of the record to "failed". Its own errors are logged only."""
        try:
            await self._store.find_one_and_upsert(
                entity_type,
                entity_id,
                owner_id,
                {
                    "embedding_id": embedding_id,
                    "processing_metadata": base_metadata,
                    "status": EmbeddingStatus.FAILED,
                    "error_message": str(error) or error.__class__.__name__,
                    "last_embedded_at": datetime.now(timezone.utc),
                },
            )
        except Exception as update_error:
            self.logging.error(
                "Could not mark %s %s / owner %s as failed: %s", entity_type, entity_id, owner_id, update_error
            )
