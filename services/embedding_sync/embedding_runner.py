"""Reprocess runner entry point.

Re-embeds entities fetched by id from the CRUD layer, e.g. after a model
change or to repair failed status records.

Usage:
    python -m services.embedding_sync.embedding_runner course 42:7 43:7

Each target is "<entity_id>:<owner_id>".
"""

import asyncio
import sys

from shared.clients.embed.EmbedClientManager import EmbedClientManager
from shared.clients.vector.VectorClientManager import VectorClientManager
from shared.clients.source.EntitySourceManager import EntitySourceManager
from shared.stores.StatusStoreManager import StatusStoreManager
from shared.profiles.EntityProfileManager import EntityProfileManager
from services.embedding_sync.EmbeddingService import EmbeddingService
from shared.exceptions import EmbeddingBridgeError, InputError
from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import setup_logging


def parse_targets(raw_targets: list[str]) -> list[tuple[str, str]]:
    """Parse "<entity_id>:<owner_id>" arguments.

    Raises:
        InputError: If an argument does not have both parts.
    """
    targets: list[tuple[str, str]] = []
    for raw in raw_targets:
        entity_id, _, owner_id = raw.partition(":")
        if not entity_id.strip() or not owner_id.strip():
            raise InputError(f"Invalid target '{raw}', expected '<entity_id>:<owner_id>'.")
        targets.append((entity_id.strip(), owner_id.strip()))
    return targets


async def main(argv: list[str]) -> int:
    """Run the reprocess pipeline. Returns the process exit code."""
    logger = setup_logging()
    if len(argv) < 2:
        logger.error("Usage: embedding_runner <entity_type> <entity_id>:<owner_id> [...]")
        return 2
    entity_type, targets = argv[0], parse_targets(argv[1:])

    config = HelperConfig(logger=logger)
    embed_client = EmbedClientManager(helper_config=config).get_client()
    vector_client = VectorClientManager(helper_config=config).get_client()
    entity_source = EntitySourceManager(helper_config=config).get_client()
    status_store = StatusStoreManager(helper_config=config).get_store()

    try:
        try:
            await status_store.boot()
        except EmbeddingBridgeError as e:
            logger.error("Error booting status store %s: %s. Aborting.", status_store.get_engine_name(), e)
            return 1

        # embedding and vector index are required, there is no point in continuing without them
        for client in (embed_client, vector_client, entity_source):
            try:
                await client.boot()
            except Exception as e:
                logger.error(f"Error booting {client.get_client_type()} client {client.get_engine_name()}: {e}. Aborting.")
                return 1

        embedding_service = EmbeddingService(
            helper_config=config,
            profile_manager=EntityProfileManager(helper_config=config),
            embed_client=embed_client,
            vector_client=vector_client,
            status_store=status_store,
            entity_source=entity_source,
        )
        result = await embedding_service.do_process_many(entity_type, targets)
        return 0 if result["failed"] == 0 else 1
    finally:
        for client in (embed_client, vector_client, entity_source):
            await client.close()
        await status_store.close()


if __name__ == "__main__":
    sys.exit(asyncio.run(main(sys.argv[1:])))
