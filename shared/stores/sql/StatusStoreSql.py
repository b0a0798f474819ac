import asyncio
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.engine import make_url
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from shared.exceptions import ConfigError, StoreError
from shared.helper.HelperConfig import HelperConfig
from shared.models.embedding_status import EmbeddingStatusRecord
from shared.stores.StatusStoreInterface import StatusStoreInterface
from shared.stores.sql.models import Base, EmbeddingStatusRow

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./embedding_status.db"
UPSERT_ATTEMPTS = 2  # second attempt only after a concurrent insert of the same key


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is written in UTC
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _row_to_record(row: EmbeddingStatusRow) -> EmbeddingStatusRecord:
    return EmbeddingStatusRecord(
        entity_type=row.entity_type,
        entity_id=row.entity_id,
        owner_id=row.owner_id,
        embedding_id=row.embedding_id,
        vector_dimension=row.vector_dimension,
        source_content=row.source_content or {},
        processing_metadata=row.processing_metadata,
        status=row.status,
        error_message=row.error_message,
        last_embedded_at=_as_utc(row.last_embedded_at),
        created_at=_as_utc(row.created_at),
        updated_at=_as_utc(row.updated_at),
    )


def _record_to_columns(record: EmbeddingStatusRecord) -> dict[str, Any]:
    documents = record.model_dump(mode="json", include={"source_content", "processing_metadata"})
    return {
        "entity_type": record.entity_type,
        "entity_id": record.entity_id,
        "owner_id": record.owner_id,
        "embedding_id": record.embedding_id,
        "vector_dimension": record.vector_dimension,
        "status": record.status.value,
        "error_message": record.error_message,
        "source_content": documents["source_content"],
        "processing_metadata": documents["processing_metadata"],
        "last_embedded_at": record.last_embedded_at,
        "created_at": record.created_at,
        "updated_at": record.updated_at,
    }


class StatusStoreSql(StatusStoreInterface):
    """Status records in a SQL database through SQLAlchemy's asyncio extension.

    Every process pointing at the same STORE_SQL_DATABASE_URL (API server,
    reprocess runner) shares the same records. The unique constraint on
    (entity_type, entity_id, owner_id) guarantees one record per pair even
    across processes; an insert that loses that race is retried as an update.

    Settings:
        STORE_SQL_DATABASE_URL: async SQLAlchemy URL, default a local SQLite file.
                                e.g. "postgresql+asyncpg://user:pass@db:5432/bridge"
        STORE_SQL_ECHO:         log every SQL statement (default false).
    """

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._database_url = helper_config.get_string_val("STORE_SQL_DATABASE_URL", default=DEFAULT_DATABASE_URL)
        try:
            self._engine: AsyncEngine = create_async_engine(
                self._database_url,
                echo=helper_config.get_bool_val("STORE_SQL_ECHO", default=False),
                pool_pre_ping=True,
            )
        except (ImportError, SQLAlchemyError) as e:
            raise ConfigError(f"Invalid STORE_SQL_DATABASE_URL '{self._get_display_url()}': {e}") from e
        self._session_factory = async_sessionmaker(
            bind=self._engine,
            class_=AsyncSession,
            autoflush=False,
            expire_on_commit=False,
        )
        # serialises writers of this process; other processes are covered by the unique constraint
        self._lock = asyncio.Lock()

    ##########################################
    ################ GETTER ##################
    ##########################################

    def _get_engine_name(self) -> str:
        return "Sql"

    def _get_display_url(self) -> str:
        """The database URL with its password masked, for logs and errors."""
        try:
            return make_url(self._database_url).render_as_string(hide_password=True)
        except SQLAlchemyError:
            return "<unparseable url>"

    def _where(self, entity_type: str, entity_id: str, owner_id: str) -> tuple:
        return (
            EmbeddingStatusRow.entity_type == entity_type.lower(),
            EmbeddingStatusRow.entity_id == str(entity_id),
            EmbeddingStatusRow.owner_id == str(owner_id),
        )

    ##########################################
    ############### LIFECYCLE ################
    ##########################################

    async def boot(self) -> None:
        """Create the status table if it does not exist yet."""
        try:
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as e:
            raise StoreError(f"Could not prepare status table in {self._get_display_url()}: {e}") from e
        self.logging.info("Status store ready at %s.", self._get_display_url())

    async def close(self) -> None:
        await self._engine.dispose()

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def find_one(self, entity_type: str, entity_id: str, owner_id: str) -> EmbeddingStatusRecord | None:
        try:
            async with self._session_factory() as session:
                row = await session.scalar(select(EmbeddingStatusRow).where(*self._where(entity_type, entity_id, owner_id)))
                return _row_to_record(row) if row else None
        except SQLAlchemyError as e:
            raise StoreError(f"Reading {entity_type} status record {entity_id}/{owner_id} failed: {e}") from e

    async def find_one_and_upsert(
        self,
        entity_type: str,
        entity_id: str,
        owner_id: str,
        patch: dict[str, Any],
    ) -> EmbeddingStatusRecord:
        entity_id, owner_id = str(entity_id), str(owner_id)
        for attempt in range(1, UPSERT_ATTEMPTS + 1):
            try:
                async with self._lock, self._session_factory() as session, session.begin():
                    row = await session.scalar(
                        select(EmbeddingStatusRow)
                        .where(*self._where(entity_type, entity_id, owner_id))
                        .with_for_update()
                    )
                    data = _row_to_record(row).model_dump() if row else {}
                    data.update(patch)
                    data.update({
                        "entity_type": entity_type.lower(),
                        "entity_id": entity_id,
                        "owner_id": owner_id,
                        "updated_at": datetime.now(timezone.utc),
                    })
                    record = EmbeddingStatusRecord.model_validate(data)
                    if row is None:
                        session.add(EmbeddingStatusRow(**_record_to_columns(record)))
                    else:
                        for column, value in _record_to_columns(record).items():
                            setattr(row, column, value)
            except IntegrityError as e:
                if attempt == UPSERT_ATTEMPTS:
                    raise StoreError(f"Writing {entity_type} status record {entity_id}/{owner_id} failed: {e}") from e
                self.logging.debug("Concurrent insert of %s %s/%s, retrying as update.", entity_type, entity_id, owner_id)
                continue
            except SQLAlchemyError as e:
                raise StoreError(f"Writing {entity_type} status record {entity_id}/{owner_id} failed: {e}") from e

            self.logging.debug("Stored %s status record %s/%s: %s", entity_type, entity_id, owner_id, record.status.value)
            return record

    async def find_one_and_delete(self, entity_type: str, entity_id: str, owner_id: str) -> EmbeddingStatusRecord | None:
        try:
            async with self._lock, self._session_factory() as session, session.begin():
                row = await session.scalar(select(EmbeddingStatusRow).where(*self._where(entity_type, entity_id, owner_id)))
                if row is None:
                    return None
                record = _row_to_record(row)
                await session.delete(row)
        except SQLAlchemyError as e:
            raise StoreError(f"Deleting {entity_type} status record {entity_id}/{owner_id} failed: {e}") from e
        return record

    async def count(self, entity_type: str) -> int:
        try:
            async with self._session_factory() as session:
                total = await session.scalar(
                    select(func.count())
                    .select_from(EmbeddingStatusRow)
                    .where(EmbeddingStatusRow.entity_type == entity_type.lower())
                )
        except SQLAlchemyError as e:
            raise StoreError(f"Counting {entity_type} status records failed: {e}") from e
        return int(total or 0)
