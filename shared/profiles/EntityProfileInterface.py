from abc import ABC, abstractmethod
from typing import Any

from pydantic import ValidationError

from shared.exceptions import InputError
from shared.models.embedding_status import SourceContent
from shared.models.entities import EmbeddableEntity
from shared.text.normalizer import strip_markup


class EntityProfileInterface(ABC):
    """Per-entity-type rules of the embedding pipeline.

    A profile knows how to parse a raw entity, which text to embed and in
    which order, and which metadata to store next to the vector. Everything
    else (normalisation, embedding, status lifecycle, upsert) is shared.
    """

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def get_entity_type(self) -> str:
        """
        Returns the entity type in lowercase. E.g. "course"
        """
        return self._get_entity_type().lower()

    @abstractmethod
    def _get_entity_type(self) -> str:
        """
        Returns the entity type. E.g. "course"
        """
        pass

    def get_namespace(self) -> str:
        """
        Returns the vector index namespace of the entity type. E.g. "course-embeddings"
        """
        return f"{self.get_entity_type()}-embeddings"

    def get_id_metadata_key(self) -> str:
        """
        Returns the metadata key holding the entity id. E.g. "courseId"
        """
        return f"{self.get_entity_type()}Id"

    def create_embedding_id(self, entity_id: str) -> str:
        """Build the stable vector id of an entity.

        Args:
            entity_id (str): The entity id in the CRUD layer.

        Returns:
            str: "{entity_type}_{entity_id}". Pure function of its inputs, so
                 re-processing an entity always overwrites the same vector.
        """
        return f"{self.get_entity_type()}_{entity_id}"

    @abstractmethod
    def _get_model_class(self) -> type[EmbeddableEntity]:
        """
        Returns the pydantic model class of the entity type.
        """
        pass

    ##########################################
    ################ PARSER ##################
    ##########################################

    def parse_entity(self, raw: EmbeddableEntity | dict[str, Any]) -> EmbeddableEntity:
        """Validate a raw entity payload into the profile's model.

        Args:
            raw (EmbeddableEntity | dict): Either an already parsed entity or the
                plain dict returned by the CRUD layer.

        Returns:
            EmbeddableEntity: The parsed entity.

        Raises:
            InputError: If the payload does not match the entity model.
        """
        model_class = self._get_model_class()
        if isinstance(raw, model_class):
            return raw
        if isinstance(raw, EmbeddableEntity):
            raw = raw.model_dump()
        try:
            return model_class.model_validate(raw)
        except ValidationError as e:
            raise InputError(f"Invalid {self.get_entity_type()} payload: {e}") from e

    ##########################################
    ############ TEXT EXTRACTION #############
    ##########################################

    def extract_text(self, entity: EmbeddableEntity) -> str:
        """Concatenate the entity's text in priority order.

        Title first, then the type-specific parts returned by
        _collect_text_parts(). Empty parts are skipped. The result is NOT
        normalised.

        Args:
            entity (EmbeddableEntity): The parsed entity.

        Returns:
            str: Space-joined text.
        """
        parts = [entity.title, *self._collect_text_parts(entity)]
        return " ".join(part for part in parts if part and part.strip())

    @abstractmethod
    def _collect_text_parts(self, entity: EmbeddableEntity) -> list[str | None]:
        """
        Returns the text parts following the title, in priority order. None or
        blank entries are dropped by extract_text().
        """
        pass

    @staticmethod
    def _join(values: list[str] | None) -> str:
        return " ".join(v for v in (values or []) if v and v.strip())

    @staticmethod
    def _clean_description(description: str | None) -> str:
        return strip_markup(description)

    ##########################################
    ############### METADATA #################
    ##########################################

    def build_metadata(self, entity: EmbeddableEntity, owner_id: str) -> dict[str, str | int | float]:
        """Build the flat metadata bag stored next to the vector.

        Keys shared by all types: "{type}Id", userId, title, category, level,
        difficulty (alias of level), type and sourceId. None values are
        dropped because the vector index cannot store nulls.

        Args:
            entity (EmbeddableEntity): The parsed entity.
            owner_id (str): The owning user id.

        Returns:
            dict: Flat string/number metadata.
        """
        level = getattr(entity, "level", None)
        metadata: dict[str, Any] = {
            self.get_id_metadata_key(): entity.id,
            "userId": owner_id,
            "title": entity.title,
            "category": getattr(entity, "category", None),
            "level": level,
            "difficulty": level,
            "type": self.get_entity_type(),
            "sourceId": entity.id,
        }
        metadata.update(self._build_type_metadata(entity))
        return {key: value for key, value in metadata.items() if value is not None}

    @abstractmethod
    def _build_type_metadata(self, entity: EmbeddableEntity) -> dict[str, Any]:
        """
        Returns the type-specific metadata fields (e.g. sectionCount for courses).
        """
        pass

    @abstractmethod
    def build_source_content(self, entity: EmbeddableEntity, normalized_text: str) -> SourceContent:
        """Build the snapshot stored on the status record.

        Args:
            entity (EmbeddableEntity): The parsed entity.
            normalized_text (str): The exact text sent to the embedding provider.

        Returns:
            SourceContent: The snapshot.
        """
        pass
