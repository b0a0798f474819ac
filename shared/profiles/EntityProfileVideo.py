from typing import Any

from shared.models.embedding_status import SourceContent
from shared.models.entities import Video
from shared.profiles.EntityProfileInterface import EntityProfileInterface


class EntityProfileVideo(EntityProfileInterface):

    ################ GENERAL ##################
    def _get_entity_type(self) -> str:
        return "Video"

    def _get_model_class(self) -> type[Video]:
        return Video

    ############ TEXT EXTRACTION #############
    def _collect_text_parts(self, entity: Video) -> list[str | None]:
        return [
            entity.subtitle,
            self._clean_description(entity.description),
            entity.category,
            entity.subcategory,
            entity.level,
            entity.language,
            self._join(entity.outcomes),
            self._join(entity.prerequisites),
            self._join(entity.tags),
        ]

    ############### METADATA #################
    def _build_type_metadata(self, entity: Video) -> dict[str, Any]:
        return {
            "subtitle": entity.subtitle or "",
            "subcategory": entity.subcategory or "",
            "duration": entity.duration or "",
        }

    def build_source_content(self, entity: Video, normalized_text: str) -> SourceContent:
        return SourceContent(
            title=entity.title,
            subtitle=entity.subtitle or "",
            description=entity.description,
            category=entity.category,
            subcategory=entity.subcategory or "",
            level=entity.level,
            concatenated_text=normalized_text,
        )
