from typing import Any

from shared.models.embedding_status import SourceContent
from shared.models.entities import Course
from shared.profiles.EntityProfileInterface import EntityProfileInterface


class EntityProfileCourse(EntityProfileInterface):

    ################ GENERAL ##################
    def _get_entity_type(self) -> str:
        return "Course"

    def _get_model_class(self) -> type[Course]:
        return Course

    ############ TEXT EXTRACTION #############
    def _collect_text_parts(self, entity: Course) -> list[str | None]:
        # section titles only, lesson detail dilutes the signal
        sections = sorted(entity.sections, key=lambda section: section.order)
        section_titles = self._join([section.title for section in sections])
        return [
            entity.subtitle,
            self._clean_description(entity.description),
            entity.category,
            entity.level,
            self._join(entity.outcomes),
            section_titles,
        ]

    ############### METADATA #################
    def _build_type_metadata(self, entity: Course) -> dict[str, Any]:
        return {
            "subtitle": entity.subtitle or "",
            "sectionCount": len(entity.sections),
        }

    def build_source_content(self, entity: Course, normalized_text: str) -> SourceContent:
        return SourceContent(
            title=entity.title,
            subtitle=entity.subtitle or "",
            description=entity.description,
            category=entity.category,
            level=entity.level,
            concatenated_text=normalized_text,
        )
