"""Pydantic models for the entities the bridge embeds.

Hierarchy:
  EmbeddableEntity: fields shared by all entity types (id, title).
  Course: tutor-authored course with ordered sections.
  Video: standalone video with outcomes, prerequisites and tags.
  Roadmap: learning roadmap made of sequenced nodes.

The models are read-only snapshots of what the CRUD layer sends or returns.
They accept the CRUD layer's Mongo-style `_id` and camelCase keys.
"""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class EmbeddableEntity(BaseModel):
    """Minimum contract of every embeddable entity."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(validation_alias=AliasChoices("id", "_id"))
    title: str = ""

    @field_validator("id", mode="before")
    @classmethod
    def _id_to_str(cls, value):
        return str(value) if value is not None else value

    @field_validator("title", mode="before")
    @classmethod
    def _none_title(cls, value):
        return value or ""


class CourseSection(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str | None = None
    order: int = 0

    @field_validator("order", mode="before")
    @classmethod
    def _none_order(cls, value):
        return value or 0


class Course(EmbeddableEntity):
    subtitle: str | None = None
    description: str | None = None
    category: str | None = None
    level: str | None = None
    outcomes: list[str] = []
    sections: list[CourseSection] = []


class Video(EmbeddableEntity):
    subtitle: str | None = None
    description: str | None = None
    category: str | None = None
    subcategory: str | None = None
    level: str | None = None
    language: str | None = None
    outcomes: list[str] = []
    prerequisites: list[str] = []
    tags: list[str] = []
    duration: str | None = None

    @field_validator("duration", mode="before")
    @classmethod
    def _duration_to_str(cls, value):
        return str(value) if value is not None else None


class RoadmapNode(BaseModel):
    """A single roadmap step. `description` holds one or more paragraphs."""

    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    title: str = ""
    description: list[str] = []
    sequence: int = 0

    @field_validator("title", mode="before")
    @classmethod
    def _none_title(cls, value):
        return value or ""

    @field_validator("description", mode="before")
    @classmethod
    def _description_to_list(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return [v for v in value if v is not None]

    @field_validator("sequence", mode="before")
    @classmethod
    def _none_sequence(cls, value):
        return value or 0


class Roadmap(EmbeddableEntity):
    level: str | None = None
    roadmap_type: str | None = Field(default=None, validation_alias=AliasChoices("roadmap_type", "roadmapType"))
    nodes: list[RoadmapNode] = []
