from typing import Any

from shared.models.embedding_status import SourceContent
from shared.models.entities import Roadmap, RoadmapNode
from shared.profiles.EntityProfileInterface import EntityProfileInterface
from shared.text.cleaners import clean_node_title

MAX_NODE_TITLE_REPEAT = 3


def weighted_node_titles(nodes: list[RoadmapNode]) -> str:
    """Repeat node titles so earlier roadmap steps dominate the embedding.

    The node at position i of n is repeated min(max(1, n - i), 3) times, so
    for [A, B, C] the result is "A A A B B C". Titles are cleaned with
    clean_node_title() first; nodes whose cleaned title is empty are skipped
    but still count towards the position.

    Args:
        nodes (list[RoadmapNode]): Nodes already sorted by sequence.

    Returns:
        str: The space-joined weighted titles.
    """
    total = len(nodes)
    weighted: list[str] = []
    for index, node in enumerate(nodes):
        title = clean_node_title(node.title)
        if not title:
            continue
        weight = max(1, total - index)
        weighted.extend([title] * min(weight, MAX_NODE_TITLE_REPEAT))
    return " ".join(weighted)


class EntityProfileRoadmap(EntityProfileInterface):

    ################ GENERAL ##################
    def _get_entity_type(self) -> str:
        return "Roadmap"

    def _get_model_class(self) -> type[Roadmap]:
        return Roadmap

    ############ TEXT EXTRACTION #############
    def _collect_text_parts(self, entity: Roadmap) -> list[str | None]:
        nodes = sorted(entity.nodes, key=lambda node: node.sequence)
        descriptions = self._join([
            self._clean_description(paragraph)
            for node in nodes
            for paragraph in node.description
            if paragraph and paragraph.strip()
        ])
        return [
            entity.level,
            weighted_node_titles(nodes),
            descriptions,
        ]

    ############### METADATA #################
    def _build_type_metadata(self, entity: Roadmap) -> dict[str, Any]:
        return {
            "roadmapType": entity.roadmap_type,
            "nodeCount": len(entity.nodes),
        }

    def build_source_content(self, entity: Roadmap, normalized_text: str) -> SourceContent:
        return SourceContent(
            title=entity.title,
            level=entity.level,
            roadmap_type=entity.roadmap_type,
            concatenated_text=normalized_text,
        )
