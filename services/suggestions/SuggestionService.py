"""Suggestion search.

Turns a free-text query (typically a roadmap node label) into a ranked list of
courses, videos or roadmaps: clean, normalise, embed with the query cache,
over-fetch nearest neighbours, threshold, truncate, map.
"""

from typing import Any

from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.clients.vector.VectorClientInterface import VectorClientInterface
from shared.clients.vector.models.VectorRecord import VectorMatch
from shared.exceptions import InputError
from shared.helper.HelperConfig import HelperConfig
from shared.models.search import SuggestionItem
from shared.profiles.EntityProfileInterface import EntityProfileInterface
from shared.profiles.EntityProfileManager import EntityProfileManager
from shared.text.cleaners import clean_node_query
from shared.text.normalizer import normalize

DEFAULT_SCORE_THRESHOLD = 0.45
MIN_CANDIDATES = 15
OVERFETCH_FACTOR = 3


class SuggestionService:
    """Semantic search over one entity type's namespace."""

    def __init__(
        self,
        helper_config: HelperConfig,
        profile_manager: EntityProfileManager,
        embed_client: EmbedClientInterface,
        vector_client: VectorClientInterface,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._profiles = profile_manager
        self._embed = embed_client
        self._vector = vector_client
        self._threshold = float(
            helper_config.get_number_val("SUGGESTION_SCORE_THRESHOLD", default=DEFAULT_SCORE_THRESHOLD)
        )

    def get_threshold(self) -> float:
        return self._threshold

    ##########################################
    ################ CORE ####################
    ##########################################

    async def do_search(
        self,
        query_text: str,
        entity_type: str,
        top_k: int = 5,
        extra_filters: dict[str, Any] | None = None,
        from_roadmap_node: bool = False,
        threshold: float | None = None,
    ) -> list[SuggestionItem]:
        """Find the entities most similar to a query.

        Args:
            query_text (str): Free-text query.
            entity_type (str): Entity type to search ("course", "video", "roadmap").
            top_k (int): Maximum number of suggestions.
            extra_filters (dict[str, Any] | None): Extra metadata equality filters.
            from_roadmap_node (bool): The query is a roadmap node label and is
                passed through clean_node_query() first.
            threshold (float | None): Minimum similarity score. Defaults to
                SUGGESTION_SCORE_THRESHOLD.

        Returns:
            list[SuggestionItem]: At most top_k items, best first.

        Raises:
            InputError: If the query is empty or top_k is not positive.
            ConfigError | ProviderCallError | ResponseShapeError: Propagated.
        """
        if not query_text or not query_text.strip():
            raise InputError("Query text is required.")
        if top_k < 1:
            raise InputError("top_k must be at least 1.")
        profile = self._profiles.get_profile(entity_type)
        min_score = self._threshold if threshold is None else threshold

        cleaned = clean_node_query(query_text) if from_roadmap_node else query_text.strip()
        # a query made only of short or stop words would otherwise embed as ""
        processed = normalize(cleaned) or cleaned.lower()
        self.logging.info(
            "Searching %s suggestions for %r (top_k=%d, threshold=%.2f).",
            profile.get_entity_type(), processed[:80], top_k, min_score,
        )

        vector = await self._embed.do_embed(processed, use_cache=True)
        matches = await self._vector.do_query_nearest(
            namespace=profile.get_namespace(),
            entity_type=profile.get_entity_type(),
            vector=vector,
            top_k=max(top_k * OVERFETCH_FACTOR, MIN_CANDIDATES),
            filters=extra_filters,
        )

        relevant = [match for match in matches if match.score >= min_score]
        items = self._build_suggestion_items(profile, relevant[:top_k])

        self.logging.info(
            "Suggestion search complete: %d candidates, %d above threshold, %d returned.",
            len(matches), len(relevant), len(items),
        )
        return items

    ##########################################
    ############### HELPERS ##################
    ##########################################

    def _build_suggestion_items(self, profile: EntityProfileInterface, matches: list[VectorMatch]) -> list[SuggestionItem]:
        """Map vector matches back to suggestion items, dropping matches without an entity id."""
        label = profile.get_entity_type().capitalize()
        items: list[SuggestionItem] = []
        for match in matches:
            metadata = match.metadata
            entity_id = metadata.get(profile.get_id_metadata_key()) or metadata.get("sourceId")
            if not entity_id:
                self.logging.warning("Dropping match %s: no entity id in metadata.", match.id)
                continue
            items.append(
                SuggestionItem(
                    id=str(entity_id),
                    title=str(metadata.get("title") or f"Unknown {label}"),
                    category=str(metadata.get("category") or "Unknown Category"),
                    level=str(metadata.get("level") or "Unknown Level"),
                    score=match.score,
                )
            )
        return items
