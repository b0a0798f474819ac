from abc import abstractmethod
from datetime import datetime, timezone
from typing import Any

from shared.clients.ClientInterface import ClientInterface
from shared.clients.vector.models.VectorRecord import VectorMatch, VectorRecord
from shared.exceptions import ProviderCallError

from shared.helper.HelperConfig import HelperConfig


class VectorClientInterface(ClientInterface):
    """Namespaced vector index access.

    One index hosts every entity type; each type lives in its own namespace
    and every vector carries an entityType metadata field. Queries always
    filter on entityType so a shared index never mixes types.
    """

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        """
        Returns the type of the client. E.g. "vector"
        """
        return "vector"

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_endpoint_upsert(self) -> str:
        """
        Returns the endpoint path for upsert requests. E.g. "/vectors/upsert"
        """
        pass

    @abstractmethod
    def _get_endpoint_query(self) -> str:
        """
        Returns the endpoint path for nearest-neighbour queries. E.g. "/query"
        """
        pass

    @abstractmethod
    def _get_endpoint_delete(self) -> str:
        """
        Returns the endpoint path for delete-by-id requests. E.g. "/vectors/delete"
        """
        pass

    @abstractmethod
    def _get_endpoint_index_stats(self) -> str:
        """
        Returns the endpoint path for index statistics. E.g. "/describe_index_stats"
        """
        pass

    ################ PAYLOAD BUILDER ##################
    @abstractmethod
    def get_upsert_payload(self, namespace: str, records: list[VectorRecord]) -> dict:
        """Builds the backend-specific request payload for an upsert.

        Args:
            namespace (str): Target namespace.
            records (list[VectorRecord]): The vectors to write.

        Returns:
            dict: The payload for the upsert request.
        """
        pass

    @abstractmethod
    def get_query_payload(self, namespace: str, vector: list[float], top_k: int, filters: dict[str, Any]) -> dict:
        """Builds the backend-specific request payload for a nearest-neighbour query.

        Args:
            namespace (str): Namespace to search.
            vector (list[float]): The query vector.
            top_k (int): Number of neighbours to return.
            filters (dict[str, Any]): Equality conditions, combined with AND.

        Returns:
            dict: The payload for the query request.
        """
        pass

    @abstractmethod
    def get_delete_payload(self, namespace: str, vector_ids: list[str]) -> dict:
        """Builds the backend-specific request payload for a delete by id.

        Args:
            namespace (str): Namespace holding the vectors.
            vector_ids (list[str]): Ids of the vectors to delete.

        Returns:
            dict: The payload for the delete request.
        """
        pass

    ################ RESPONSE PARSER ##################
    @abstractmethod
    def extract_matches(self, raw_response: dict) -> list[VectorMatch]:
        """Extracts the ranked matches from a raw query response.

        Args:
            raw_response (dict): The raw JSON response from the query endpoint.

        Returns:
            list[VectorMatch]: Matches ordered by descending score.
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_upsert(
        self,
        namespace: str,
        entity_type: str,
        vector_id: str,
        vector: list[float],
        metadata: dict[str, Any],
    ) -> None:
        """Insert or overwrite a single vector.

        entityType and upsertedAt are always stamped into the metadata; the
        caller cannot override entityType.

        Args:
            namespace (str): Target namespace (e.g. "course-embeddings").
            entity_type (str): Entity type stamped into the metadata.
            vector_id (str): Stable embedding id.
            vector (list[float]): The embedding vector.
            metadata (dict[str, Any]): Caller metadata (flat string/number values).

        Raises:
            ProviderCallError: If the upsert request fails.
        """
        record = VectorRecord(
            id=vector_id,
            values=vector,
            metadata={
                **metadata,
                "entityType": entity_type,
                "upsertedAt": datetime.now(timezone.utc).isoformat(),
            },
        )
        self.logging.debug("Upserting vector %s to namespace %s.", vector_id, namespace)
        await self.do_request(
            method="POST",
            json=self.get_upsert_payload(namespace, [record]),
            endpoint=self._get_endpoint_upsert(),
            raise_on_error=True,
        )
        self.logging.info("Upserted vector %s to %s namespace %s.", vector_id, self.get_engine_name(), namespace)

    async def do_query_nearest(
        self,
        namespace: str,
        entity_type: str,
        vector: list[float],
        top_k: int,
        filters: dict[str, Any] | None = None,
    ) -> list[VectorMatch]:
        """Return the top_k nearest neighbours of vector.

        The entityType condition is mandatory and combined with any extra
        equality filters by AND. An extra filter on entityType is ignored.

        Args:
            namespace (str): Namespace to search.
            entity_type (str): Entity type every match must carry.
            vector (list[float]): The query vector.
            top_k (int): Number of neighbours to return.
            filters (dict[str, Any] | None): Extra equality filters (e.g. {"level": "beginner"}).

        Returns:
            list[VectorMatch]: Matches ordered by descending score.

        Raises:
            ProviderCallError: If the query request fails.
        """
        conditions = {key: value for key, value in (filters or {}).items() if key != "entityType" and value is not None}
        conditions = {"entityType": entity_type, **conditions}
        response = await self.do_request(
            method="POST",
            json=self.get_query_payload(namespace, vector, top_k, conditions),
            endpoint=self._get_endpoint_query(),
            raise_on_error=True,
        )
        return self.extract_matches(self.parse_json(response))

    async def do_delete_one(self, namespace: str, vector_id: str) -> bool:
        """Delete a single vector by id, best effort.

        Deleting an id that does not exist is not an error. Any failure is
        logged and swallowed so the caller's own cleanup can proceed.

        Args:
            namespace (str): Namespace holding the vector.
            vector_id (str): Id of the vector to delete.

        Returns:
            bool: True if the backend acknowledged the delete, False otherwise.
        """
        try:
            response = await self.do_request(
                method="POST",
                json=self.get_delete_payload(namespace, [vector_id]),
                endpoint=self._get_endpoint_delete(),
            )
        except ProviderCallError as e:
            self.logging.error("Failed to delete vector %s from %s: %s", vector_id, self.get_engine_name(), e)
            return False

        if response.status_code == 404:
            self.logging.debug("Vector %s not present in namespace %s, nothing to delete.", vector_id, namespace)
            return True
        if response.status_code >= 300:
            self.logging.error(
                "Failed to delete vector %s from %s: status %d", vector_id, self.get_engine_name(), response.status_code
            )
            return False
        self.logging.info("Deleted vector %s from %s namespace %s.", vector_id, self.get_engine_name(), namespace)
        return True

    async def do_describe_index_stats(self) -> dict:
        """Fetch index statistics (vector counts per namespace).

        Raises:
            ProviderCallError: If the request fails.
        """
        response = await self.do_request(
            method="POST",
            json={},
            endpoint=self._get_endpoint_index_stats(),
            raise_on_error=True,
        )
        return self.parse_json(response)

    async def do_healthcheck(self) -> None:
        await self.do_describe_index_stats()
