from typing import Any

import httpx

from shared.clients.vector.VectorClientInterface import VectorClientInterface
from shared.clients.vector.models.VectorRecord import VectorMatch, VectorRecord
from shared.exceptions import ConfigError, ResponseShapeError
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class VectorClientPinecone(VectorClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._api_key = self.get_config_val("API_KEY", default=None, val_type="string")
        self._index_name = self.get_config_val("INDEX_NAME", default=None, val_type="string")
        self._index_host = self.get_config_val("INDEX_HOST", default="", val_type="string")
        self._control_plane_url = self.get_config_val("CONTROL_PLANE_URL", default="https://api.pinecone.io", val_type="string")
        self._api_version = self.get_config_val("API_VERSION", default="2025-01", val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Pinecone"

    def get_index_name(self) -> str:
        return self._index_name

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="API_KEY", val_type="string", default=None),
            EnvConfig(env_key="INDEX_NAME", val_type="string", default=None),
            EnvConfig(env_key="INDEX_HOST", val_type="string", default=""),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        return {
            "Api-Key": self._api_key,
            "X-Pinecone-API-Version": self._api_version,
        }

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        if not self._index_host:
            raise ConfigError(
                f"Pinecone index host for '{self._index_name}' is unknown. Set {self._get_config_key_name('INDEX_HOST')} or call boot() first."
            )
        host = self._index_host
        return host if host.startswith("http") else f"https://{host}"

    def _get_endpoint_upsert(self) -> str:
        return "/vectors/upsert"

    def _get_endpoint_query(self) -> str:
        return "/query"

    def _get_endpoint_delete(self) -> str:
        return "/vectors/delete"

    def _get_endpoint_index_stats(self) -> str:
        return "/describe_index_stats"

    def _get_endpoint_describe_index(self) -> str:
        return f"/indexes/{self._index_name}"

    ##########################################
    ########### PAYLOAD BUILDER ##############
    ##########################################

    def get_upsert_payload(self, namespace: str, records: list[VectorRecord]) -> dict:
        return {
            "vectors": [record.model_dump() for record in records],
            "namespace": namespace,
        }

    def get_query_payload(self, namespace: str, vector: list[float], top_k: int, filters: dict[str, Any]) -> dict:
        return {
            "namespace": namespace,
            "vector": vector,
            "topK": top_k,
            "filter": self._build_filter(filters),
            "includeMetadata": True,
            "includeValues": False,
        }

    def get_delete_payload(self, namespace: str, vector_ids: list[str]) -> dict:
        return {"ids": vector_ids, "namespace": namespace}

    def _build_filter(self, filters: dict[str, Any]) -> dict:
        conditions = [{key: {"$eq": value}} for key, value in filters.items()]
        if len(conditions) == 1:
            return conditions[0]
        return {"$and": conditions}

    ##########################################
    ########### RESPONSE PARSER ##############
    ##########################################

    def extract_matches(self, raw_response: dict) -> list[VectorMatch]:
        matches = raw_response.get("matches")
        if matches is None:
            return []
        if not isinstance(matches, list):
            raise ResponseShapeError(f"Pinecone query returned non-list matches: {type(matches).__name__}")
        return [
            VectorMatch(
                id=str(match.get("id", "")),
                score=match.get("score") or 0.0,
                metadata=match.get("metadata") or {},
            )
            for match in matches
        ]

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def boot(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        """Create the HTTP client and resolve the index host if it is not configured."""
        await super().boot(transport=transport)
        if not self._index_host:
            self._index_host = await self.do_resolve_index_host()
            self.logging.info("Resolved Pinecone index '%s' to host %s.", self._index_name, self._index_host)

    async def do_resolve_index_host(self) -> str:
        """Look up the data-plane host of the index through the control plane.

        Raises:
            ProviderCallError: If the control plane request fails.
            ResponseShapeError: If the response carries no host.
        """
        response = await self.do_request(
            method="GET",
            endpoint=self._get_endpoint_describe_index(),
            base_url=self._control_plane_url,
            raise_on_error=True,
        )
        host = self.parse_json(response).get("host")
        if not host:
            raise ResponseShapeError(f"Pinecone describe index response for '{self._index_name}' has no host.")
        return host
