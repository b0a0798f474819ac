from shared.clients.embed.EmbedClientInterface import EmbedClientInterface, INPUT_TYPE_DOCUMENT
from shared.clients.embed.QueryEmbeddingCache import QueryEmbeddingCache
from shared.exceptions import ResponseShapeError
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class EmbedClientCohere(EmbedClientInterface):
    def __init__(self, helper_config: HelperConfig, query_cache: QueryEmbeddingCache | None = None):
        super().__init__(helper_config=helper_config, query_cache=query_cache)
        self._base_url = self.get_config_val("BASE_URL", default="https://api.cohere.com", val_type="string")
        self._api_key = self.get_config_val("API_KEY", default=None, val_type="string")
        self._model = self.get_config_val("MODEL", default="embed-v4.0", val_type="string")
        self._vector_dimension = int(self.get_config_val("VECTOR_DIMENSION", default=1536, val_type="number"))
        self._truncate = self.get_config_val("TRUNCATE", default="END", val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Cohere"

    def get_model_name(self) -> str:
        return self._model

    def get_vector_dimension(self) -> int:
        return self._vector_dimension

    def get_default_input_type(self) -> str:
        # queries are embedded as documents too; asymmetric query mode is opt-in
        return INPUT_TYPE_DOCUMENT

    def _get_api_key(self) -> str | None:
        return self._api_key

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default="https://api.cohere.com"),
            EnvConfig(env_key="API_KEY", val_type="string", default=None),
            EnvConfig(env_key="MODEL", val_type="string", default="embed-v4.0"),
            EnvConfig(env_key="VECTOR_DIMENSION", val_type="number", default=1536),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        if self._api_key:
            return {"Authorization": f"Bearer {self._api_key}"}
        else:
            return {}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def get_endpoint_embedding(self) -> str:
        return "/v2/embed"

    ################ PAYLOAD BUILDER ##################
    def get_embed_payload(self, texts: list[str], input_type: str) -> dict:
        """Build the Cohere v2 embed request body.

        Returns:
            dict: {"texts": [...], "model": "...", "input_type": "...",
                   "embedding_types": ["float"], "truncate": "END"}
        """
        return {
            "texts": texts,
            "model": self._model,
            "input_type": input_type,
            "embedding_types": ["float"],
            "truncate": self._truncate,
        }

    ##########################################
    ################# OTHER ##################
    ##########################################

    def extract_embedding_from_response(self, response_data: dict) -> list[float]:
        """Extract the first vector from a Cohere embed response.

        embed-v4.0 nests vectors by precision type:
            {"embeddings": {"float": [[...]], "int8": [[...]]}}
        Older responses carry a flat list:
            {"embeddings": [[...]]}

        The float vector wins, then the first other populated type, then the
        legacy flat shape.

        Raises:
            ResponseShapeError: If none of the shapes yields a vector.
        """
        embeddings = response_data.get("embeddings") if isinstance(response_data, dict) else None
        if not embeddings:
            raise ResponseShapeError("No embeddings returned from Cohere API.")

        if isinstance(embeddings, dict):
            float_vectors = embeddings.get("float")
            if isinstance(float_vectors, list) and float_vectors and float_vectors[0]:
                return float_vectors[0]
            for embedding_type, vectors in embeddings.items():
                if isinstance(vectors, list) and vectors and vectors[0]:
                    self.logging.debug("Using '%s' embeddings, no float vectors in response.", embedding_type)
                    return vectors[0]

        if isinstance(embeddings, list) and embeddings and isinstance(embeddings[0], list) and embeddings[0]:
            self.logging.debug("Using legacy flat embeddings response.")
            return embeddings[0]

        raise ResponseShapeError(
            "Unexpected embedding response structure. "
            f"Response keys: {list(response_data.keys())}"
        )
