from abc import abstractmethod

from shared.clients.ClientInterface import ClientInterface
from shared.clients.embed.QueryEmbeddingCache import QueryEmbeddingCache
from shared.exceptions import ConfigError, InputError

from shared.helper.HelperConfig import HelperConfig

INPUT_TYPE_DOCUMENT = "search_document"
INPUT_TYPE_QUERY = "search_query"


class EmbedClientInterface(ClientInterface):
    def __init__(self, helper_config: HelperConfig, query_cache: QueryEmbeddingCache | None = None):
        super().__init__(helper_config=helper_config)

        # query embedding cache, only used when do_embed(use_cache=True)
        self._query_cache = query_cache if query_cache is not None else QueryEmbeddingCache.from_config(helper_config)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        """
        Returns the type of the client. E.g. "embed"
        """
        return "embed"

    def get_query_cache(self) -> QueryEmbeddingCache:
        return self._query_cache

    @abstractmethod
    def get_model_name(self) -> str:
        """
        Returns the embedding model identifier sent with every request. E.g. "embed-v4.0"
        """
        pass

    @abstractmethod
    def get_vector_dimension(self) -> int:
        """
        Returns the configured output dimension of the embedding model.
        """
        pass

    @abstractmethod
    def get_default_input_type(self) -> str:
        """
        Returns the input type used when the caller does not pass one.
        """
        pass

    @abstractmethod
    def _get_api_key(self) -> str | None:
        """
        Returns the provider API key, or None if it is not configured.
        """
        pass

    ################ ENDPOINTS ##################
    @abstractmethod
    def get_endpoint_embedding(self) -> str:
        """
        Returns the endpoint path for embedding requests.

        Returns:
            str: The endpoint path for embedding requests (e.g. "/v2/embed")

        Raises:
            NotImplementedError: If the method is not implemented in a subclass.
        """
        pass

    ################ PAYLOAD BUILDER ##################
    @abstractmethod
    def get_embed_payload(self, texts: list[str], input_type: str) -> dict:
        """Build the backend-specific request body for an embedding request.

        Args:
            texts (list[str]): The texts to embed.
            input_type (str): "search_document" or "search_query".

        Returns:
            dict: JSON-serialisable request body.

        Raises:
            NotImplementedError: If the method is not implemented in a subclass.
        """
        pass

    ##########################################
    ################# OTHER ##################
    ##########################################

    @abstractmethod
    def extract_embedding_from_response(self, response_data: dict) -> list[float]:
        """Extract the first embedding vector from a raw embedding API response.

        Args:
            response_data (dict): The parsed JSON response body.

        Returns:
            list[float]: The embedding vector of the first input text.

        Raises:
            ResponseShapeError: If no vector can be located in the response.
            NotImplementedError: If the method is not implemented in a subclass.
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_embed(self, text: str, use_cache: bool = False, input_type: str | None = None) -> list[float]:
        """Embed a single text and return its vector.

        Args:
            text (str): The text to embed.
            use_cache (bool): Consult and populate the query cache. Document
                embeddings pass False, search queries pass True.
            input_type (str | None): Provider input type. Defaults to
                get_default_input_type().

        Returns:
            list[float]: The embedding vector.

        Raises:
            ConfigError: If the provider API key is absent.
            InputError: If text is empty or whitespace only.
            ProviderCallError: If the HTTP request fails or returns non-2xx.
            ResponseShapeError: If the response does not contain a vector.
        """
        if not self._get_api_key():
            raise ConfigError(f"{self._get_config_key_name('API_KEY')} is required for embedding generation.")
        if not text or not text.strip():
            raise InputError("Text content is required for embedding generation.")

        input_type = input_type or self.get_default_input_type()
        if use_cache:
            cached = self._query_cache.get(text, input_type)
            if cached is not None:
                self.logging.debug("Query embedding cache hit (%d chars).", len(text))
                return cached

        body = self.get_embed_payload([text], input_type)
        self.logging.debug("Generating embedding for text of length %d with model %s.", len(text), self.get_model_name())
        response = await self.do_request(
            method="POST",
            endpoint=self.get_endpoint_embedding(),
            json=body,
            raise_on_error=True,
        )
        vector = self.extract_embedding_from_response(self.parse_json(response))
        self.logging.debug("Generated embedding with %d dimensions.", len(vector))

        if use_cache:
            self._query_cache.set(text, input_type, vector)
        return vector

    async def do_healthcheck(self) -> None:
        """Embed a short fixed text without the cache."""
        await self.do_embed("embedding service health check", use_cache=False)
