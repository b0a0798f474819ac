from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.clients.embed.QueryEmbeddingCache import QueryEmbeddingCache
from shared.helper.HelperConfig import HelperConfig
from shared.helper.engine_loader import import_engine_class


class EmbedClientManager:
    """
    Builds the embedding provider client selected by EMBED_ENGINE (default "cohere").

    The optional query cache is handed to the client; ingestion never reads it.
    """

    def __init__(self, helper_config: HelperConfig, query_cache: QueryEmbeddingCache | None = None):
        self.helper_config = helper_config
        self.logging = helper_config.get_logger()
        engine = helper_config.get_string_val("EMBED_ENGINE", default="cohere")
        client_class = import_engine_class("shared.clients.embed", "EmbedClient", engine, label="Embed")
        self.client: EmbedClientInterface = client_class(helper_config=helper_config, query_cache=query_cache)
        self.logging.debug("Instantiated embed client for engine: %s", self.client.get_engine_name())

    def get_client(self) -> EmbedClientInterface:
        return self.client
