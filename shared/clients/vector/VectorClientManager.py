from shared.clients.vector.VectorClientInterface import VectorClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.helper.engine_loader import import_engine_class


class VectorClientManager:
    """
    Builds the vector index client selected by VECTOR_ENGINE (default "pinecone").
    """

    def __init__(self, helper_config: HelperConfig):
        self.helper_config = helper_config
        self.logging = helper_config.get_logger()
        engine = helper_config.get_string_val("VECTOR_ENGINE", default="pinecone")
        client_class = import_engine_class("shared.clients.vector", "VectorClient", engine, label="vector")
        self.client: VectorClientInterface = client_class(helper_config=helper_config)
        self.logging.debug("Instantiated vector client for engine: %s", self.client.get_engine_name())

    def get_client(self) -> VectorClientInterface:
        return self.client
