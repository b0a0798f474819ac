from shared.clients.source.EntitySourceInterface import EntitySourceInterface
from shared.helper.HelperConfig import HelperConfig
from shared.helper.engine_loader import import_engine_class


class EntitySourceManager:
    """
    Builds the entity source client selected by SOURCE_ENGINE (default "rest").
    """

    def __init__(self, helper_config: HelperConfig):
        self.helper_config = helper_config
        self.logging = helper_config.get_logger()
        engine = helper_config.get_string_val("SOURCE_ENGINE", default="rest")
        client_class = import_engine_class("shared.clients.source", "EntitySource", engine, label="entity source")
        self.client: EntitySourceInterface = client_class(helper_config=helper_config)
        self.logging.debug("Instantiated entity source client for engine: %s", self.client.get_engine_name())

    def get_client(self) -> EntitySourceInterface:
        return self.client
