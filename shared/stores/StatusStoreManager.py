from shared.helper.HelperConfig import HelperConfig
from shared.helper.engine_loader import import_engine_class
from shared.stores.StatusStoreInterface import StatusStoreInterface


class StatusStoreManager:
    """
    Builds the status record store selected by STORE_ENGINE (default "sql").

    "memory" keeps records in the current process only and is meant for tests.
    """

    def __init__(self, helper_config: HelperConfig):
        self.helper_config = helper_config
        self.logging = helper_config.get_logger()
        engine = helper_config.get_string_val("STORE_ENGINE", default="sql")
        store_class = import_engine_class("shared.stores", "StatusStore", engine, label="status store")
        self.store: StatusStoreInterface = store_class(helper_config=helper_config)
        self.logging.debug("Instantiated status store for engine: %s", self.store.get_engine_name())

    def get_store(self) -> StatusStoreInterface:
        return self.store
