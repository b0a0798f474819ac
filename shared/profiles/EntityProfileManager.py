from shared.exceptions import InputError
from shared.helper.HelperConfig import HelperConfig
from shared.profiles.EntityProfileInterface import EntityProfileInterface


class EntityProfileManager:
    """
    Manager class to resolve entity profiles by entity type.
    """

    def __init__(self, helper_config: HelperConfig):
        self.helper_config = helper_config
        self.logging = helper_config.get_logger()
        self.profiles = self._initialize_profiles()

    def _get_entity_types_from_env(self) -> list[str]:
        """
        Reads the list of embedded entity types from ENV configuration.

        Returns:
            list[str]: Entity type names, capitalised (e.g. ["Course", "Video"]).
        """
        entity_types = self.helper_config.get_list_val("EMBEDDING_ENTITY_TYPES", default=["course", "video", "roadmap"])
        return [entity_type.strip().lower().capitalize() for entity_type in entity_types]

    def _initialize_profiles(self) -> dict[str, EntityProfileInterface]:
        """
        Instantiates one profile per configured entity type.

        Returns:
            dict[str, EntityProfileInterface]: Profiles keyed by lowercase entity type.

        Raises:
            ValueError: If a configured entity type has no profile implementation.
        """
        profiles: dict[str, EntityProfileInterface] = {}
        for entity_type in self._get_entity_types_from_env():
            className = f"EntityProfile{entity_type}"
            try:
                module = __import__(
                    f"shared.profiles.{className}",
                    fromlist=[className],
                )
                profile = getattr(module, className)()
            except (ImportError, AttributeError) as e:
                raise ValueError(f"Unsupported entity type specified: '{entity_type}'. Error: {e}")
            profiles[profile.get_entity_type()] = profile
            self.logging.debug(f"Instantiated entity profile for type: {entity_type}")
        if not profiles:
            raise ValueError("No entity profiles could be instantiated from the configured entity types.")
        return profiles

    def get_profile(self, entity_type: str) -> EntityProfileInterface:
        """
        Returns the profile for an entity type.

        Raises:
            InputError: If the entity type is unknown or not enabled.
        """
        profile = self.profiles.get((entity_type or "").strip().lower())
        if profile is None:
            raise InputError(f"Unknown entity type '{entity_type}'. Expected one of: {', '.join(self.profiles)}")
        return profile

    def get_profiles(self) -> list[EntityProfileInterface]:
        """
        Returns all instantiated profiles.
        """
        return list(self.profiles.values())
