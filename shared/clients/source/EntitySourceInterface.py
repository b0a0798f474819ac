from abc import abstractmethod
from typing import Any

from shared.clients.ClientInterface import ClientInterface
from shared.exceptions import ProviderCallError

from shared.helper.HelperConfig import HelperConfig


class EntitySourceInterface(ClientInterface):
    """Read access to the CRUD layer that owns courses, videos and roadmaps."""

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        """
        Returns the type of the client. E.g. "source"
        """
        return "source"

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_endpoint_entity(self, entity_type: str, entity_id: str) -> str:
        """
        Returns the endpoint path of a single entity. E.g. "/api/courses/42"
        """
        pass

    ################ RESPONSE PARSER ##################
    @abstractmethod
    def _parse_entity_response(self, entity_type: str, response: Any) -> dict | None:
        """
        Unwraps the raw JSON body into the plain entity dict, or None if the
        body carries no entity.
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_fetch_entity(self, entity_type: str, entity_id: str) -> dict | None:
        """Fetch the current state of one entity.

        Args:
            entity_type (str): "course", "video" or "roadmap".
            entity_id (str): The entity id in the CRUD layer.

        Returns:
            dict | None: The raw entity, or None if the CRUD layer does not know it.

        Raises:
            ProviderCallError: If the request fails for any reason other than 404.
        """
        endpoint = self._get_endpoint_entity(entity_type, entity_id)
        response = await self.do_request(method="GET", endpoint=endpoint)
        if response.status_code == 404:
            self.logging.warning("%s %s not found in %s.", entity_type.capitalize(), entity_id, self.get_engine_name())
            return None
        if response.status_code >= 300:
            self.logging.error(
                "Fetching %s %s from %s failed with status %d.",
                entity_type, entity_id, self.get_engine_name(), response.status_code,
            )
            raise ProviderCallError(
                f"Fetching {entity_type} {entity_id} failed with status {response.status_code}",
                status_code=response.status_code,
            )
        return self._parse_entity_response(entity_type, self.parse_json(response))
