from typing import Any

from shared.clients.source.EntitySourceInterface import EntitySourceInterface
from shared.exceptions import InputError
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig

# CRUD layer route segment per entity type
ENTITY_ROUTES = {
    "course": "courses",
    "video": "videos",
    "roadmap": "roadmap",
}


class EntitySourceRest(EntitySourceInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default=None, val_type="string")
        self._api_key = self.get_config_val("API_KEY", default="", val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Rest"

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default=None),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        if not self._api_key:
            return {}
        return {"Authorization": f"Bearer {self._api_key}"}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_entity(self, entity_type: str, entity_id: str) -> str:
        route = ENTITY_ROUTES.get(entity_type.lower())
        if route is None:
            raise InputError(f"No CRUD route known for entity type '{entity_type}'.")
        return f"/api/{route}/{entity_id}"

    def _get_endpoint_health(self) -> str:
        return "/health"

    ################ RESPONSE PARSER ##################
    def _parse_entity_response(self, entity_type: str, response: Any) -> dict | None:
        if not isinstance(response, dict):
            return None
        # the CRUD layer wraps single entities as {"course": {...}} or {"data": {...}}
        for envelope in (entity_type.lower(), "data"):
            inner = response.get(envelope)
            if isinstance(inner, dict):
                return inner
        return response or None

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_healthcheck(self) -> None:
        await self.do_request(method="GET", endpoint=self._get_endpoint_health(), raise_on_error=True)
