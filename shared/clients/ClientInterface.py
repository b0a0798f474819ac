from abc import ABC, abstractmethod
from typing import Any

import httpx
from httpx._types import QueryParamTypes

from shared.exceptions import ConfigError, ProviderCallError, ResponseShapeError
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class ClientInterface(ABC):
    """Base for every remote backend the bridge talks to over HTTP.

    A concrete client is identified by its type ("embed", "vector", "source")
    and its engine ("cohere", "pinecone", "rest"); together they form the
    prefix of its environment settings, e.g. ``EMBED_COHERE_API_KEY``.
    Required settings are validated on construction, the HTTP client is only
    opened by :meth:`boot`.
    """

    def __init__(self, helper_config: HelperConfig):
        self.logging = helper_config.get_logger()
        self._helper_config = helper_config
        self.timeout = helper_config.get_number_val(f"{self.get_client_type().upper()}_TIMEOUT", default=30.0)

        self._client: httpx.AsyncClient | None = None
        self.validate_full_configuration()

    ##########################################
    ############### CHECKER ##################
    ##########################################

    def validate_full_configuration(self) -> None:
        """
        Reads every required setting once so a missing key fails at startup.

        Raises:
            ConfigError: If a required setting is missing or malformed.
        """
        for config in self._get_required_config():
            self.get_config_val(raw_key=config.env_key, default=config.default, val_type=config.val_type)

    def is_booted(self) -> bool:
        return self._client is not None

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def get_client_type(self) -> str:
        return self._get_client_type().lower()

    @abstractmethod
    def _get_client_type(self) -> str:
        """
        Returns the kind of backend, e.g. "vector".
        """
        pass

    def get_engine_name(self) -> str:
        return self._get_engine_name().lower()

    @abstractmethod
    def _get_engine_name(self) -> str:
        """
        Returns the backend product, e.g. "Pinecone".
        """
        pass

    ################ CONFIG ##################
    @abstractmethod
    def _get_required_config(self) -> list[EnvConfig]:
        """
        Returns the settings this engine needs, without the type/engine prefix.
        """
        pass

    def _get_config_key_name(self, raw_key: str) -> str:
        """
        Returns:
            str: The prefixed environment key, e.g. "VECTOR_PINECONE_INDEX_NAME".
        """
        return f"{self.get_client_type().upper()}_{self.get_engine_name().upper()}_{raw_key.upper()}"

    def get_config_val(self, raw_key: str, default: Any = None, val_type: str = "string") -> Any:
        """
        Reads one engine setting through HelperConfig.

        Args:
            raw_key (str): Setting name without prefix, e.g. "API_KEY".
            default (Any): Value used when unset. None makes the setting required.
            val_type (str): One of "string", "number", "bool", "list".

        Raises:
            ConfigError: If the setting is required but unset, or val_type is unknown.
        """
        key = self._get_config_key_name(raw_key)
        getters = {
            "string": self._helper_config.get_string_val,
            "number": self._helper_config.get_number_val,
            "bool": self._helper_config.get_bool_val,
            "list": self._helper_config.get_list_val,
        }
        if val_type not in getters:
            raise ConfigError(f"Unsupported value type '{val_type}' for setting '{key}'.")
        return getters[val_type](key, default=default)

    ################ AUTH ##################
    @abstractmethod
    def _get_auth_header(self) -> dict:
        """
        Returns the headers that authenticate every request. May be empty.
        """
        pass

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_base_url(self) -> str:
        """
        Returns the root URL requests are sent to, e.g. "https://api.cohere.com".
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    @abstractmethod
    async def do_healthcheck(self) -> None:
        """Issue the cheapest real call the backend supports.

        Raises:
            ProviderCallError: If the backend is unreachable or rejects the call.
        """
        pass

    ##########################################
    ############ CORE REQUESTS ###############
    ##########################################

    async def boot(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        """Open the HTTP client. Tests pass an ``httpx.MockTransport``."""
        self._client = httpx.AsyncClient(timeout=self.timeout, transport=transport)

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def do_request(
        self,
        method: str = "GET",
        json: dict | None = None,
        params: QueryParamTypes | None = None,
        endpoint: str = "",
        base_url: str | None = None,
        additional_headers: dict | None = None,
        raise_on_error: bool = False,
    ) -> httpx.Response:
        """Send one request to the backend.

        Args:
            method: HTTP verb.
            json: JSON body, omitted when None.
            params: Query string parameters.
            endpoint: Path appended to the base URL.
            base_url: Replaces _get_base_url() for this call (e.g. a control-plane host).
            additional_headers: Merged over the auth headers.
            raise_on_error: Turn a non-2xx status into ProviderCallError.

        Raises:
            ProviderCallError: If the client is not booted, the transport fails,
                or raise_on_error is set and the status is not 2xx.
        """
        if self._client is None:
            raise ProviderCallError(
                f"{self.get_client_type().upper()} client '{self.get_engine_name()}' is not booted."
            )

        path = endpoint.strip().lstrip("/")
        root = base_url if base_url is not None else self._get_base_url()
        url = f"{root.rstrip('/')}/{path}" if path else root.rstrip("/")
        headers = {**self._get_auth_header(), **(additional_headers or {})}

        try:
            response = await self._client.request(method, url, headers=headers, params=params, json=json)
        except httpx.HTTPError as e:
            self.logging.error("Request to %s failed: %s", url, e)
            raise ProviderCallError(f"Request to {url} failed: {e}") from e

        if raise_on_error and response.status_code >= 300:
            self.logging.error("Request to %s failed with status %d: %s", url, response.status_code, response.text[:200])
            raise ProviderCallError(
                f"Request to {url} failed with status {response.status_code}",
                status_code=response.status_code,
            )
        return response

    def parse_json(self, response: httpx.Response, expected_type: type = dict) -> Any:
        """Decode the JSON body of a successful response.

        Raises:
            ResponseShapeError: If the body is not JSON (e.g. an HTML gateway page)
                or its top level is not of expected_type.
        """
        try:
            data = response.json()
        except ValueError as e:
            self.logging.error(
                "%s returned a non-JSON body (status %d): %s",
                self.get_engine_name(), response.status_code, response.text[:200],
            )
            raise ResponseShapeError(
                f"{self.get_engine_name()} returned a non-JSON body (status {response.status_code})."
            ) from e
        if not isinstance(data, expected_type):
            raise ResponseShapeError(
                f"{self.get_engine_name()} returned {type(data).__name__}, expected {expected_type.__name__}."
            )
        return data
