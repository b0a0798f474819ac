"""Environment-backed settings for the embedding bridge.

Every engine reads its settings as ``{TYPE}_{ENGINE}_{KEY}`` (for example
``EMBED_COHERE_API_KEY``); the service-wide knobs are plain keys such as
``SUGGESTION_SCORE_THRESHOLD``. Empty variables count as unset.
"""

import logging
import os

from shared.exceptions import ConfigError


TRUTHY_VALUES = ("true", "1", "yes", "on")


class HelperConfig:
    """Typed getters over ``os.environ``. A getter without a default treats the key as required."""

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def _read_raw(self, key: str) -> str | None:
        val = os.getenv(key.upper())
        if val is None or not val.strip():
            return None
        return val.strip()

    def _require(self, key: str, default):
        if default is None:
            raise ConfigError(f"Environment variable '{key.upper()}' is not set.")
        return default

    def get_string_val(self, key: str, default: str | None = None) -> str:
        """Read a string environment variable.

        Raises:
            ConfigError: If the variable is not set and no default is provided.
        """
        raw = self._read_raw(key)
        return raw if raw is not None else self._require(key, default)

    def get_number_val(self, key: str, default: float | int | None = None) -> float | int:
        """Read a numeric environment variable. Values containing a dot become floats.

        Raises:
            ConfigError: If the variable is missing without default, or is not a number.
        """
        raw = self._read_raw(key)
        if raw is None:
            return self._require(key, default)
        try:
            return float(raw) if "." in raw else int(raw)
        except ValueError:
            raise ConfigError(f"Environment variable '{key.upper()}' is not a valid number: '{raw}'.")

    def get_bool_val(self, key: str, default: bool | None = None) -> bool:
        """Read a boolean environment variable. Anything outside TRUTHY_VALUES is False."""
        raw = self._read_raw(key)
        if raw is None:
            return self._require(key, default)
        return raw.lower() in TRUTHY_VALUES

    def get_list_val(self, key: str, default: list | None = None, separator: str = ",", element_type: type = str) -> list:
        """Read a bracketed list such as ``[course,video]``.

        Args:
            key (str): Environment variable name (case-insensitive).
            default (list | None): Fallback value if the variable is not set.
            separator (str): Element delimiter inside the brackets.
            element_type (type): Callable every element is cast with.

        Returns:
            list: The parsed elements; ``[]`` for ``[]``.

        Raises:
            ConfigError: If the variable is missing without default, the brackets
                         are missing, or an element cannot be cast.
        """
        raw = self._read_raw(key)
        if raw is None:
            return self._require(key, default)
        if not (raw.startswith("[") and raw.endswith("]")):
            raise ConfigError(
                f"Environment variable '{key.upper()}' must look like '[a{separator}b]'. Got: '{raw}'"
            )
        elements = [part.strip() for part in raw[1:-1].split(separator)]
        try:
            return [element_type(part) for part in elements if part]
        except ValueError as e:
            raise ConfigError(f"Environment variable '{key.upper()}' has an element that is not {element_type.__name__}: {e}")

    def get_logger(self) -> logging.Logger:
        return self._logger
