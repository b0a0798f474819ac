from typing import Literal

from pydantic import BaseModel


class EnvConfig(BaseModel):
    """One setting a client engine requires.

    ``env_key`` is given without the ``{TYPE}_{ENGINE}_`` prefix, e.g. "INDEX_NAME".
    A ``default`` of None marks the setting as mandatory.
    """

    env_key: str
    val_type: Literal["string", "number", "bool", "list"] = "string"
    default: str | int | float | bool | list | None = None
