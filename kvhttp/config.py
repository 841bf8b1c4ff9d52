"""
Client configuration.

The client itself only takes a base URL. Reading defaults from the
process environment happens here, once, when the caller asks for it.
"""

from __future__ import annotations

import logging
import os
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import InvalidArgument
from .transport import DEFAULT_TIMEOUT

# Environment variable -> config field
ENV_VARS = {
    "REPLIT_DB_URL": "base_url",
    "KVHTTP_TIMEOUT": "timeout",
    "KVHTTP_LOG_LEVEL": "log_level",
}


class ClientConfig(BaseModel):
    """
    Settings for building a ``Client``.

    ``base_url`` may embed an access token; treat it as a secret.
    """

    model_config = ConfigDict(frozen=True)

    base_url: Optional[str] = None
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    log_level: str = "WARNING"

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        **overrides,
    ) -> "ClientConfig":
        """
        Build a config from environment variables.

        Explicit keyword overrides win over the environment.

        Raises:
            InvalidArgument: If a value does not validate.
        """
        env = os.environ if environ is None else environ
        values = {field: env[var] for var, field in ENV_VARS.items() if var in env}
        values.update(overrides)
        try:
            return cls(**values)
        except ValidationError as e:
            raise InvalidArgument(f"Invalid client configuration: {e}") from e

    def apply_logging(self) -> None:
        """Set the ``kvhttp`` logger level from ``log_level``.

        Does nothing unless ``log_level`` was given explicitly (directly
        or through ``KVHTTP_LOG_LEVEL``), so the application keeps
        control of the level otherwise.
        """
        if "log_level" not in self.model_fields_set:
            return
        level = getattr(logging, self.log_level.upper(), None)
        if not isinstance(level, int):
            raise InvalidArgument(f"Unknown log level: {self.log_level!r}")
        logging.getLogger("kvhttp").setLevel(level)
