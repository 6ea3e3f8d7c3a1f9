"""Runtime settings and logging setup."""

import logging
import os
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, Field, field_validator

ENV_PREFIX = "DEPSCOPE_"

_LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


class Settings(BaseModel):
    """Tunables for a depscope run.

    ``max_levels`` is the only knob of the network builder itself; the rest
    configure the registry and vulnerability adapters.
    """

    max_levels: int = Field(default=3, ge=0)
    request_timeout: float = Field(default=10.0, gt=0)
    max_concurrency: int = Field(default=16, ge=1)
    pypi_url: str = "https://pypi.org"
    npm_url: str = "https://registry.npmjs.org"
    osv_url: str = "https://api.osv.dev"
    vulnerabilities_enabled: bool = True
    log_level: str = "WARNING"

    @field_validator("pypi_url", "npm_url", "osv_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level: {value}")
        return level

    @classmethod
    def from_env(cls, environ: Optional[dict[str, str]] = None) -> "Settings":
        """Read ``DEPSCOPE_*`` variables (e.g. ``DEPSCOPE_MAX_LEVELS``)."""
        environ = dict(os.environ if environ is None else environ)
        values: dict[str, str] = {}
        for name in cls.model_fields:
            raw = environ.get(f"{ENV_PREFIX}{name.upper()}")
            if raw is not None and raw.strip():
                values[name] = raw.strip()
        return cls.model_validate(values)


def configure_logging(
    level: Union[int, str] = "WARNING",
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """Attach one handler to the ``depscope`` logger.

    Calling it again replaces the previous handler instead of stacking them.
    """
    logger = logging.getLogger("depscope")
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()
    handler: logging.Handler
    if log_file is not None:
        handler = logging.FileHandler(log_file, encoding="utf-8")
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    logger.propagate = False
    return logger
