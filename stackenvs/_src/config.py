import os
import sys
from pathlib import Path
from typing import Mapping, Optional

import pydantic
from pydantic import BaseModel, Field

from stackenvs._src.constants import (
    DEFAULT_DEPOT,
    DEPOT_ENV_VAR,
    INSTALLER_ENV_VAR,
    PYTHON_ENV_VAR,
    SupportedInstallers,
)
from stackenvs._src.exceptions import ValidationError


class StackEnvsConfig(BaseModel):
    """Settings for the default package manager"""
    depot: Path = Field(default_factory=lambda: Path(DEFAULT_DEPOT).expanduser())
    installer: SupportedInstallers = SupportedInstallers.AUTO
    python: str = Field(default_factory=lambda: sys.executable)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "StackEnvsConfig":
        """Build the config from STACKENVS_* environment variables.

        Unset or empty variables fall back to the defaults.
        """
        if environ is None:
            environ = os.environ

        values = {}
        depot = environ.get(DEPOT_ENV_VAR)
        if depot:
            values["depot"] = Path(depot).expanduser()
        installer = environ.get(INSTALLER_ENV_VAR)
        if installer:
            values["installer"] = installer.lower()
        python = environ.get(PYTHON_ENV_VAR)
        if python:
            values["python"] = python
        try:
            return cls(**values)
        except pydantic.ValidationError as e:
            raise ValidationError(f"invalid stackenvs settings: {e}") from e
