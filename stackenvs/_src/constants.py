import re
import sys
from enum import Enum


SIGIL = "@"

DEFAULT_DEPOT = "~/.stackenvs"
ENVIRONMENTS_DIR = "environments"

MANIFEST_FILE = "environment.yaml"
LOCK_FILE = "environment.lock.yaml"
SITE_PACKAGES_DIR = "site-packages"

# environments named after an interpreter version, eg. "v3.12", are
# created by the runtime itself and are never managed here
DEFAULT_ENV_PATTERN = re.compile(r"^v\d+\.")

ACTIVE_ENV_ENTRY = SIGIL
VERSION_ENV_ENTRY = f"{SIGIL}v{sys.version_info.major}.{sys.version_info.minor}"
DEFAULT_LOAD_PATH = (ACTIVE_ENV_ENTRY, VERSION_ENV_ENTRY)

DEPOT_ENV_VAR = "STACKENVS_DEPOT"
INSTALLER_ENV_VAR = "STACKENVS_INSTALLER"
PYTHON_ENV_VAR = "STACKENVS_PYTHON"


class SupportedInstallers(str, Enum):
    AUTO = "auto"
    PIP = "pip"
    UV = "uv"
