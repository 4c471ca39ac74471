from pathlib import Path

import pydantic
import yaml

from stackenvs._src.constants import MANIFEST_FILE
from stackenvs._src.exceptions import ExternalToolError
from stackenvs._src.models.environment import EnvironmentManifest


def manifest_path(env_dir: str | Path) -> Path:
    return Path(env_dir) / MANIFEST_FILE


def parse_manifest(path: str | Path) -> EnvironmentManifest:
    """Read and validate an environment.yaml

    Parameters
    ----------
    path: str | Path
        Path to the manifest file itself, not the environment directory

    Returns
    -------
    manifest: EnvironmentManifest

    Raises
    ------
    ExternalToolError
        If the file is missing, is not valid yaml or does not match the
        manifest schema.
    """
    try:
        with open(path, "r") as file:
            raw_manifest = yaml.safe_load(file)
    except OSError as e:
        raise ExternalToolError(f"could not read manifest {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ExternalToolError(f"malformed manifest {path}: {e}") from e

    if raw_manifest is None:
        raw_manifest = {}
    if isinstance(raw_manifest, dict):
        raw_manifest.setdefault("name", Path(path).parent.name)
        # an empty `deps:` section loads as None
        if raw_manifest.get("deps") is None:
            raw_manifest["deps"] = {}

    try:
        return EnvironmentManifest.model_validate(raw_manifest)
    except pydantic.ValidationError as e:
        raise ExternalToolError(f"malformed manifest {path}: {e}") from e


def write_manifest(path: str | Path, manifest: EnvironmentManifest) -> None:
    with open(path, "w") as file:
        yaml.safe_dump(manifest.model_dump(), file, sort_keys=False)
