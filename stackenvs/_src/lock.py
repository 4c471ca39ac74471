import hashlib
import logging
import platform
from importlib import metadata
from pathlib import Path
from typing import Optional

import yaml

from stackenvs._src.constants import LOCK_FILE, SITE_PACKAGES_DIR
from stackenvs._src.models.environment import EnvironmentLock, LockMetadata, LockedPackage
from stackenvs._src.names import canonicalize

logger = logging.getLogger(__name__)


def installed_version(site_packages: str | Path, package: str) -> Optional[str]:
    """Return the version of `package` installed under `site_packages`, if any"""
    wanted = canonicalize(package)
    for dist in metadata.distributions(path=[str(site_packages)]):
        name = dist.metadata.get("Name")
        if name is not None and canonicalize(name) == wanted:
            return dist.version
    return None


def lock_environment(env_dir: str | Path) -> EnvironmentLock:
    """Record every distribution installed in an environment.

    The lock is written next to the manifest and returned.
    """
    env_dir = Path(env_dir)
    site_packages = env_dir / SITE_PACKAGES_DIR

    packages = {}
    if site_packages.is_dir():
        for dist in metadata.distributions(path=[str(site_packages)]):
            name = dist.metadata.get("Name")
            if name is None:
                logger.warning(f"Skipping distribution without a name in {site_packages}")
                continue
            packages[canonicalize(name)] = LockedPackage(name=name, version=dist.version)

    locked_packages = [packages[key] for key in sorted(packages)]
    digest = hashlib.sha256(str([str(pkg) for pkg in locked_packages]).encode("utf-8"))
    env_lock = EnvironmentLock(
        metadata=LockMetadata(
            python=platform.python_version(),
            build_hash=digest.hexdigest(),
        ),
        packages=locked_packages,
    )

    with open(env_dir / LOCK_FILE, "w") as file:
        yaml.safe_dump(env_lock.model_dump(), file, sort_keys=False)
    return env_lock


def read_lock(env_dir: str | Path) -> EnvironmentLock:
    with open(Path(env_dir) / LOCK_FILE, "r") as file:
        return EnvironmentLock.model_validate(yaml.safe_load(file))
