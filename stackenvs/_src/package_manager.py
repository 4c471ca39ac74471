import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from stackenvs._src.config import StackEnvsConfig
from stackenvs._src.constants import (
    DEFAULT_ENV_PATTERN,
    ENVIRONMENTS_DIR,
    SITE_PACKAGES_DIR,
    SupportedInstallers,
)
from stackenvs._src.exceptions import ExternalToolError
from stackenvs._src.installers import detect_installer
from stackenvs._src.installers.base import Installer
from stackenvs._src.lock import installed_version, lock_environment
from stackenvs._src.manifest import manifest_path, parse_manifest, write_manifest
from stackenvs._src.models.environment import EnvironmentManifest
from stackenvs._src.names import to_bare

logger = logging.getLogger(__name__)


class PackageManager():
    def __init__(
        self,
        depot: str | Path,
        installer: Optional[Installer] = None,
        preferred_installer: SupportedInstallers | str = SupportedInstallers.AUTO,
        python: Optional[str] = None,
    ):
        """PackageManager owns the depot of shared environments and the
        currently active environment, and adds packages to the active one.

        Parameters
        ----------
        depot: str | Path
            Root directory holding the `environments` directory
        installer: Installer, optional
            Backend used to install packages. If not given, one is detected
            according to `preferred_installer` the first time a package is
            added.
        preferred_installer: SupportedInstallers | str
            "pip", "uv" or "auto"
        python: str, optional
            Interpreter packages are installed for
        """
        self.depot = Path(depot).expanduser()
        self.preferred_installer = SupportedInstallers(preferred_installer)
        self.python = python
        self._installer = installer
        self._active: Optional[Path] = None

    @classmethod
    def from_config(cls, config: StackEnvsConfig):
        return cls(
            depot=config.depot,
            preferred_installer=config.installer,
            python=config.python,
        )

    @property
    def installer(self) -> Installer:
        if self._installer is None:
            self._installer = detect_installer(self.preferred_installer, python=self.python)
        return self._installer

    def environments_root(self) -> Path:
        return self.depot / ENVIRONMENTS_DIR

    def env_dir(self, name: str, shared: bool) -> Path:
        """Resolve an environment name to its directory.

        Shared environments live in the depot. Anything else is a path,
        with a leading `~` expanded and relative paths taken from the
        current working directory.
        """
        name = to_bare(name)
        if shared:
            return self.environments_root() / name
        return Path(os.path.abspath(os.path.expanduser(name)))

    def shared_env_names(self, include_defaults: bool = False) -> List[str]:
        """Sorted names of the directories in the shared environments root.

        Interpreter-version environments such as "v3.12" are left out
        unless `include_defaults` is set.
        """
        root = self.environments_root()
        if not root.is_dir():
            return []
        names = [entry.name for entry in root.iterdir() if entry.is_dir()]
        if not include_defaults:
            names = [name for name in names if not DEFAULT_ENV_PATTERN.match(name)]
        return sorted(names)

    def env_exists(self, name: str, shared: bool) -> bool:
        name = to_bare(name)
        if shared:
            return name in self.shared_env_names()
        return self.env_dir(name, shared=False).is_dir()

    def current_active_context(self) -> Optional[Path]:
        return self._active

    def activate(self, path_or_name: Optional[str | Path], shared: bool = False) -> Optional[Path]:
        """Make an environment the active one. Nothing is written to disk.

        Passing None deactivates.
        """
        if path_or_name is None:
            self._active = None
        elif isinstance(path_or_name, Path):
            self._active = path_or_name
        else:
            self._active = self.env_dir(path_or_name, shared)
        logger.debug(f"Activated environment {self._active}")
        return self._active

    @contextmanager
    def activated(self, path_or_name: str | Path, shared: bool = False) -> Iterator[Path]:
        """Activate an environment for the duration of a `with` block.

        The previously active environment is restored on exit, whether or
        not the block raised.
        """
        previous = self.current_active_context()
        try:
            yield self.activate(path_or_name, shared)
        finally:
            self.activate(previous)

    def _require_active(self, action: str) -> Path:
        env_dir = self.current_active_context()
        if env_dir is None:
            raise ExternalToolError(f"cannot {action}: no environment is active")
        return env_dir

    def init_env(self) -> Path:
        """Create the active environment on disk with an empty manifest.

        An environment that already has a manifest is left untouched.
        """
        env_dir = self._require_active("initialize environment")
        (env_dir / SITE_PACKAGES_DIR).mkdir(parents=True, exist_ok=True)
        path = manifest_path(env_dir)
        if not path.exists():
            write_manifest(path, EnvironmentManifest(name=env_dir.name))
            lock_environment(env_dir)
            logger.info(f"Created environment {env_dir}")
        return env_dir

    def add(self, package: str) -> str:
        """Install `package` into the active environment and record it in the
        manifest. Returns the installed version, or "" if unknown.
        """
        env_dir = self._require_active(f"add {package}")
        self.init_env()

        site_packages = env_dir / SITE_PACKAGES_DIR
        self.installer.install(package, site_packages)
        version = installed_version(site_packages, package) or ""

        path = manifest_path(env_dir)
        manifest = parse_manifest(path)
        manifest.deps[package] = version
        write_manifest(path, manifest)
        lock_environment(env_dir)

        logger.info(f"Added {package} {version} to {env_dir}")
        return version

    def read_manifest(self, env_dir: str | Path) -> Dict[str, str]:
        """Return the `deps` section of the manifest in `env_dir`."""
        return parse_manifest(manifest_path(env_dir)).deps


_package_manager: Optional[PackageManager] = None


def get_package_manager() -> PackageManager:
    """Return the process-wide default PackageManager, built from the environment."""
    global _package_manager
    if _package_manager is None:
        _package_manager = PackageManager.from_config(StackEnvsConfig.from_env())
    return _package_manager


def reset_package_manager() -> None:
    """Forget the default PackageManager so the next call rebuilds it."""
    global _package_manager
    _package_manager = None
