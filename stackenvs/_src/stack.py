import logging
import re
import shutil
from pathlib import Path
from typing import Dict, Iterable, List, MutableSequence, Optional, Tuple

from stackenvs._src.exceptions import EnvironmentExistsError, NotFoundError
from stackenvs._src.load_path import get_stack, push_env, remove_entry
from stackenvs._src.models.stackenv import StackEnv
from stackenvs._src.names import sigiled_if, to_bare
from stackenvs._src.package_manager import PackageManager, get_package_manager

logger = logging.getLogger(__name__)


# Functions taking `env_or_name` accept a StackEnv, whose own `shared` flag
# wins, or a plain name, which is looked up according to `shared`.
def _name_and_shared(env_or_name, shared: bool) -> Tuple[str, bool]:
    if isinstance(env_or_name, StackEnv):
        return env_or_name.name, env_or_name.shared
    return to_bare(str(env_or_name)), shared


def _as_env(env_or_name, packages, shared, pkg) -> StackEnv:
    if isinstance(env_or_name, StackEnv):
        return env_or_name
    return StackEnv.make(env_or_name, packages, shared=shared, pkg=pkg)


def env_exists(env_or_name, shared: bool = True, pkg: Optional[PackageManager] = None) -> bool:
    """Return True if the environment exists on disk.

    For shared environments this means a directory of that name in the
    depot's environments root, interpreter-version environments excluded.
    """
    name, shared = _name_and_shared(env_or_name, shared)
    pkg = pkg or get_package_manager()
    return pkg.env_exists(name, shared)


def in_stack(env_or_name, shared: bool = True, stack: Optional[MutableSequence[str]] = None) -> bool:
    """Return True if the environment's stack entry is in the stack."""
    name, shared = _name_and_shared(env_or_name, shared)
    return sigiled_if(name, shared) in get_stack(stack)


def dir_path(env_or_name, shared: bool = True, pkg: Optional[PackageManager] = None) -> Path:
    name, shared = _name_and_shared(env_or_name, shared)
    pkg = pkg or get_package_manager()
    return pkg.env_dir(name, shared)


def activate_env(env_or_name, shared: bool = True, pkg: Optional[PackageManager] = None) -> Path:
    """Activate the environment.

    This is only needed to work on the environment itself, it does not have
    to be active for its packages to be usable from the stack.
    """
    name, shared = _name_and_shared(env_or_name, shared)
    pkg = pkg or get_package_manager()
    return pkg.activate(name, shared)


def read_env(env_or_name, shared: bool = True, pkg: Optional[PackageManager] = None) -> Dict[str, str]:
    """Return the `deps` of the environment's manifest, package name to version."""
    pkg = pkg or get_package_manager()
    return pkg.read_manifest(dir_path(env_or_name, shared, pkg))


def _add_packages(env: StackEnv, packages: Iterable[str], pkg: PackageManager) -> None:
    # additions are not rolled back, a failure leaves earlier packages in place
    with pkg.activated(env.name, env.shared):
        pkg.init_env()
        for package in packages:
            pkg.add(package)


def update_env(
    env_or_name,
    packages: Optional[Iterable] = None,
    *,
    shared: bool = True,
    pkg: Optional[PackageManager] = None,
) -> StackEnv:
    """Add every package of the environment, creating it if needed.

    Packages already in the environment are added again, which lets the
    installer upgrade them. Nothing is ever removed.
    """
    pkg = pkg or get_package_manager()
    env = _as_env(env_or_name, packages, shared, pkg)
    _add_packages(env, env.packages, pkg)
    logger.info(f"Updated environment {env.entry} with {len(env.packages)} packages")
    return env


def create_env(
    env_or_name,
    packages: Optional[Iterable] = None,
    *,
    shared: bool = True,
    pkg: Optional[PackageManager] = None,
) -> StackEnv:
    """Create the environment with its packages.

    Raises
    ------
    EnvironmentExistsError
        If the environment already exists
    """
    pkg = pkg or get_package_manager()
    env = _as_env(env_or_name, packages, shared, pkg)
    if env_exists(env, pkg=pkg):
        raise EnvironmentExistsError(f"environment {env.entry} already exists")
    return update_env(env, pkg=pkg)


def add_missing(env: StackEnv, pkg: Optional[PackageManager] = None) -> List[str]:
    """Add the packages of `env` that are not yet in its manifest.

    Returns the packages that were added. Does nothing if the environment
    does not exist.
    """
    pkg = pkg or get_package_manager()
    if not env_exists(env, pkg=pkg):
        return []
    existing = read_env(env, pkg=pkg)
    missing = [package for package in env.packages if package not in existing]
    if missing:
        _add_packages(env, missing, pkg)
        logger.info(f"Added missing packages {missing} to {env.entry}")
    return missing


def ensure_in_stack(
    env_or_name,
    packages: Optional[Iterable] = None,
    *,
    shared: bool = True,
    stack: Optional[MutableSequence[str]] = None,
    pkg: Optional[PackageManager] = None,
) -> StackEnv:
    """Make sure the environment exists, has its packages and is in the stack.

    If the environment does not exist it is created with all of
    `env.packages`. Otherwise the packages missing from its manifest are
    added. Finally the environment is pushed onto the stack unless already
    there. Safe to call repeatedly.

    Removing packages, and pinning or checking versions, is not supported.

    Returns the StackEnv as given. Its packages are not merged with the
    ones found on disk.

    Examples
    --------
    >>> env = ensure_in_stack("my_extra_env", ["ipython", "rich"])
    """
    pkg = pkg or get_package_manager()
    env = _as_env(env_or_name, packages, shared, pkg)
    if not env_exists(env, pkg=pkg):
        _add_packages(env, env.packages, pkg)
        logger.info(f"Created environment {env.entry}")
    else:
        add_missing(env, pkg=pkg)
    push_env(env.entry, stack)
    return env


def remove_from_stack(
    env_or_name,
    shared: bool = True,
    stack: Optional[MutableSequence[str]] = None,
) -> int:
    """Remove the environment wherever it occurs in the stack.

    The environment itself is left on disk. Returns the number of entries
    removed, 0 if it was not in the stack.
    """
    name, shared = _name_and_shared(env_or_name, shared)
    return remove_entry(sigiled_if(name, shared), stack)


def list_envs(
    filter: Optional[str | re.Pattern] = None,
    include_defaults: bool = False,
    pkg: Optional[PackageManager] = None,
) -> List[str]:
    """Return the names of the shared environments, in sorted order.

    These need not be in the stack. `filter` is a substring or a compiled
    regex the names must contain. Interpreter-version environments such as
    "v3.12" are left out unless `include_defaults`.
    """
    pkg = pkg or get_package_manager()
    names = pkg.shared_env_names(include_defaults=include_defaults)
    if filter is None:
        return names
    if isinstance(filter, re.Pattern):
        return [name for name in names if filter.search(name)]
    return [name for name in names if filter in name]


def remove_env_dir(env_or_name, shared: bool = True, pkg: Optional[PackageManager] = None) -> Path:
    """Delete the environment's directory. The stack is not touched.

    Raises
    ------
    NotFoundError
        If the directory does not exist
    """
    path = dir_path(env_or_name, shared, pkg)
    if not path.is_dir():
        raise NotFoundError(f"environment {path} does not exist")
    shutil.rmtree(path)
    logger.info(f"Deleted environment {path}")
    return path
