"""The environment stack.

`LOAD_PATH` is the process-wide, ordered list of environments whose
packages should be importable. Entries starting with "@" name shared
environments in the depot, "@" on its own means the active environment,
and anything else is a path to an environment directory.

Nothing here is synchronized. Every function takes an optional `stack`
to operate on instead of `LOAD_PATH`, which is what the tests use.
"""
import importlib
import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator, List, MutableSequence, Optional

from stackenvs._src.constants import ACTIVE_ENV_ENTRY, DEFAULT_LOAD_PATH, SIGIL, SITE_PACKAGES_DIR
from stackenvs._src.package_manager import PackageManager, get_package_manager

logger = logging.getLogger(__name__)


LOAD_PATH: List[str] = list(DEFAULT_LOAD_PATH)


def get_stack(stack: Optional[MutableSequence[str]]) -> MutableSequence[str]:
    return LOAD_PATH if stack is None else stack


def push_env(entry: str, stack: Optional[MutableSequence[str]] = None) -> bool:
    """Append `entry` to the stack and return True.
    If `entry` is already in the stack, do nothing and return False.
    """
    stack = get_stack(stack)
    if entry in stack:
        return False
    stack.append(entry)
    logger.info(f"Pushed {entry} onto the environment stack")
    return True


def remove_entry(entry: str, stack: Optional[MutableSequence[str]] = None) -> int:
    """Remove every occurrence of `entry` from the stack.

    Returns the number of entries removed, which is 0 if `entry` was absent.
    """
    stack = get_stack(stack)
    indices = [i for i, e in enumerate(stack) if e == entry]
    for i in reversed(indices):
        del stack[i]
    if indices:
        logger.info(f"Removed {entry} from the environment stack")
    return len(indices)


def envs(all: bool = False, stack: Optional[MutableSequence[str]] = None) -> List[str]:
    """Return the entries in the stack, leaving out the default ones unless `all`."""
    stack = get_stack(stack)
    if all:
        return list(stack)
    return [entry for entry in stack if entry not in DEFAULT_LOAD_PATH]


def reset_stack(stack: Optional[MutableSequence[str]] = None) -> MutableSequence[str]:
    """Reset the stack to its default entries, in place."""
    stack = get_stack(stack)
    stack[:] = DEFAULT_LOAD_PATH
    return stack


def resolve_stack(
    stack: Optional[MutableSequence[str]] = None,
    pkg: Optional[PackageManager] = None,
) -> List[Path]:
    """Map the stack to the site-packages directories it refers to.

    Entries whose directories do not exist are skipped, as is "@" when no
    environment is active. Each directory appears once, at its first position.
    """
    stack = get_stack(stack)
    pkg = pkg or get_package_manager()

    resolved = []
    for entry in stack:
        if entry == ACTIVE_ENV_ENTRY:
            env_dir = pkg.current_active_context()
            if env_dir is None:
                continue
        elif entry.startswith(SIGIL):
            env_dir = pkg.env_dir(entry, shared=True)
        else:
            env_dir = pkg.env_dir(entry, shared=False)

        site_packages = env_dir / SITE_PACKAGES_DIR
        if site_packages.is_dir() and site_packages not in resolved:
            resolved.append(site_packages)
    return resolved


@contextmanager
def extended_sys_path(paths: Iterable[str | Path]) -> Iterator[List[str]]:
    """Append `paths` to `sys.path` for the duration of a `with` block.

    Only the paths that were not already present are added, and only those
    are removed again on exit.
    """
    added = []
    for path in paths:
        path = str(path)
        if path not in sys.path:
            sys.path.append(path)
            added.append(path)
    try:
        yield added
    finally:
        for path in added:
            if path in sys.path:
                sys.path.remove(path)


def import_from(
    env,
    module: str,
    stack: Optional[MutableSequence[str]] = None,
    pkg: Optional[PackageManager] = None,
):
    """Import `module` with `env` temporarily on the stack.

    `env` is a StackEnv or a stack entry such as "@tools". If `env` was not
    already in the stack it is removed again afterwards. The imported module
    stays in `sys.modules` and is returned.
    """
    stack = get_stack(stack)
    entry = getattr(env, "entry", env)
    pushed = push_env(entry, stack)
    try:
        with extended_sys_path(resolve_stack(stack, pkg)):
            importlib.invalidate_caches()
            return importlib.import_module(module)
    finally:
        if pushed:
            remove_entry(entry, stack)
