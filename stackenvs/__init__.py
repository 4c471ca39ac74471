"""
stackenvs - extra environments on the environment stack

Keep packages you always want at hand (debuggers, profilers, notebook
tooling) out of your project's dependencies. Put them in a separate
environment and push it onto the environment stack, so they are importable
whatever environment is active.

Usage:
    from stackenvs import StackEnv, ensure_in_stack, import_from

    env = StackEnv.make("tools", ["ipython", "rich"], shared=True)
    ensure_in_stack(env)      # creates ~/.stackenvs/environments/tools
    rich = import_from(env, "rich")
"""

__version__ = "0.1.0"

from stackenvs._src.config import StackEnvsConfig
from stackenvs._src.exceptions import (
    EnvironmentExistsError,
    ExternalToolError,
    NotFoundError,
    StackEnvError,
    ValidationError,
)
from stackenvs._src.load_path import (
    LOAD_PATH,
    envs,
    extended_sys_path,
    import_from,
    push_env,
    reset_stack,
    resolve_stack,
)
from stackenvs._src.lock import lock_environment, read_lock
from stackenvs._src.manifest import parse_manifest
from stackenvs._src.models.stackenv import StackEnv
from stackenvs._src.names import sigiled_if, to_bare, to_sigiled
from stackenvs._src.package_manager import (
    PackageManager,
    get_package_manager,
    reset_package_manager,
)
from stackenvs._src.stack import (
    activate_env,
    add_missing,
    create_env,
    dir_path,
    ensure_in_stack,
    env_exists,
    in_stack,
    list_envs,
    read_env,
    remove_env_dir,
    remove_from_stack,
    update_env,
)

__all__ = [
    # Descriptor
    "StackEnv",
    # Environment operations
    "ensure_in_stack",
    "env_exists",
    "in_stack",
    "dir_path",
    "create_env",
    "update_env",
    "add_missing",
    "activate_env",
    "read_env",
    "list_envs",
    "remove_from_stack",
    "remove_env_dir",
    # Stack
    "LOAD_PATH",
    "push_env",
    "envs",
    "reset_stack",
    "resolve_stack",
    "extended_sys_path",
    "import_from",
    # Names
    "to_sigiled",
    "to_bare",
    "sigiled_if",
    # Package manager
    "PackageManager",
    "get_package_manager",
    "reset_package_manager",
    "StackEnvsConfig",
    "parse_manifest",
    "lock_environment",
    "read_lock",
    # Errors
    "StackEnvError",
    "ValidationError",
    "NotFoundError",
    "EnvironmentExistsError",
    "ExternalToolError",
]
