from typing import Iterable, Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from stackenvs._src.exceptions import NotFoundError
from stackenvs._src.names import package_name, sigiled_if, to_bare, validate_shared_name
from stackenvs._src.package_manager import get_package_manager


class StackEnv(BaseModel):
    """An environment meant to be used in the environment stack rather than
    as the active environment.

    When working on a particular project you often want other packages at
    hand, eg. a debugger or plotting tools, that are not dependencies of the
    project. A StackEnv names an environment holding such packages so it can
    be created on demand and pushed onto the stack, making its packages
    importable whatever environment is active.

    `name` is always stored without the leading "@". Shared environments
    live in the depot and must be named by a single path segment. Anything
    else is a path, relative to the working directory or starting with "~".

    Constructing a StackEnv never touches disk, see `StackEnv.make` to infer
    the packages of an existing environment.

    Examples
    --------
    >>> StackEnv(name="@an_extra_env", packages=["Example"], shared=True)
    StackEnv(name='an_extra_env', packages=('Example',), shared=True)
    """
    model_config = ConfigDict(frozen=True)

    name: str
    packages: Tuple[str, ...] = ()
    shared: bool = False

    @field_validator("name", mode="before")
    @classmethod
    def bare_name(cls, value):
        return to_bare(value)

    @field_validator("packages", mode="before")
    @classmethod
    def package_names(cls, value):
        if value is None:
            return ()
        if isinstance(value, (str, bytes)):
            value = [value]
        return tuple(package_name(p) for p in value)

    @model_validator(mode="after")
    def check_shared_name(self):
        if self.shared:
            validate_shared_name(self.name)
        return self

    @classmethod
    def make(
        cls,
        name: str,
        packages: Optional[Iterable] = None,
        shared: bool = False,
        pkg=None,
    ) -> "StackEnv":
        """Create a StackEnv, reading its packages from disk if none are given.

        Parameters
        ----------
        name: str
            Environment name, with or without a leading "@"
        packages: Iterable, optional
            Package names. If None, the packages are the sorted `deps` of
            the existing environment's manifest.
        shared: bool
            Whether the environment lives in the depot
        pkg: PackageManager, optional
            Only used when inferring packages. Defaults to the process-wide one.

        Raises
        ------
        ValidationError
            If `shared` and `name` is not a single path segment
        NotFoundError
            If packages must be inferred and the environment does not exist
        """
        if packages is not None:
            return cls(name=name, packages=packages, shared=shared)

        # validate the name before looking anything up on disk
        env = cls(name=name, shared=shared)
        if pkg is None:
            pkg = get_package_manager()
        if not pkg.env_exists(env.name, shared):
            raise NotFoundError(f"environment {env.entry} does not exist")
        deps = pkg.read_manifest(pkg.env_dir(env.name, shared))
        return env.model_copy(update={"packages": tuple(sorted(deps))})

    @property
    def entry(self) -> str:
        """The form of the name that goes in the environment stack"""
        return sigiled_if(self.name, self.shared)

    def with_packages(self, *packages) -> "StackEnv":
        """Return a copy with `packages` appended, skipping ones already present."""
        merged = list(self.packages)
        for p in packages:
            p = package_name(p)
            if p not in merged:
                merged.append(p)
        return self.model_copy(update={"packages": tuple(merged)})

    def __str__(self):
        return self.entry
