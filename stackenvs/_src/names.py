import os
import re

from stackenvs._src.constants import DEFAULT_ENV_PATTERN, SIGIL
from stackenvs._src.exceptions import ValidationError


def to_sigiled(name: str) -> str:
    """Make sure `name` starts with the sigil, prepending it only if missing."""
    name = str(name)
    if name.startswith(SIGIL):
        return name
    return SIGIL + name


def to_bare(name: str) -> str:
    """Make sure `name` does not start with the sigil, stripping one if present."""
    name = str(name)
    if not name:
        return ""
    if name.startswith(SIGIL):
        return name[len(SIGIL):]
    return name


def sigiled_if(name: str, shared: bool) -> str:
    """The form of `name` used as a stack entry.

    Shared environments are referenced by their sigiled name, everything
    else by its bare path.
    """
    if shared:
        return to_sigiled(name)
    return to_bare(name)


def package_name(value) -> str:
    """Return the canonical package-name token for `value`.

    Accepts strings, bytes or anything with a sensible `str()`, eg. an enum
    member. Surrounding whitespace is dropped.
    """
    if isinstance(value, bytes):
        value = value.decode("utf-8")
    token = str(value).strip()
    if not token:
        raise ValidationError(f"invalid package name {value!r}")
    return token


def canonicalize(name: str) -> str:
    """PEP 503 normalized form of a distribution name"""
    return re.sub(r"[-_.]+", "-", name).lower()


def validate_shared_name(name: str) -> str:
    """Shared environments must be named by a single bare path segment.

    Interpreter-version names such as "v3.12" are reserved for the default
    stack entries and are rejected too.
    """
    separators = [sep for sep in (os.sep, os.altsep) if sep]
    if (
        name in ("", ".", "..")
        or os.path.isabs(name)
        or any(sep in name for sep in separators)
    ):
        raise ValidationError(
            f"shared environment name {name!r} must be a single path segment"
        )
    if DEFAULT_ENV_PATTERN.match(name):
        raise ValidationError(
            f"shared environment name {name!r} is reserved for interpreter versions"
        )
    return name
