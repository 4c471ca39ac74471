# NOTE:
# There is a case for making installers pluggable via entry points.
# Two backends cover what we need, so they are simply tried in order.

from typing import Optional

from stackenvs._src.constants import SupportedInstallers
from stackenvs._src.exceptions import ExternalToolError
from stackenvs._src.installers.base import Installer
from stackenvs._src.installers.pip import PipInstaller
from stackenvs._src.installers.uv import UvInstaller


def detect_installer(
    preferred: SupportedInstallers | str = SupportedInstallers.AUTO,
    python: Optional[str] = None,
) -> Installer:
    """Pick the installer backend to use.

    Parameters
    ----------
    preferred: SupportedInstallers | str
        "pip" or "uv" to require that backend, "auto" to prefer uv and
        fall back to pip
    python: str, optional
        Interpreter the packages are installed for

    Raises
    ------
    ExternalToolError
        If the requested backend (or, for "auto", any backend) is unavailable.
    """
    preferred = SupportedInstallers(preferred)
    if preferred is SupportedInstallers.PIP:
        impls = [PipInstaller]
    elif preferred is SupportedInstallers.UV:
        impls = [UvInstaller]
    else:
        impls = [UvInstaller, PipInstaller]

    for impl in impls:
        installer = impl.detect(python)
        if installer is not None:
            return installer

    raise ExternalToolError(f"no usable installer found (requested: {preferred.value})")
