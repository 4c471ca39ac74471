# This module provides the backends that actually put packages into
# an environment's site-packages directory. Each backend knows how to
# detect whether it is usable on this machine and how to install a
# single package into a target directory.
from stackenvs._src.installers.installer import detect_installer
from stackenvs._src.installers.pip import PipInstaller
from stackenvs._src.installers.uv import UvInstaller

__all__ = ["detect_installer", "PipInstaller", "UvInstaller"]
