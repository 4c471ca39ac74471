import importlib.util
import sys
from pathlib import Path
from typing import List, Optional

from stackenvs._src.installers.base import Installer


class PipInstaller(Installer):
    name = "pip"

    @classmethod
    def detect(cls, python: Optional[str] = None):
        """Return a PipInstaller if pip is importable, else None.

        Only the running interpreter can be checked cheaply, so a custom
        `python` is trusted to have pip.
        """
        if python is not None and python != sys.executable:
            return cls(python)
        if importlib.util.find_spec("pip") is not None:
            return cls(python)
        return None

    def __init__(self, python: Optional[str] = None):
        self.python = python or sys.executable

    def command(self, package: str, target: Path) -> List[str]:
        return [
            self.python, "-m", "pip", "install",
            "--disable-pip-version-check",
            "--no-input",
            "--target", str(target),
            package,
        ]
