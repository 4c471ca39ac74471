import shutil
import sys
from pathlib import Path
from typing import List, Optional

from stackenvs._src.installers.base import Installer


class UvInstaller(Installer):
    name = "uv"

    @classmethod
    def detect(cls, python: Optional[str] = None):
        """Return a UvInstaller if a uv binary is on PATH, else None."""
        uv = shutil.which("uv")
        if uv is not None:
            return cls(uv, python)
        return None

    def __init__(self, uv: str = "uv", python: Optional[str] = None):
        self.uv = uv
        self.python = python or sys.executable

    def command(self, package: str, target: Path) -> List[str]:
        return [
            self.uv, "pip", "install",
            "--python", self.python,
            "--target", str(target),
            package,
        ]
