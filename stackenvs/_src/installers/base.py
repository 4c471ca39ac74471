import logging
import subprocess
from pathlib import Path
from typing import List

from stackenvs._src.exceptions import ExternalToolError

logger = logging.getLogger(__name__)


class Installer:
    """Installs packages into a target directory by running an external tool."""
    name = "installer"

    def command(self, package: str, target: Path) -> List[str]:
        raise NotImplementedError

    def install(self, package: str, target: str | Path) -> None:
        """Install `package` into `target`.

        Raises
        ------
        ExternalToolError
            If the tool cannot be run or exits with a non-zero status.
        """
        target = Path(target)
        command = self.command(package, target)
        logger.debug(f"Running {self.name}: {' '.join(command)}")
        try:
            subprocess.run(
                command,
                cwd=target.parent,
                check=True,
                capture_output=True,
                text=True,
            )
        except subprocess.CalledProcessError as e:
            raise ExternalToolError(
                f"Failed to install {package} with {self.name}!",
                command=command,
                cwd=target.parent,
                stderr=e.stderr,
            ) from e
        except OSError as e:
            raise ExternalToolError(
                f"Could not run {self.name} to install {package}!",
                command=command,
                cwd=target.parent,
                stderr=str(e),
            ) from e
