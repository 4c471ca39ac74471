"""Shared fixtures: a depot in a temp dir and an installer that needs no network."""

from pathlib import Path

import pytest

from stackenvs import PackageManager, reset_package_manager
from stackenvs._src.constants import DEFAULT_LOAD_PATH
from stackenvs._src.exceptions import ExternalToolError
from stackenvs._src.installers.base import Installer


class FakeInstaller(Installer):
    """Writes a minimal dist-info and a module for each package it installs."""
    name = "fake"

    def __init__(self, versions=None, fail_on=()):
        self.versions = versions or {}
        self.fail_on = set(fail_on)
        self.installed = []

    def install(self, package, target):
        if package in self.fail_on:
            raise ExternalToolError(f"Failed to install {package} with fake!")
        target = Path(target)
        version = self.versions.get(package, "1.0")
        dist_info = target / f"{package}-{version}.dist-info"
        dist_info.mkdir(parents=True, exist_ok=True)
        (dist_info / "METADATA").write_text(
            f"Metadata-Version: 2.1\nName: {package}\nVersion: {version}\n"
        )
        module = package.lower().replace("-", "_")
        (target / f"{module}.py").write_text(f"NAME = {package!r}\n")
        self.installed.append(package)


@pytest.fixture
def installer():
    return FakeInstaller()


@pytest.fixture
def depot(tmp_path):
    return tmp_path / "depot"


@pytest.fixture
def pkg(depot, installer):
    """A PackageManager on a temporary depot."""
    return PackageManager(depot=depot, installer=installer)


@pytest.fixture
def stack():
    """A private environment stack, so tests never touch LOAD_PATH."""
    return list(DEFAULT_LOAD_PATH)


@pytest.fixture(autouse=True)
def _fresh_package_manager():
    reset_package_manager()
    yield
    reset_package_manager()
