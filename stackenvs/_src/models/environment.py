from typing import Dict, List

from pydantic import BaseModel, Field, field_validator


class EnvironmentManifest(BaseModel):
    """The environment.yaml of a stacked environment

    `deps` maps each directly requested package to the version that was
    installed for it. An empty string means the version could not be read
    back from the installed metadata.
    """
    name: str
    deps: Dict[str, str] = Field(default_factory=dict)

    @field_validator("deps", mode="before")
    @classmethod
    def versions_as_strings(cls, value):
        # hand written manifests may leave versions unquoted, eg. `numpy: 2.0`
        if isinstance(value, dict):
            return {
                str(name): "" if version is None else str(version)
                for name, version in value.items()
            }
        return value


class LockMetadata(BaseModel):
    """Metadata for a locked environment"""
    spec_version: str = "0.0.1"
    python: str
    build_hash: str


class LockedPackage(BaseModel):
    name: str
    version: str

    def __str__(self):
        return f"{self.name} - {self.version}"


class EnvironmentLock(BaseModel):
    """Every distribution installed in an environment, direct or not"""
    metadata: LockMetadata
    packages: List[LockedPackage] = Field(default_factory=list)
