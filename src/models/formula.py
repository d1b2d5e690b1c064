"""Formula record models.

A FormulaRecord is the machine-readable form of one recipe file: its
declarative metadata plus the translated install procedure. Records are
frozen; the loader builds each one in a single pass.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from src.translator.ir import Instruction


class DependencyType(str, Enum):
    """Role a dependency plays for the formula."""

    RUNTIME = "runtime"
    BUILD = "build"
    TEST = "test"
    RECOMMENDED = "recommended"
    OPTIONAL = "optional"


Dependencies = dict[DependencyType, list[str]]


class BottleInfo(BaseModel):
    """Prebuilt binary bundle descriptor."""

    model_config = ConfigDict(frozen=True)

    cellar: str | None = Field(
        default=None, description="Block-wide cellar requirement from `cellar :any`"
    )
    rebuild: int | None = Field(default=None, description="Bottle rebuild number")
    root_url: str | None = Field(default=None, description="Alternate bottle download root")
    releases: dict[str, str] = Field(
        default_factory=dict, description="Platform tag → sha256 checksum"
    )
    cellars: dict[str, str] = Field(
        default_factory=dict,
        description="Platform tag → cellar given with that checksum (`sha256 cellar: :any, ...`)",
    )


class SourceSpec(BaseModel):
    """Alternate source specification (`head` or `stable`)."""

    model_config = ConfigDict(frozen=True)

    url: str
    sha256: str | None = None
    dependencies: Dependencies | None = None


class FormulaRecord(BaseModel):
    """Metadata and install procedure of one formula."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Formula class name, lower-cased")
    desc: str | None = None
    homepage: str | None = None
    url: str | None = None
    sha256: str | None = None
    version: str | None = Field(
        default=None, description="Explicit version, or derived from the source URL"
    )
    revision: int | None = None
    rebuild: int | None = Field(default=None, description="Propagated from the bottle block")
    bottle: BottleInfo | None = None
    head: SourceSpec | None = None
    stable: SourceSpec | None = None
    dependencies: Dependencies = Field(default_factory=dict)
    install: list[Instruction] | None = Field(
        default=None, description="Translated install procedure; None without an install method"
    )

    def dependencies_of(self, dep_type: DependencyType) -> list[str]:
        """Dependency names of one type, in declaration order."""
        return list(self.dependencies.get(dep_type, []))
