"""Builders accumulating directive effects before a record is frozen."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from src.models.formula import (
    BottleInfo,
    Dependencies,
    DependencyType,
    FormulaRecord,
    SourceSpec,
)
from src.translator.ir import Instruction

from .errors import InvalidDirective

VersionParser = Callable[[str], str | None]


def _append_dependency(deps: Dependencies, name: str, dep_type: DependencyType) -> None:
    deps.setdefault(dep_type, []).append(name)


@dataclass
class BottleBuilder:
    """Accumulates the directives of a `bottle do ... end` block."""

    cellar: str | None = None
    rebuild: int | None = None
    root_url: str | None = None
    releases: dict[str, str] = field(default_factory=dict)
    cellars: dict[str, str] = field(default_factory=dict)

    def add_release(self, platform: str, checksum: str, cellar: str | None = None) -> None:
        self.releases[platform] = checksum
        if cellar is not None:
            self.cellars[platform] = cellar

    def build(self) -> BottleInfo:
        return BottleInfo(
            cellar=self.cellar,
            rebuild=self.rebuild,
            root_url=self.root_url,
            releases=dict(self.releases),
            cellars=dict(self.cellars),
        )


@dataclass
class SourceBuilder:
    """Accumulates a `head` or `stable` source specification."""

    kind: str
    url: str | None = None
    sha256: str | None = None
    dependencies: Dependencies = field(default_factory=dict)

    def add_dependency(self, name: str, dep_type: DependencyType) -> None:
        _append_dependency(self.dependencies, name, dep_type)

    def build(self, path: str | None = None) -> SourceSpec:
        if self.url is None:
            raise InvalidDirective(self.kind, "no url given", path)
        return SourceSpec(
            url=self.url,
            sha256=self.sha256,
            dependencies=dict(self.dependencies) or None,
        )


@dataclass
class FormulaBuilder:
    """Accumulates directive effects for one formula class.

    Directives write fields in source order; ``build`` applies the derived
    rules (stable overrides, version derivation, rebuild propagation) and
    returns the frozen record.
    """

    name: str
    path: str | None = None

    desc: str | None = None
    homepage: str | None = None
    url: str | None = None
    sha256: str | None = None
    version: str | None = None
    revision: int | None = None
    dependencies: Dependencies = field(default_factory=dict)
    bottle: BottleInfo | None = None
    head: SourceSpec | None = None
    stable: SourceSpec | None = None

    def add_dependency(self, name: str, dep_type: DependencyType) -> None:
        _append_dependency(self.dependencies, name, dep_type)

    def build(
        self,
        install: list[Instruction] | None,
        version_parser: VersionParser | None = None,
    ) -> FormulaRecord:
        """Freeze the accumulated fields into a FormulaRecord.

        Args:
            install: Translated install procedure, or None when absent
            version_parser: Derives a version from the source URL when the
                formula declares none

        Returns:
            The completed record
        """
        url, sha256 = self.url, self.sha256
        if self.stable is not None:
            url = self.stable.url
            sha256 = self.stable.sha256

        head_only = url is None and self.head is not None
        if head_only:
            url = self.head.url

        version = self.version
        if version is None:
            if head_only:
                version = "HEAD"
            elif url is not None and version_parser is not None:
                version = version_parser(url)

        return FormulaRecord(
            name=self.name,
            desc=self.desc,
            homepage=self.homepage,
            url=url,
            sha256=sha256,
            version=version,
            revision=self.revision,
            rebuild=self.bottle.rebuild if self.bottle is not None else None,
            bottle=self.bottle,
            head=self.head,
            stable=self.stable,
            dependencies={dep_type: list(names) for dep_type, names in self.dependencies.items()},
            install=install,
        )
