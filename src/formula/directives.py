"""Directive handler registries.

Maps directive names to handler functions. Each scope (formula class body,
`bottle` block, `head`/`stable` block) has its own registry; a name missing
from the registry of its scope is an UnknownDirective.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from src.models.formula import DependencyType
from src.recipe.syntax import Call

from .context import BottleBuilder, SourceBuilder
from .literals import Symbol

if TYPE_CHECKING:
    from .interpreter import DirectiveInterpreter

# Type alias for directive handlers: (interpreter, target builder, call)
DirectiveHandler = Callable[["DirectiveInterpreter", Any, Call], None]

# System requirements accepted by depends_on
REQUIREMENTS = frozenset(
    {"arch", "java", "linux", "macos", "maximum_macos", "osxfuse", "x11", "xcode"}
)


# =============================================================================
# Generic handlers
# =============================================================================


def _no_effect(interp: DirectiveInterpreter, target: Any, call: Call) -> None:
    """Accepted directive that contributes nothing to the record."""


def _string_field(field_name: str, allow_options: bool = False) -> DirectiveHandler:
    def handler(interp: DirectiveInterpreter, target: Any, call: Call) -> None:
        setattr(target, field_name, interp.string_argument(call, allow_options))

    return handler


def _int_field(field_name: str) -> DirectiveHandler:
    def handler(interp: DirectiveInterpreter, target: Any, call: Call) -> None:
        setattr(target, field_name, interp.int_argument(call))

    return handler


def _dependency_type(interp: DirectiveInterpreter, call: Call, tag: Any) -> DependencyType:
    if not isinstance(tag, str):
        raise interp.invalid(call, f"dependency type must be a symbol, got {tag!r}")
    try:
        return DependencyType(str(tag))
    except ValueError:
        raise interp.invalid(call, f"unknown dependency type '{tag}'") from None


def _is_requirement(name: str) -> bool:
    """`:xcode`, `macos: :catalina`: a system requirement, not a formula."""
    return isinstance(name, Symbol) and name in REQUIREMENTS


def _depends_on(interp: DirectiveInterpreter, target: Any, call: Call) -> None:
    """`depends_on "x"`, `depends_on "x" => :build`, `depends_on "x" => [:build, :test]`.

    Requirements (`depends_on :xcode`, `depends_on macos: :catalina`,
    `depends_on xcode: ["12.0", :build]`) are accepted and not recorded.
    """
    args = interp.arguments(call)
    if not args:
        raise interp.invalid(call, "expected a dependency name")
    for arg in args:
        if isinstance(arg, dict):
            for name, tags in arg.items():
                if not isinstance(name, str):
                    raise interp.invalid(call, f"dependency name must be a string, got {name!r}")
                if _is_requirement(name):
                    continue
                for tag in tags if isinstance(tags, list) else [tags]:
                    # minimum versions, e.g. "3.9" in ["3.9", :build]
                    if isinstance(tag, str) and not isinstance(tag, Symbol):
                        continue
                    target.add_dependency(str(name), _dependency_type(interp, call, tag))
        elif isinstance(arg, str):
            if _is_requirement(arg):
                continue
            target.add_dependency(str(arg), DependencyType.RUNTIME)
        else:
            raise interp.invalid(call, f"dependency name must be a string, got {arg!r}")


# =============================================================================
# Bottle block
# =============================================================================


def _bottle_sha256(interp: DirectiveInterpreter, bottle: BottleBuilder, call: Call) -> None:
    """Both `sha256 "hash" => :platform` and `sha256 cellar: :any, platform: "hash"`.

    A `cellar:` entry applies to the platforms of the same call only.
    """
    args = interp.arguments(call)
    if len(args) != 1 or not isinstance(args[0], dict):
        raise interp.invalid(call, "expected checksum => platform pairs")
    entries = dict(args[0])
    cellar = entries.pop(Symbol("cellar"), None)
    if cellar is not None:
        cellar = str(cellar)
    for key, value in entries.items():
        if isinstance(value, Symbol) and isinstance(key, str) and not isinstance(key, Symbol):
            bottle.add_release(str(value), key, cellar)
        elif isinstance(key, Symbol) and isinstance(value, str) and not isinstance(value, Symbol):
            bottle.add_release(str(key), value, cellar)
        else:
            raise interp.invalid(call, f"cannot read checksum entry {key!r} => {value!r}")


def _bottle_cellar(interp: DirectiveInterpreter, bottle: BottleBuilder, call: Call) -> None:
    bottle.cellar = interp.string_argument(call, allow_symbol=True)


BOTTLE_DIRECTIVES: dict[str, DirectiveHandler] = {
    "cellar": _bottle_cellar,
    "rebuild": _int_field("rebuild"),
    "root_url": _string_field("root_url", allow_options=True),
    "sha256": _bottle_sha256,
}


def _bottle(interp: DirectiveInterpreter, formula: Any, call: Call) -> None:
    if call.block is None:
        # `bottle :unneeded` from older formulae
        if interp.arguments(call) == ["unneeded"]:
            return
        raise interp.invalid(call, "expected a block")
    bottle = BottleBuilder()
    interp.run(call.block.body, bottle, BOTTLE_DIRECTIVES)
    formula.bottle = bottle.build()


# =============================================================================
# Head and stable
# =============================================================================

SOURCE_DIRECTIVES: dict[str, DirectiveHandler] = {
    "url": _string_field("url", allow_options=True),
    "sha256": _string_field("sha256"),
    "depends_on": _depends_on,
    "mirror": _no_effect,
    "patch": _no_effect,
    "resource": _no_effect,
}


def _head(interp: DirectiveInterpreter, formula: Any, call: Call) -> None:
    """`head "url", branch: "main"` or `head do ... end`."""
    source = SourceBuilder(kind="head")
    if call.block is not None:
        interp.run(call.block.body, source, SOURCE_DIRECTIVES)
    if call.args:
        source.url = interp.string_argument(call, allow_options=True)
    formula.head = source.build(interp.path)


def _stable(interp: DirectiveInterpreter, formula: Any, call: Call) -> None:
    if call.block is None:
        raise interp.invalid(call, "expected a block")
    source = SourceBuilder(kind="stable")
    interp.run(call.block.body, source, SOURCE_DIRECTIVES)
    formula.stable = source.build(interp.path)


# =============================================================================
# Formula class body
# =============================================================================

FORMULA_DIRECTIVES: dict[str, DirectiveHandler] = {
    "desc": _string_field("desc"),
    "homepage": _string_field("homepage"),
    "url": _string_field("url", allow_options=True),
    "sha256": _string_field("sha256"),
    "version": _string_field("version"),
    "revision": _int_field("revision"),
    "depends_on": _depends_on,
    "bottle": _bottle,
    "head": _head,
    "stable": _stable,
    # Accepted without effect on the record
    "resource": _no_effect,
    "mirror": _no_effect,
    "uses_from_macos": _no_effect,
    "version_scheme": _no_effect,
    "test": _no_effect,
    "patch": _no_effect,
    "license": _no_effect,
    "livecheck": _no_effect,
    "keg_only": _no_effect,
    "conflicts_with": _no_effect,
    "option": _no_effect,
    "include": _no_effect,
    "fails_with": _no_effect,
    "deprecate!": _no_effect,
    "disable!": _no_effect,
}
