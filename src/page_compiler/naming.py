"""Default type-naming collaborator: page object identifiers to type references.

An identifier such as ``utam-test/pageObjects/test/testObject`` names the
namespace, the kind of artifact (``pageObjects`` or ``utils``), an optional
sub package and the object itself. The compiler only needs a function from
identifier to :class:`CustomTypeDefinition`, so a renderer for another target
can inject its own naming scheme.
"""

from __future__ import annotations

from typing import Callable

from page_compiler.errors import InvalidTypeReference
from page_compiler.types import CustomTypeDefinition

TypeNamer = Callable[[str], CustomTypeDefinition]

IMPLEMENTATION_PACKAGE = "impl"
IMPLEMENTATION_SUFFIX = "Impl"


def _capitalize(name: str) -> str:
    return name[:1].upper() + name[1:]


def default_type_namer(identifier: str) -> CustomTypeDefinition:
    """Map ``<namespace>/<kind>/[<sub>/]<name>`` to a dotted type reference."""
    if not isinstance(identifier, str):
        raise InvalidTypeReference(str(identifier))
    parts = identifier.split("/")
    if len(parts) < 3 or any(not part for part in parts):
        raise InvalidTypeReference(identifier)
    namespace = parts[0].replace("-", ".")
    packages = [namespace, parts[1].lower()] + [p.lower() for p in parts[2:-1]]
    return CustomTypeDefinition(name=_capitalize(parts[-1]), package=".".join(packages))


def implementation_type(interface_type: CustomTypeDefinition) -> CustomTypeDefinition:
    """Return the default implementation type for an interface type."""
    package = (
        f"{interface_type.package}.{IMPLEMENTATION_PACKAGE}"
        if interface_type.package
        else IMPLEMENTATION_PACKAGE
    )
    return CustomTypeDefinition(
        name=f"{interface_type.name}{IMPLEMENTATION_SUFFIX}", package=package
    )


def is_type_reference(token: object) -> bool:
    """Check whether a grammar token looks like a page object/utility reference."""
    return isinstance(token, str) and "/" in token
