"""Naming-convention rules for ABAP objects.

Custom vs. standard, relevance, component references and abapGit file
names are all decided from the object name and the type registry alone;
none of these checks touch the system.
"""

from __future__ import annotations

import re

from abapgraph.config import COMPONENT_SEPARATOR, CUSTOM_PREFIXES, OBJECT_TYPES
from abapgraph.models.types import ObjectType

# Optional /NAMESPACE/ prefix, optional customer letter, then IF_
INTERFACE_NAME_PATTERN = re.compile(r"^(?:/[A-Z0-9_]+/)?[ZY]?IF_", re.IGNORECASE)


def normalize_name(name: str) -> str:
    """Return the canonical identity of an object name."""
    return name.strip().upper()


def is_custom_object(name: str) -> bool:
    """True if the object lives in the customer namespace (Z*/Y*)."""
    return normalize_name(name).startswith(CUSTOM_PREFIXES)


def is_component_reference(name: str) -> bool:
    """True for names like ZIF_FOO~BAR that address a member of a type."""
    return COMPONENT_SEPARATOR in name


def is_relevant_type(object_type: ObjectType) -> bool:
    """True if objects of this category are modeled as graph nodes."""
    return OBJECT_TYPES[object_type].relevant


def looks_like_interface(name: str) -> bool:
    return bool(INTERFACE_NAME_PATTERN.match(name.strip()))


def object_type_to_file_extension(object_type: ObjectType | str) -> str:
    """Map an object type to its abapGit file extension.

    Unrecognised raw strings fall back to their lower-cased value.
    """
    parsed = ObjectType.parse(object_type)
    if parsed is ObjectType.UNKNOWN and isinstance(object_type, str) and object_type:
        return object_type.lower()
    return OBJECT_TYPES[parsed].file_extension


def build_abapgit_filename(object_name: str, object_type: ObjectType | str) -> str:
    """Build an abapGit-style filename, e.g. ZCL_FOO -> zcl_foo.clas.abap."""
    extension = object_type_to_file_extension(object_type)
    return f"{object_name.strip().lower()}.{extension}.abap"
