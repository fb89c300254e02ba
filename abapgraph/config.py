"""Object type registry and graph engine constants.

This table IS the classification policy. Supporting a new ADT object
category means adding one enum member and one row here. The builders read
``relevant`` to decide whether a dependency becomes a node at all.
"""

from __future__ import annotations

from abapgraph.models.types import ObjectType, ObjectTypeDef

# Graph discovery limits
DEFAULT_MAX_NODES: int = 50  # Node budget for a single-object DAG
DEFAULT_MAX_SUBPACKAGE_DEPTH: int = 2  # Recursion depth for sub-packages
PACKAGE_FETCH_TIMEOUT_SECONDS: float = 30.0  # Per package-contents fetch

# Naming conventions
CUSTOM_PREFIXES: tuple[str, ...] = ("Z", "Y")  # Customer namespace
COMPONENT_SEPARATOR: str = "~"  # e.g. ZIF_FOO~BAR, never a standalone object

STANDALONE_CLUSTER_NAME: str = "Standalone Objects"

OBJECT_TYPES: dict[ObjectType, ObjectTypeDef] = {
    # -- Code --
    ObjectType.CLAS: ObjectTypeDef(
        object_type=ObjectType.CLAS,
        relevant=True,
        description="Global class",
        file_extension="clas",
    ),
    ObjectType.INTF: ObjectTypeDef(
        object_type=ObjectType.INTF,
        relevant=True,
        description="Global interface",
        file_extension="intf",
    ),
    ObjectType.PROG: ObjectTypeDef(
        object_type=ObjectType.PROG,
        relevant=True,
        description="Report or include program",
        file_extension="prog",
    ),
    ObjectType.FUGR: ObjectTypeDef(
        object_type=ObjectType.FUGR,
        relevant=True,
        description="Function group",
        file_extension="fugr",
    ),
    # -- Data model --
    ObjectType.TABL: ObjectTypeDef(
        object_type=ObjectType.TABL,
        relevant=True,
        description="Database table or structure",
        file_extension="tabl",
    ),
    ObjectType.DDLS: ObjectTypeDef(
        object_type=ObjectType.DDLS,
        relevant=True,
        description="CDS view definition",
        file_extension="ddls",
    ),
    ObjectType.DCLS: ObjectTypeDef(
        object_type=ObjectType.DCLS,
        relevant=True,
        description="CDS access control",
        file_extension="dcls",
    ),
    ObjectType.DDLX: ObjectTypeDef(
        object_type=ObjectType.DDLX,
        relevant=True,
        description="CDS metadata extension",
        file_extension="ddlx",
    ),
    # -- RAP extensions --
    ObjectType.BDEF: ObjectTypeDef(
        object_type=ObjectType.BDEF,
        relevant=True,
        description="Behavior definition",
        file_extension="bdef",
    ),
    ObjectType.SRVD: ObjectTypeDef(
        object_type=ObjectType.SRVD,
        relevant=True,
        description="Service definition",
        file_extension="srvd",
    ),
    # -- Not modeled --
    ObjectType.DEVC: ObjectTypeDef(
        object_type=ObjectType.DEVC,
        relevant=False,
        description="Package (sub-package marker in package listings)",
        file_extension="devc",
    ),
    ObjectType.UNKNOWN: ObjectTypeDef(
        object_type=ObjectType.UNKNOWN,
        relevant=False,
        description="Unrecognised ADT object type",
        file_extension="abap",
    ),
}
