"""Core type definitions: object categories, member kinds, registry entry."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ObjectType(Enum):
    """ADT object category.

    Values are the ADT main type codes. Sub-typed codes reported by the
    ADT services (``CLAS/OC``, ``DEVC/K``) collapse onto their main type.
    """

    CLAS = "CLAS"
    INTF = "INTF"
    PROG = "PROG"
    FUGR = "FUGR"
    TABL = "TABL"
    DDLS = "DDLS"
    DCLS = "DCLS"
    DDLX = "DDLX"
    BDEF = "BDEF"
    SRVD = "SRVD"
    DEVC = "DEVC"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, raw: str | ObjectType | None) -> ObjectType:
        """Map a raw ADT type string to an ObjectType.

        Args:
            raw: Type code such as "CLAS", "clas/oc" or an ObjectType.

        Returns:
            The matching ObjectType, or UNKNOWN for anything unrecognised.
        """
        if isinstance(raw, ObjectType):
            return raw
        if not raw:
            return cls.UNKNOWN
        main = raw.split("/", 1)[0].strip().upper()
        try:
            return cls(main)
        except ValueError:
            return cls.UNKNOWN


class MemberType(Enum):
    """Kind of symbol referenced on a dependency target."""

    METHOD = "method"
    ATTRIBUTE = "attribute"
    TYPE = "type"
    CONSTANT = "constant"
    EVENT = "event"
    CONSTRUCTOR = "constructor"
    FORM = "form"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ObjectTypeDef:
    """Immutable definition of an object category.

    Every ObjectType has exactly one row in ``abapgraph.config.OBJECT_TYPES``.
    """

    object_type: ObjectType
    relevant: bool  # Worth modeling as a graph node
    description: str
    file_extension: str  # abapGit file extension
