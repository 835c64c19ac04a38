"""
Semantic model of an API surface as handed over by the parsing stage.

Every node is a frozen dataclass. Passes never mutate a node; they build a new
one with ``dataclasses.replace`` so the input model stays valid after a pass.

Nodes that were derived from a source construct keep an ``OriginRef`` back to
it. The reference is resolved once, when the model is built, into one of three
shapes (type, method, field), so passes can dispatch on ``OriginRef.kind``
instead of inspecting the source construct again.
"""

from dataclasses import dataclass, field
from enum import Enum as _Enum
from typing import Optional, Tuple


class OriginKind(_Enum):
    TYPE = "type"
    METHOD = "method"
    FIELD = "field"


@dataclass(frozen=True)
class DeprecationMarker:
    """
    Deprecation metadata found on a source construct.

    Older source platforms only know that a construct is deprecated, so both
    details are optional: ``None`` means the platform did not expose the field.
    """
    since: Optional[str] = None
    for_removal: Optional[bool] = None


@dataclass(frozen=True)
class OriginRef:
    """Non-owning link from a model node to the construct it came from."""
    name: str
    kind: OriginKind
    deprecation: Optional[DeprecationMarker] = None

    @property
    def is_deprecated(self) -> bool:
        return self.deprecation is not None


@dataclass(frozen=True)
class Property:
    name: str
    type: str = "any"
    optional: bool = False
    original_member: Optional[OriginRef] = None
    comments: Optional[Tuple[str, ...]] = None


@dataclass(frozen=True)
class Bean:
    name: str
    origin: Optional[OriginRef] = None
    parent: Optional[str] = None
    interfaces: Tuple[str, ...] = ()
    properties: Tuple[Property, ...] = ()
    comments: Optional[Tuple[str, ...]] = None


@dataclass(frozen=True)
class EnumMember:
    property_name: str
    enum_value: object = None
    original_field: Optional[OriginRef] = None
    comments: Optional[Tuple[str, ...]] = None


@dataclass(frozen=True)
class Enum:
    name: str
    kind: str = "string"
    origin: Optional[OriginRef] = None
    members: Tuple[EnumMember, ...] = ()
    comments: Optional[Tuple[str, ...]] = None


@dataclass(frozen=True)
class RestMethod:
    name: str
    http_method: str = "GET"
    path: str = ""
    return_type: Optional[str] = None
    original_method: Optional[OriginRef] = None
    comments: Optional[Tuple[str, ...]] = None


@dataclass(frozen=True)
class RestApplication:
    name: Optional[str] = None
    application_path: Optional[str] = None
    methods: Tuple[RestMethod, ...] = ()


@dataclass(frozen=True)
class Model:
    beans: Tuple[Bean, ...] = field(default_factory=tuple)
    enums: Tuple[Enum, ...] = field(default_factory=tuple)
    rest_applications: Tuple[RestApplication, ...] = field(default_factory=tuple)
