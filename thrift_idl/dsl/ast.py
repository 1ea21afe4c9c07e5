"""AST node definitions for Thrift IDL documents."""

from dataclasses import dataclass, field
from typing import Union

from ..core.types import Requiredness


@dataclass(frozen=True)
class IdentifierNode:
    """A (possibly dotted) name used as a reference."""
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class LiteralNode:
    """A quoted string literal, stored without its quotes."""
    value: str


@dataclass(frozen=True)
class IntConstNode:
    value: int


@dataclass(frozen=True)
class DoubleConstNode:
    value: float


@dataclass(frozen=True)
class ConstListNode:
    values: tuple["ConstValue", ...] = ()


@dataclass(frozen=True)
class ConstMapEntryNode:
    key: "ConstValue"
    value: "ConstValue"


@dataclass(frozen=True)
class ConstMapNode:
    entries: tuple[ConstMapEntryNode, ...] = ()


ConstValue = Union[
    IntConstNode, DoubleConstNode, LiteralNode, IdentifierNode, ConstListNode, ConstMapNode
]


@dataclass(frozen=True)
class BaseTypeNode:
    name: str


@dataclass(frozen=True)
class MapTypeNode:
    key: "FieldType"
    value: "FieldType"
    cpp_type: str | None = None


@dataclass(frozen=True)
class SetTypeNode:
    element: "FieldType"
    cpp_type: str | None = None


@dataclass(frozen=True)
class ListTypeNode:
    element: "FieldType"
    cpp_type: str | None = None


ContainerType = Union[MapTypeNode, SetTypeNode, ListTypeNode]
FieldType = Union[IdentifierNode, BaseTypeNode, MapTypeNode, SetTypeNode, ListTypeNode]


@dataclass(frozen=True)
class VoidNode:
    """Return type of a function that returns nothing."""


@dataclass(frozen=True)
class XsdFieldOptionsNode:
    optional: bool = False
    nillable: bool = False
    attributes: tuple["FieldNode", ...] = ()


@dataclass(frozen=True)
class FieldNode:
    """A struct member, function argument or throws entry."""
    field_type: FieldType
    name: str
    field_id: int | None = None
    default: ConstValue | None = None
    requiredness: Requiredness | None = None
    xsd_options: XsdFieldOptionsNode | None = None


@dataclass(frozen=True)
class ThrowsNode:
    fields: tuple[FieldNode, ...] = ()


@dataclass(frozen=True)
class FunctionNode:
    return_type: Union[VoidNode, FieldType]
    name: str
    arguments: tuple[FieldNode, ...] = ()
    throws: ThrowsNode | None = None
    oneway: bool = False


# Headers

@dataclass(frozen=True)
class IncludeNode:
    path: str


@dataclass(frozen=True)
class CppIncludeNode:
    path: str


@dataclass(frozen=True)
class NamespaceNode:
    """``namespace <scope> <name>``."""
    scope: str
    name: IdentifierNode


@dataclass(frozen=True)
class PhpNamespaceNode:
    name: IdentifierNode


@dataclass(frozen=True)
class XsdNamespaceNode:
    name: IdentifierNode


@dataclass(frozen=True)
class SmalltalkCategoryNode:
    name: IdentifierNode


@dataclass(frozen=True)
class SmalltalkPrefixNode:
    name: IdentifierNode


Header = Union[
    IncludeNode,
    CppIncludeNode,
    NamespaceNode,
    PhpNamespaceNode,
    XsdNamespaceNode,
    SmalltalkCategoryNode,
    SmalltalkPrefixNode,
]


# Definitions

@dataclass(frozen=True)
class ConstNode:
    const_type: FieldType
    name: str
    value: ConstValue


@dataclass(frozen=True)
class TypedefNode:
    definition_type: Union[BaseTypeNode, MapTypeNode, SetTypeNode, ListTypeNode]
    name: str


@dataclass(frozen=True)
class EnumValueNode:
    name: str
    value: int | None = None
    auto_numbered: bool = False


@dataclass(frozen=True)
class EnumNode:
    name: str
    values: tuple[EnumValueNode, ...] = ()


@dataclass(frozen=True)
class SenumNode:
    name: str
    values: tuple[str, ...] = ()


@dataclass(frozen=True)
class StructNode:
    name: str
    fields: tuple[FieldNode, ...] = ()
    xsd_all: bool = False


@dataclass(frozen=True)
class UnionNode:
    name: str
    fields: tuple[FieldNode, ...] = ()
    xsd_all: bool = False


@dataclass(frozen=True)
class ExceptionNode:
    name: str
    fields: tuple[FieldNode, ...] = ()


@dataclass(frozen=True)
class ServiceNode:
    name: str
    extends: IdentifierNode | None = None
    functions: tuple[FunctionNode, ...] = ()


Definition = Union[
    ConstNode,
    TypedefNode,
    EnumNode,
    SenumNode,
    StructNode,
    UnionNode,
    ExceptionNode,
    ServiceNode,
]

# Closed variant sets used by reductions and isinstance checks.
HEADER_TYPES = (
    IncludeNode,
    CppIncludeNode,
    NamespaceNode,
    PhpNamespaceNode,
    XsdNamespaceNode,
    SmalltalkCategoryNode,
    SmalltalkPrefixNode,
)
DEFINITION_TYPES = (
    ConstNode,
    TypedefNode,
    EnumNode,
    SenumNode,
    StructNode,
    UnionNode,
    ExceptionNode,
    ServiceNode,
)
FIELD_TYPE_TYPES = (IdentifierNode, BaseTypeNode, MapTypeNode, SetTypeNode, ListTypeNode)
CONST_VALUE_TYPES = (
    IntConstNode, DoubleConstNode, LiteralNode, IdentifierNode, ConstListNode, ConstMapNode
)


@dataclass
class ThriftDocument:
    """Complete parsed Thrift document."""
    headers: list[Header] = field(default_factory=list)
    definitions: list[Definition] = field(default_factory=list)

    def include_paths(self) -> list[str]:
        """Paths of ``include`` headers, in header order."""
        return [h.path for h in self.headers if isinstance(h, IncludeNode)]

    def merge(self, other: "ThriftDocument") -> None:
        """Append another document's headers and definitions after our own."""
        self.headers.extend(other.headers)
        self.definitions.extend(other.definitions)

    def find(self, name: str) -> Definition | None:
        for definition in self.definitions:
            if definition.name == name:
                return definition
        return None

    def definitions_of(self, node_type: type) -> list:
        return [d for d in self.definitions if isinstance(d, node_type)]

    def struct_fields(self, name: str) -> tuple[FieldNode, ...]:
        """Fields of the struct called ``name``."""
        for struct in self.definitions_of(StructNode):
            if struct.name == name:
                return struct.fields
        raise KeyError(f"Struct not found: {name}")
