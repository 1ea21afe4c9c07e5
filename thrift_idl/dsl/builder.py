"""Semantic actions that assemble AST nodes on the parser's value stack.

Terminal productions push leaves.  Composite productions reduce: they pop the
children they own off the top of the stack, restore source order and push
the composite.  Lists of unknown length are collected by popping while the top
matches the expected variant.  Where an enclosing production could own entries
of the same variant, the inner list starts with a ``Boundary`` and the
reduction pops up to it.  Values needed at reduction time but recognized
before a body (the declaration name, a field's type) are read from the
production's capture frame instead of the stack.
"""

from typing import Any

from ..core.errors import GrammarActionError
from ..core.types import ParserOptions, Requiredness
from .ast import (
    BaseTypeNode,
    CONST_VALUE_TYPES,
    ConstListNode,
    ConstMapEntryNode,
    ConstMapNode,
    ConstNode,
    CppIncludeNode,
    DEFINITION_TYPES,
    DoubleConstNode,
    EnumNode,
    EnumValueNode,
    ExceptionNode,
    FIELD_TYPE_TYPES,
    FieldNode,
    FunctionNode,
    HEADER_TYPES,
    IdentifierNode,
    IncludeNode,
    IntConstNode,
    ListTypeNode,
    LiteralNode,
    MapTypeNode,
    NamespaceNode,
    PhpNamespaceNode,
    SenumNode,
    ServiceNode,
    SetTypeNode,
    SmalltalkCategoryNode,
    SmalltalkPrefixNode,
    StructNode,
    ThriftDocument,
    ThrowsNode,
    TypedefNode,
    UnionNode,
    VoidNode,
    XsdFieldOptionsNode,
    XsdNamespaceNode,
)
from .peg import ParseState, ValueStack


class Boundary:
    """Stack marker opening an inner list; carries no content."""

    __slots__ = ("opened_by",)

    def __init__(self, opened_by: str):
        self.opened_by = opened_by

    def __repr__(self) -> str:
        return f"Boundary({self.opened_by})"


def pop_while(stack: ValueStack, types: tuple[type, ...]) -> list:
    """Pop entries while the top is one of ``types``; return them in source order."""
    items = []
    while isinstance(stack.peek(), types):
        items.append(stack.pop())
    items.reverse()
    return items


def pop_to_boundary(stack: ValueStack, types: tuple[type, ...], opened_by: str) -> list:
    """Pop ``types`` entries down to the boundary ``opened_by``, consuming it."""
    items = pop_while(stack, types)
    top = stack.peek()
    if not isinstance(top, Boundary) or top.opened_by != opened_by:
        raise GrammarActionError(
            f"expected {opened_by!r} boundary below {len(items)} entries, found {top!r}"
        )
    stack.pop()
    return items


def pop_expected(stack: ValueStack, types: tuple[type, ...] | type) -> Any:
    value = stack.pop()
    if not isinstance(value, types):
        raise GrammarActionError(f"expected {types} on the value stack, found {value!r}")
    return value


def pop_optional(stack: ValueStack, types: tuple[type, ...] | type) -> Any:
    if isinstance(stack.peek(), types):
        return stack.pop()
    return None


def _slot(state: ParseState, name: str, types: tuple[type, ...] | type) -> Any:
    value = state.frame.get(name)
    if not isinstance(value, types):
        raise GrammarActionError(f"capture {name!r} holds {value!r}")
    return value


def _literal_text(value: LiteralNode | None) -> str | None:
    return value.value if value is not None else None


# Leaf constructors, called with the matched text.

def make_identifier(text: str) -> IdentifierNode:
    return IdentifierNode(text.strip())


def make_literal(text: str) -> LiteralNode:
    return LiteralNode(text.strip()[1:-1])


def make_int(text: str) -> IntConstNode:
    return IntConstNode(int(text.strip()))


def make_hex(text: str) -> IntConstNode:
    return IntConstNode(int(text.strip(), 16))


def make_double(text: str) -> DoubleConstNode:
    return DoubleConstNode(float(text.strip()))


def make_base_type(text: str) -> BaseTypeNode:
    return BaseTypeNode(text.strip())


def make_void(text: str) -> VoidNode:
    return VoidNode()


def make_requiredness(text: str) -> Requiredness:
    return Requiredness(text.strip())


def make_scope(text: str) -> LiteralNode:
    return LiteralNode(text.strip())


class AstBuilder:
    """Reductions for every composite Thrift production."""

    def __init__(self, options: ParserOptions | None = None):
        self.options = options or ParserOptions()

    def boundary(self, opened_by: str):
        def push_boundary(state: ParseState) -> None:
            state.stack.push(Boundary(opened_by))
        return push_boundary

    # Document and headers

    def reduce_document(self, state: ParseState) -> None:
        definitions = pop_while(state.stack, DEFINITION_TYPES)
        headers = pop_while(state.stack, HEADER_TYPES)
        if len(state.stack):
            raise GrammarActionError(f"{len(state.stack)} unreduced entries below the document")
        state.stack.push(ThriftDocument(headers=headers, definitions=definitions))

    def reduce_include(self, state: ParseState) -> None:
        literal = pop_expected(state.stack, LiteralNode)
        state.stack.push(IncludeNode(literal.value))

    def reduce_cpp_include(self, state: ParseState) -> None:
        literal = pop_expected(state.stack, LiteralNode)
        state.stack.push(CppIncludeNode(literal.value))

    def reduce_namespace(self, state: ParseState) -> None:
        name = pop_expected(state.stack, IdentifierNode)
        scope = _slot(state, "scope", LiteralNode)
        state.stack.push(NamespaceNode(scope.value, name))

    def reduce_php_namespace(self, state: ParseState) -> None:
        literal = pop_expected(state.stack, LiteralNode)
        state.stack.push(PhpNamespaceNode(IdentifierNode(literal.value.strip())))

    def reduce_xsd_namespace(self, state: ParseState) -> None:
        literal = pop_expected(state.stack, LiteralNode)
        state.stack.push(XsdNamespaceNode(IdentifierNode(literal.value.strip())))

    def reduce_smalltalk_category(self, state: ParseState) -> None:
        state.stack.push(SmalltalkCategoryNode(pop_expected(state.stack, IdentifierNode)))

    def reduce_smalltalk_prefix(self, state: ParseState) -> None:
        state.stack.push(SmalltalkPrefixNode(pop_expected(state.stack, IdentifierNode)))

    # Definitions

    def reduce_const(self, state: ParseState) -> None:
        state.stack.push(ConstNode(
            const_type=_slot(state, "type", FIELD_TYPE_TYPES),
            name=_slot(state, "name", IdentifierNode).name,
            value=_slot(state, "value", CONST_VALUE_TYPES),
        ))

    def reduce_typedef(self, state: ParseState) -> None:
        state.stack.push(TypedefNode(
            definition_type=_slot(state, "type", FIELD_TYPE_TYPES),
            name=_slot(state, "name", IdentifierNode).name,
        ))

    def reduce_enum_value(self, state: ParseState) -> None:
        value = state.frame.get("value")
        state.stack.push(EnumValueNode(
            name=_slot(state, "name", IdentifierNode).name,
            value=value.value if value is not None else None,
        ))

    def reduce_enum(self, state: ParseState) -> None:
        values = pop_while(state.stack, (EnumValueNode,))
        if self.options.auto_number_enums:
            values = self._auto_number(values)
        state.stack.push(EnumNode(
            name=_slot(state, "name", IdentifierNode).name,
            values=tuple(values),
        ))

    def _auto_number(self, values: list[EnumValueNode]) -> list[EnumValueNode]:
        numbered = []
        next_value = 0
        for value in values:
            if value.value is None:
                value = EnumValueNode(value.name, next_value, auto_numbered=True)
            numbered.append(value)
            next_value = value.value + 1
        return numbered

    def reduce_senum(self, state: ParseState) -> None:
        literals = pop_while(state.stack, (LiteralNode,))
        state.stack.push(SenumNode(
            name=_slot(state, "name", IdentifierNode).name,
            values=tuple(lit.value for lit in literals),
        ))

    def reduce_struct(self, state: ParseState) -> None:
        fields = pop_while(state.stack, (FieldNode,))
        state.stack.push(StructNode(
            name=_slot(state, "name", IdentifierNode).name,
            fields=tuple(fields),
            xsd_all=state.frame.get("xsd_all", False),
        ))

    def reduce_union(self, state: ParseState) -> None:
        fields = pop_while(state.stack, (FieldNode,))
        state.stack.push(UnionNode(
            name=_slot(state, "name", IdentifierNode).name,
            fields=tuple(fields),
            xsd_all=state.frame.get("xsd_all", False),
        ))

    def reduce_exception(self, state: ParseState) -> None:
        fields = pop_while(state.stack, (FieldNode,))
        state.stack.push(ExceptionNode(
            name=_slot(state, "name", IdentifierNode).name,
            fields=tuple(fields),
        ))

    def reduce_service(self, state: ParseState) -> None:
        functions = pop_while(state.stack, (FunctionNode,))
        state.stack.push(ServiceNode(
            name=_slot(state, "name", IdentifierNode).name,
            extends=state.frame.get("extends"),
            functions=tuple(functions),
        ))

    # Fields and functions

    def reduce_xsd_attrs(self, state: ParseState) -> None:
        fields = pop_to_boundary(state.stack, (FieldNode,), "xsd_attrs")
        state.stack.push(XsdFieldOptionsNode(attributes=tuple(fields)))

    def reduce_field(self, state: ParseState) -> None:
        frame = state.frame
        field_id = frame.get("id")
        requiredness = frame.get("requiredness") if self.options.retain_requiredness else None
        attrs = frame.get("xsd_attrs")
        xsd_options = None
        if attrs is not None or frame.get("xsd_optional") or frame.get("xsd_nillable"):
            xsd_options = XsdFieldOptionsNode(
                optional=frame.get("xsd_optional", False),
                nillable=frame.get("xsd_nillable", False),
                attributes=attrs.attributes if attrs is not None else (),
            )
        state.stack.push(FieldNode(
            field_type=_slot(state, "type", FIELD_TYPE_TYPES),
            name=_slot(state, "name", IdentifierNode).name,
            field_id=field_id.value if field_id is not None else None,
            default=frame.get("default"),
            requiredness=requiredness,
            xsd_options=xsd_options,
        ))

    def reduce_throws(self, state: ParseState) -> None:
        fields = pop_to_boundary(state.stack, (FieldNode,), "throws")
        state.stack.push(ThrowsNode(tuple(fields)))

    def reduce_function(self, state: ParseState) -> None:
        throws = pop_optional(state.stack, ThrowsNode)
        arguments = pop_to_boundary(state.stack, (FieldNode,), "arguments")
        state.stack.push(FunctionNode(
            return_type=_slot(state, "return_type", FIELD_TYPE_TYPES + (VoidNode,)),
            name=_slot(state, "name", IdentifierNode).name,
            arguments=tuple(arguments),
            throws=throws,
            oneway=state.frame.get("oneway", False),
        ))

    # Types

    def reduce_map_type(self, state: ParseState) -> None:
        state.stack.push(MapTypeNode(
            key=_slot(state, "key", FIELD_TYPE_TYPES),
            value=_slot(state, "value", FIELD_TYPE_TYPES),
            cpp_type=_literal_text(state.frame.get("cpp_type")),
        ))

    def reduce_set_type(self, state: ParseState) -> None:
        state.stack.push(SetTypeNode(
            element=_slot(state, "element", FIELD_TYPE_TYPES),
            cpp_type=_literal_text(state.frame.get("cpp_type")),
        ))

    def reduce_list_type(self, state: ParseState) -> None:
        state.stack.push(ListTypeNode(
            element=_slot(state, "element", FIELD_TYPE_TYPES),
            cpp_type=_literal_text(state.frame.get("cpp_type")),
        ))

    # Constant values

    def reduce_const_list(self, state: ParseState) -> None:
        values = pop_to_boundary(state.stack, CONST_VALUE_TYPES, "const_list")
        state.stack.push(ConstListNode(tuple(values)))

    def reduce_const_map_entry(self, state: ParseState) -> None:
        value = pop_expected(state.stack, CONST_VALUE_TYPES)
        key = pop_expected(state.stack, CONST_VALUE_TYPES)
        state.stack.push(ConstMapEntryNode(key, value))

    def reduce_const_map(self, state: ParseState) -> None:
        entries = pop_to_boundary(state.stack, (ConstMapEntryNode,), "const_map")
        state.stack.push(ConstMapNode(tuple(entries)))
