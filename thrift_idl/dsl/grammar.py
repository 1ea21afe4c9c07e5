"""Thrift IDL productions built on the PEG primitives.

``ThriftGrammar(builder)`` wires every production to the builder's
reductions.  ``ThriftGrammar()`` with no builder yields the same language as a
pure recognizer: leaves, captures and reductions are left out, nothing else
changes.
"""

from ..core.types import BaseTypeName
from .builder import (
    AstBuilder,
    make_base_type,
    make_double,
    make_hex,
    make_identifier,
    make_int,
    make_literal,
    make_requiredness,
    make_scope,
    make_void,
)
from .peg import (
    Action,
    Capture,
    EndOfInput,
    FirstOf,
    Forward,
    Keyword,
    Leaf,
    Literal,
    Optional,
    Pattern,
    Rule,
    Scope,
    Sequence,
    SetSlot,
    Token,
    ZeroOrMore,
)


WHITESPACE = r"[ \t\r\n\f]*"

IDENTIFIER = r"[A-Za-z_][A-Za-z0-9_.]*"
ST_IDENTIFIER = r"[A-Za-z_][A-Za-z0-9_.\-]*"
LITERAL = r"\"[^\"]*\"|'[^']*'"
INT_CONSTANT = r"[+-]?[0-9]+"
HEX_CONSTANT = r"[+-]?0[xX][0-9a-fA-F]+"
DOUBLE_CONSTANT = r"[+-]?(?:[0-9]+[eE][+-]?[0-9]+|[0-9]*\.[0-9]+(?:[eE][+-]?[0-9]+)?)"

BASE_TYPES = tuple(t.value for t in BaseTypeName)

NAMESPACE_SCOPES = (
    "*", "cpp", "java", "py.twisted", "py", "perl", "php", "rb", "cocoa", "csharp",
    "c_glib", "go", "js", "lua", "netstd", "nodejs", "swift", "delphi", "haxe",
    "st", "xsd", "as3", "erl", "ocaml", "dart", "rs", "kotlin", "netcore",
)


class ThriftGrammar:
    """The full Thrift grammar, optionally driving an ``AstBuilder``."""

    def __init__(self, builder: AstBuilder | None = None):
        self.builder = builder
        self.ws = Pattern(WHITESPACE, "whitespace")
        self.document = self._build()

    # Construction helpers. Without a builder they reduce to the bare rule.

    def _act(self, name: str) -> Rule | None:
        if self.builder is None:
            return None
        return Action(getattr(self.builder, name))

    def _boundary(self, opened_by: str) -> Rule | None:
        if self.builder is None:
            return None
        return Action(self.builder.boundary(opened_by))

    def _leaf(self, rule: Rule, build) -> Rule:
        if self.builder is None:
            return rule
        return Leaf(rule, build)

    def _capture(self, slot: str, rule: Rule) -> Rule:
        if self.builder is None:
            return rule
        return Capture(slot, rule)

    def _scope(self, rule: Rule) -> Rule:
        if self.builder is None:
            return rule
        return Scope(rule)

    def _flag(self, slot: str) -> Rule | None:
        if self.builder is None:
            return None
        return SetSlot(slot)

    def kw(self, word: str) -> Rule:
        return Sequence(Keyword(word), self.ws)

    def sym(self, text: str) -> Rule:
        return Sequence(Literal(text), self.ws)

    def token(self, label: str, regex: str, build) -> Rule:
        return Token(label, self._leaf(Sequence(Pattern(regex, label), self.ws), build))

    def one_of_keywords(self, label: str, words, build) -> Rule:
        choice = FirstOf(*(Keyword(w) for w in words))
        return Token(label, self._leaf(Sequence(choice, self.ws), build))

    # Productions

    def _build(self) -> Rule:
        cap = self._capture

        identifier = self.token("identifier", IDENTIFIER, make_identifier)
        st_identifier = self.token("identifier", ST_IDENTIFIER, make_identifier)
        literal = self.token("literal", LITERAL, make_literal)
        int_constant = self.token("integer", INT_CONSTANT, make_int)
        hex_constant = self.token("hex integer", HEX_CONSTANT, make_hex)
        double_constant = self.token("double", DOUBLE_CONSTANT, make_double)
        list_separator = Sequence(Pattern(r"[,;]", "',' or ';'"), self.ws)
        separator = Optional(list_separator)

        field_type = Forward("field type")
        const_value = Forward("constant value")
        field = Forward("field")

        # Types
        base_type = self.one_of_keywords("base type", BASE_TYPES, make_base_type)
        cpp_type = Sequence(self.kw("cpp_type"), literal)
        map_type = self._scope(Sequence(
            self.kw("map"),
            Optional(cap("cpp_type", cpp_type)),
            self.sym("<"),
            cap("key", field_type),
            self.sym(","),
            cap("value", field_type),
            self.sym(">"),
            self._act("reduce_map_type"),
        ))
        set_type = self._scope(Sequence(
            self.kw("set"),
            Optional(cap("cpp_type", cpp_type)),
            self.sym("<"),
            cap("element", field_type),
            self.sym(">"),
            self._act("reduce_set_type"),
        ))
        list_type = self._scope(Sequence(
            self.kw("list"),
            self.sym("<"),
            cap("element", field_type),
            self.sym(">"),
            Optional(cap("cpp_type", cpp_type)),
            self._act("reduce_list_type"),
        ))
        container_type = FirstOf(map_type, set_type, list_type)
        field_type.define(FirstOf(container_type, base_type, identifier))
        definition_type = FirstOf(base_type, container_type)
        void = self._leaf(self.kw("void"), make_void)
        function_type = FirstOf(void, field_type)

        # Constant values
        const_list = Sequence(
            self.sym("["),
            self._boundary("const_list"),
            ZeroOrMore(Sequence(const_value, separator)),
            self.sym("]"),
            self._act("reduce_const_list"),
        )
        const_map = Sequence(
            self.sym("{"),
            self._boundary("const_map"),
            ZeroOrMore(Sequence(
                const_value,
                self.sym(":"),
                const_value,
                separator,
                self._act("reduce_const_map_entry"),
            )),
            self.sym("}"),
            self._act("reduce_const_map"),
        )
        const_value.define(FirstOf(
            hex_constant,
            double_constant,
            int_constant,
            literal,
            identifier,
            const_list,
            const_map,
        ))

        # Fields
        field_id = Sequence(int_constant, self.sym(":"))
        requiredness = self.one_of_keywords(
            "requiredness", ("required", "optional"), make_requiredness
        )
        xsd_attrs = Sequence(
            self.kw("xsd_attrs"),
            self.sym("{"),
            self._boundary("xsd_attrs"),
            ZeroOrMore(field),
            self.sym("}"),
            self._act("reduce_xsd_attrs"),
        )
        field.define(self._scope(Sequence(
            Optional(cap("id", field_id)),
            Optional(cap("requiredness", requiredness)),
            cap("type", field_type),
            cap("name", identifier),
            Optional(Sequence(self.sym("="), cap("default", const_value))),
            Optional(Sequence(self.kw("xsd_optional"), self._flag("xsd_optional"))),
            Optional(Sequence(self.kw("xsd_nillable"), self._flag("xsd_nillable"))),
            Optional(cap("xsd_attrs", xsd_attrs)),
            separator,
            self._act("reduce_field"),
        )))

        # Functions
        throws = Sequence(
            self.kw("throws"),
            self.sym("("),
            self._boundary("throws"),
            ZeroOrMore(field),
            self.sym(")"),
            self._act("reduce_throws"),
        )
        function = self._scope(Sequence(
            Optional(Sequence(self.kw("oneway"), self._flag("oneway"))),
            cap("return_type", function_type),
            cap("name", identifier),
            self.sym("("),
            self._boundary("arguments"),
            ZeroOrMore(field),
            self.sym(")"),
            Optional(throws),
            separator,
            self._act("reduce_function"),
        ))

        # Definitions
        const = self._scope(Sequence(
            self.kw("const"),
            cap("type", field_type),
            cap("name", identifier),
            self.sym("="),
            cap("value", const_value),
            separator,
            self._act("reduce_const"),
        ))
        typedef = self._scope(Sequence(
            self.kw("typedef"),
            cap("type", definition_type),
            cap("name", identifier),
            separator,
            self._act("reduce_typedef"),
        ))
        enum_value = self._scope(Sequence(
            cap("name", identifier),
            Optional(Sequence(self.sym("="), cap("value", FirstOf(hex_constant, int_constant)))),
            separator,
            self._act("reduce_enum_value"),
        ))
        enum = self._scope(Sequence(
            self.kw("enum"),
            cap("name", identifier),
            self.sym("{"),
            ZeroOrMore(enum_value),
            self.sym("}"),
            self._act("reduce_enum"),
        ))
        senum = self._scope(Sequence(
            self.kw("senum"),
            cap("name", identifier),
            self.sym("{"),
            ZeroOrMore(Sequence(literal, separator)),
            self.sym("}"),
            self._act("reduce_senum"),
        ))

        def fields_body(keyword: str, reduction: str, xsd_all: bool) -> Rule:
            return self._scope(Sequence(
                self.kw(keyword),
                cap("name", identifier),
                Optional(Sequence(self.kw("xsd_all"), self._flag("xsd_all"))) if xsd_all else None,
                self.sym("{"),
                ZeroOrMore(field),
                self.sym("}"),
                self._act(reduction),
            ))

        struct = fields_body("struct", "reduce_struct", xsd_all=True)
        union = fields_body("union", "reduce_union", xsd_all=True)
        exception = fields_body("exception", "reduce_exception", xsd_all=False)
        service = self._scope(Sequence(
            self.kw("service"),
            cap("name", identifier),
            Optional(Sequence(self.kw("extends"), cap("extends", identifier))),
            self.sym("{"),
            ZeroOrMore(function),
            self.sym("}"),
            self._act("reduce_service"),
        ))
        definition = FirstOf(const, typedef, enum, senum, struct, union, exception, service)

        # Headers
        include = Sequence(self.kw("include"), literal, self._act("reduce_include"))
        cpp_include = Sequence(self.kw("cpp_include"), literal, self._act("reduce_cpp_include"))
        namespace_scope = self.one_of_keywords("namespace scope", NAMESPACE_SCOPES, make_scope)
        scoped_namespace = Sequence(
            self.kw("namespace"),
            FirstOf(
                Sequence(
                    self.kw("smalltalk.category"),
                    st_identifier,
                    self._act("reduce_smalltalk_category"),
                ),
                Sequence(
                    self.kw("smalltalk.prefix"),
                    identifier,
                    self._act("reduce_smalltalk_prefix"),
                ),
                self._scope(Sequence(
                    cap("scope", namespace_scope),
                    identifier,
                    self._act("reduce_namespace"),
                )),
            ),
        )
        php_namespace = Sequence(
            self.kw("php_namespace"), literal, self._act("reduce_php_namespace")
        )
        xsd_namespace = Sequence(
            self.kw("xsd_namespace"), literal, self._act("reduce_xsd_namespace")
        )
        header = FirstOf(include, cpp_include, scoped_namespace, php_namespace, xsd_namespace)

        return Sequence(
            self.ws,
            ZeroOrMore(header),
            ZeroOrMore(definition),
            EndOfInput(),
            self._act("reduce_document"),
        )
