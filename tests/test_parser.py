"""Tests for parsing Thrift IDL text into documents."""

import pytest
from pathlib import Path
from thrift_idl.core.errors import NestingTooDeepError, ThriftSyntaxError
from thrift_idl.core.types import ParserOptions, Requiredness
from thrift_idl.dsl.ast import (
    BaseTypeNode,
    ConstListNode,
    ConstMapEntryNode,
    ConstMapNode,
    ConstNode,
    CppIncludeNode,
    DoubleConstNode,
    EnumNode,
    ExceptionNode,
    FieldNode,
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
    TypedefNode,
    UnionNode,
    VoidNode,
    XsdFieldOptionsNode,
    XsdNamespaceNode,
)
from thrift_idl.dsl.parser import ThriftParser, parse, recognize


EXAMPLES_PATH = Path(__file__).parent.parent / "thrift_idl" / "dsl" / "examples"


@pytest.fixture
def parser():
    return ThriftParser()


def test_struct_with_three_fields(parser):
    """Test a struct with ids, an optional field and a container type."""
    doc = parser.parse(
        "struct Foo { 1: string name, 2: optional i32 age, 3: list<string> tags }"
    )

    assert doc.headers == []
    assert len(doc.definitions) == 1
    struct = doc.definitions[0]
    assert isinstance(struct, StructNode)
    assert struct.name == "Foo"
    assert [f.field_id for f in struct.fields] == [1, 2, 3]
    assert [f.name for f in struct.fields] == ["name", "age", "tags"]
    assert struct.fields[1].field_type == BaseTypeNode("i32")
    assert struct.fields[1].requiredness is None
    assert struct.fields[2].field_type == ListTypeNode(BaseTypeNode("string"))


def test_enum_values_in_source_order(parser):
    doc = parser.parse("enum Color { RED, GREEN, BLUE = 2 }")

    enum = doc.definitions[0]
    assert isinstance(enum, EnumNode)
    assert [v.name for v in enum.values] == ["RED", "GREEN", "BLUE"]
    assert [v.value for v in enum.values] == [None, None, 2]
    assert not any(v.auto_numbered for v in enum.values)


def test_negative_int_const(parser):
    doc = parser.parse("const i32 MAX = -42")

    assert doc.definitions == [ConstNode(BaseTypeNode("i32"), "MAX", IntConstNode(-42))]


def test_service_extends_with_void_function(parser):
    doc = parser.parse("service Child extends Parent { void ping() }")

    service = doc.definitions[0]
    assert isinstance(service, ServiceNode)
    assert service.name == "Child"
    assert service.extends == IdentifierNode("Parent")
    assert len(service.functions) == 1
    ping = service.functions[0]
    assert ping.name == "ping"
    assert ping.return_type == VoidNode()
    assert ping.arguments == ()
    assert ping.throws is None
    assert ping.oneway is False


def test_service_without_parent(parser):
    doc = parser.parse("service Lone { i32 get() }")

    assert doc.definitions[0].extends is None


def test_const_list(parser):
    doc = parser.parse("const list<i32> NUMS = [1, 2, 3]")

    const = doc.definitions[0]
    assert const.const_type == ListTypeNode(BaseTypeNode("i32"))
    assert const.value == ConstListNode((IntConstNode(1), IntConstNode(2), IntConstNode(3)))


def test_headers_and_definitions_keep_source_order(parser):
    """Test that headers and definitions come out in declaration order."""
    text = """
        include "a.thrift"
        namespace java com.example
        cpp_include "<vector>"
        include "b.thrift"

        struct First {}
        enum Second { X }
        const i32 THIRD = 3
        exception Fourth {}
        service Fifth {}
        typedef i64 Sixth
    """
    doc = parser.parse(text)

    assert doc.headers == [
        IncludeNode("a.thrift"),
        NamespaceNode("java", IdentifierNode("com.example")),
        CppIncludeNode("<vector>"),
        IncludeNode("b.thrift"),
    ]
    assert [d.name for d in doc.definitions] == [
        "First", "Second", "THIRD", "Fourth", "Fifth", "Sixth",
    ]
    assert doc.include_paths() == ["a.thrift", "b.thrift"]


def test_namespace_variants(parser):
    text = """
        namespace py foo.bar
        namespace py.twisted foo.tw
        namespace * everything
        php_namespace "Foo"
        xsd_namespace "http://example.com/ns"
        namespace smalltalk.category Thrift-Tests
        namespace smalltalk.prefix TT
    """
    doc = parser.parse(text)

    assert doc.headers == [
        NamespaceNode("py", IdentifierNode("foo.bar")),
        NamespaceNode("py.twisted", IdentifierNode("foo.tw")),
        NamespaceNode("*", IdentifierNode("everything")),
        PhpNamespaceNode(IdentifierNode("Foo")),
        XsdNamespaceNode(IdentifierNode("http://example.com/ns")),
        SmalltalkCategoryNode(IdentifierNode("Thrift-Tests")),
        SmalltalkPrefixNode(IdentifierNode("TT")),
    ]


def test_numeric_constants(parser):
    """Test that hex, double and exponent forms are single constants."""
    doc = parser.parse("""
        const double PI = 3.14
        const double HALF = -.5
        const double BIG = 1e10
        const i64 MASK = 0xFF
        const i32 ZERO = 0
    """)

    values = [d.value for d in doc.definitions]
    assert values == [
        DoubleConstNode(3.14),
        DoubleConstNode(-0.5),
        DoubleConstNode(1e10),
        IntConstNode(255),
        IntConstNode(0),
    ]


def test_const_map_and_nested_list(parser):
    doc = parser.parse("""
        const map<string, i32> M = {"a": 1, 'b': 2}
        const list<list<i32>> L = [[1, 2], [3]; []]
    """)

    m, nested = doc.definitions
    assert m.const_type == MapTypeNode(BaseTypeNode("string"), BaseTypeNode("i32"))
    assert m.value == ConstMapNode((
        ConstMapEntryNode(LiteralNode("a"), IntConstNode(1)),
        ConstMapEntryNode(LiteralNode("b"), IntConstNode(2)),
    ))
    assert nested.value == ConstListNode((
        ConstListNode((IntConstNode(1), IntConstNode(2))),
        ConstListNode((IntConstNode(3),)),
        ConstListNode(()),
    ))


def test_cpp_type_stays_with_its_container(parser):
    """Test that a nested container's cpp_type is not taken by the outer one."""
    doc = parser.parse(
        'typedef map<string, map cpp_type "Inner" <i32, i32>> Outer\n'
        'typedef list<string> cpp_type "std::deque" Names\n'
        'typedef set cpp_type "Hashed" <i64> Ids'
    )

    outer, names, ids = doc.definitions
    assert outer == TypedefNode(
        MapTypeNode(
            BaseTypeNode("string"),
            MapTypeNode(BaseTypeNode("i32"), BaseTypeNode("i32"), cpp_type="Inner"),
        ),
        "Outer",
    )
    assert names.definition_type == ListTypeNode(BaseTypeNode("string"), cpp_type="std::deque")
    assert ids.definition_type == SetTypeNode(BaseTypeNode("i64"), cpp_type="Hashed")


def test_field_identifier_type_and_default(parser):
    """Test that a field's identifier type and identifier default stay apart."""
    doc = parser.parse("struct S { 1: Color c = Color.RED; 2: i32 n = 5 }")

    c, n = doc.struct_fields("S")
    assert c == FieldNode(IdentifierNode("Color"), "c", 1, IdentifierNode("Color.RED"))
    assert n.default == IntConstNode(5)


def test_fields_without_ids_or_separators(parser):
    doc = parser.parse("struct S {\n  string a\n  i32 b\n}")

    assert [(f.field_id, f.name) for f in doc.struct_fields("S")] == [(None, "a"), (None, "b")]


def test_keyword_prefix_is_an_identifier(parser):
    """Test that keywords only match on a word boundary."""
    doc = parser.parse(
        "struct i32x { 1: i32x value }\nservice S { voidable get() }"
    )

    struct, service = doc.definitions
    assert struct.name == "i32x"
    assert struct.fields[0].field_type == IdentifierNode("i32x")
    assert service.functions[0].return_type == IdentifierNode("voidable")


def test_function_arguments_and_throws(parser):
    doc = parser.parse("""
        service Calc {
            i32 div(1: i32 a, 2: i32 b) throws (1: DivByZero err, 2: Overflow over);
            oneway void fire(1: string msg),
            list<string> names()
        }
    """)

    div, fire, names = doc.definitions[0].functions
    assert [a.name for a in div.arguments] == ["a", "b"]
    assert [f.name for f in div.throws.fields] == ["err", "over"]
    assert div.throws.fields[0].field_type == IdentifierNode("DivByZero")
    assert fire.oneway is True
    assert fire.return_type == VoidNode()
    assert [a.name for a in fire.arguments] == ["msg"]
    assert names.return_type == ListTypeNode(BaseTypeNode("string"))
    assert names.throws is None


def test_union_exception_and_senum(parser):
    doc = parser.parse("""
        union U { 1: i32 a, 2: string b }
        exception E { 1: string message }
        senum Tags { "a", "b"; 'c' }
    """)

    union, exception, senum = doc.definitions
    assert isinstance(union, UnionNode)
    assert [f.name for f in union.fields] == ["a", "b"]
    assert isinstance(exception, ExceptionNode)
    assert exception.fields[0].field_type == BaseTypeNode("string")
    assert senum == SenumNode("Tags", ("a", "b", "c"))


def test_xsd_options(parser):
    doc = parser.parse(
        "struct S xsd_all { 1: string a xsd_optional xsd_nillable xsd_attrs { 1: i32 x } }"
    )

    struct = doc.definitions[0]
    assert struct.xsd_all is True
    assert struct.fields[0].xsd_options == XsdFieldOptionsNode(
        optional=True,
        nillable=True,
        attributes=(FieldNode(BaseTypeNode("i32"), "x", 1),),
    )


def test_comments_are_ignored(parser):
    doc = parser.parse("""
        // leading comment
        struct A { /* inline */ 1: i32 x } // trailing
        /* block
           comment */
        const string S = "keep // this"
    """)

    assert [d.name for d in doc.definitions] == ["A", "S"]
    assert doc.definitions[1].value == LiteralNode("keep // this")


def test_empty_document(parser):
    assert parser.parse("") == ThriftDocument()
    assert parser.parse("  // only a comment\n") == ThriftDocument()


def test_syntax_error_reports_position(parser):
    """Test that the furthest failure is reported with line and column."""
    with pytest.raises(ThriftSyntaxError) as exc_info:
        parser.parse("struct Foo {\n  1: i32\n}", source="foo.thrift")

    error = exc_info.value
    assert error.line == 3
    assert error.column == 1
    assert "identifier" in error.expected
    assert error.source == "foo.thrift"
    assert "foo.thrift: line 3, column 1" in str(error)


def test_deep_nesting_rejected_with_package_error(parser):
    """Test that nesting past the recursion limit is a rejection, not a crash."""
    text = "const list<i32> X = " + "[" * 500 + "]" * 500

    assert parser.recognize(text) is False
    assert parser.try_parse(text) is None
    with pytest.raises(NestingTooDeepError) as exc_info:
        parser.parse(text, source="deep.thrift")

    error = exc_info.value
    assert isinstance(error, ThriftSyntaxError)
    assert error.line == 1
    assert error.column > len("const list<i32> X = ")
    assert str(error).startswith("Nesting too deep at deep.thrift: line 1")


def test_moderate_nesting_still_parses(parser):
    text = "const list<i32> X = " + "[" * 30 + "]" * 30

    assert parser.recognize(text) is True
    value = parser.parse(text).definitions[0].value
    for _ in range(29):
        value = value.values[0]
    assert value == ConstListNode(())


def test_error_context_has_caret(parser):
    text = "struct Foo {\n  1: i32\n}"
    with pytest.raises(ThriftSyntaxError) as exc_info:
        parser.parse(text)

    assert exc_info.value.get_context(text) == "}\n^\n"


@pytest.mark.parametrize(
    "text",
    [
        "struct {",
        "struct Foo { 1: i32 }",
        "const i32 = 3",
        "enum E { A = }",
        "service S { void f( }",
        "struct A {} include \"late.thrift\"",
        "typedef i32",
    ],
)
def test_invalid_documents_rejected(parser, text):
    assert parser.try_parse(text) is None
    with pytest.raises(ThriftSyntaxError):
        parser.parse(text)


@pytest.mark.parametrize(
    "text",
    [
        "",
        "struct Foo { 1: string name, 2: optional i32 age, 3: list<string> tags }",
        "enum Color { RED, GREEN, BLUE = 2 }",
        "const list<i32> NUMS = [1, 2, 3]",
        "service Child extends Parent { void ping() }",
        "struct {",
        "const i32 = 3",
        "namespace cobol foo",
        "struct S xsd_all { 1: string a xsd_attrs { 1: i32 x } }",
    ],
)
def test_recognizer_agrees_with_builder(parser, text):
    """Test that the recognizer accepts exactly what the builder parses."""
    assert parser.recognize(text) == (parser.try_parse(text) is not None)


def test_retain_requiredness_option():
    parser = ThriftParser(ParserOptions(retain_requiredness=True))
    doc = parser.parse("struct S { 1: required i32 a, 2: optional i32 b, 3: i32 c }")

    assert [f.requiredness for f in doc.struct_fields("S")] == [
        Requiredness.REQUIRED, Requiredness.OPTIONAL, None,
    ]


def test_auto_number_enums_option():
    parser = ThriftParser(ParserOptions(auto_number_enums=True))
    doc = parser.parse("enum E { A, B = 5, C }")

    values = doc.definitions[0].values
    assert [(v.name, v.value, v.auto_numbered) for v in values] == [
        ("A", 0, True), ("B", 5, False), ("C", 6, True),
    ]


def test_document_helpers(parser):
    doc = parser.parse("struct A { 1: i32 x }\nenum B { Y }")

    assert doc.find("B").name == "B"
    assert doc.find("missing") is None
    assert doc.definitions_of(StructNode) == [doc.definitions[0]]
    with pytest.raises(KeyError, match="Struct not found"):
        doc.struct_fields("B")


def test_module_level_shortcuts():
    assert recognize("struct A {}") is True
    assert recognize("struct A {") is False
    assert parse("struct A {}").definitions == [StructNode("A")]


def test_tutorial_example_recognized(parser):
    text = (EXAMPLES_PATH / "tutorial.thrift").read_text()

    assert parser.recognize(text)
    doc = parser.parse(text)
    service = doc.find("Calculator")
    assert service.extends == IdentifierNode("shared.SharedService")
    assert [f.name for f in service.functions] == ["ping", "add", "calculate", "zip"]
    assert service.functions[-1].oneway is True
