"""Tests for argument resolution."""

import pytest

from page_compiler.arguments import (
    ArgumentResolver,
    Literal,
    Regular,
    accepts,
    check_unique_names,
    render_value,
)
from page_compiler.errors import (
    ArgumentCountMismatch,
    DuplicateArgumentName,
    MalformedDeclaration,
    TypeMismatch,
    UnknownType,
)
from page_compiler.grammar import (
    ElementReferenceSpec,
    NamedArgument,
    PredicateArgument,
    SelectorSpec,
    ValueArgument,
)
from page_compiler.types import (
    ACTIONABLE,
    BASIC_ELEMENT,
    BOOLEAN,
    FUNCTION,
    NUMBER,
    SELECTOR,
    STRING,
    TypeRegistry,
)


@pytest.fixture
def resolver():
    return ArgumentResolver(TypeRegistry(), "method 'test'")


class TestRenderValue:
    def test_boolean(self):
        assert render_value(True) == ("true", BOOLEAN)
        assert render_value(False) == ("false", BOOLEAN)

    def test_number(self):
        assert render_value(3) == ("3", NUMBER)
        assert render_value(1.5) == ("1.5", NUMBER)

    def test_string_is_quoted(self):
        assert render_value('say "hi"') == ('"say \\"hi\\""', STRING)

    def test_unsupported(self):
        with pytest.raises(MalformedDeclaration):
            render_value(None)


class TestAccepts:
    def test_same_type(self):
        assert accepts(STRING, STRING)

    def test_generic_element_accepts_basic(self):
        assert accepts(BASIC_ELEMENT, ACTIONABLE)

    def test_primitives_do_not_convert(self):
        assert not accepts(NUMBER, STRING)


class TestResolve:
    def test_named_and_value(self, resolver):
        parameters = resolver.resolve([NamedArgument("text", "string"), ValueArgument(5)])
        assert parameters == [Regular("text", STRING), Literal("5", NUMBER)]

    def test_expected_types(self, resolver):
        parameters = resolver.resolve([NamedArgument("attrName", "string")], [STRING])
        assert parameters == [Regular("attrName", STRING)]

    def test_type_mismatch(self, resolver):
        with pytest.raises(TypeMismatch, match="expected type is 'number', actual was 'string'"):
            resolver.resolve([NamedArgument("attrName", "string")], [NUMBER])

    def test_count_mismatch(self, resolver):
        with pytest.raises(ArgumentCountMismatch, match="expected 1 parameters, provided 2"):
            resolver.resolve([ValueArgument(1), ValueArgument(2)], [NUMBER])

    def test_duplicate_names(self, resolver):
        with pytest.raises(DuplicateArgumentName, match="'x'"):
            resolver.resolve([NamedArgument("x", "string"), NamedArgument("x", "number")])

    def test_unknown_argument_type(self, resolver):
        with pytest.raises(UnknownType, match="unknown type 'int'"):
            resolver.resolve([NamedArgument("x", "int")])

    def test_element_argument(self, resolver):
        parameters = resolver.resolve([NamedArgument("target", "element")], [BASIC_ELEMENT])
        assert parameters == [Regular("target", BASIC_ELEMENT)]

    def test_locator_argument(self, resolver):
        assert resolver.resolve([NamedArgument("loc", "locator")]) == [Regular("loc", SELECTOR)]

    def test_predicate_produces_no_parameter(self, resolver):
        predicate = PredicateArgument(statements=())
        assert resolver.resolve([predicate], [FUNCTION]) == []
        assert resolver.argument_types([predicate]) == [FUNCTION]

    def test_predicate_where_value_expected(self, resolver):
        with pytest.raises(TypeMismatch):
            resolver.resolve([PredicateArgument(statements=())], [STRING])

    def test_typed_value(self, resolver):
        assert resolver.resolve([ValueArgument("a", "string")]) == [Literal('"a"', STRING)]

    def test_typed_value_mismatch(self, resolver):
        with pytest.raises(TypeMismatch):
            resolver.resolve([ValueArgument("a", "number")])

    def test_resolve_is_repeatable(self, resolver):
        descriptors = [NamedArgument("a", "string"), ValueArgument(True)]
        assert resolver.resolve(descriptors) == resolver.resolve(descriptors)


class TestLiteralSelectors:
    def test_selector_value(self, resolver):
        parameters = resolver.resolve([ValueArgument(SelectorSpec(kind="css", template=".x"))], [SELECTOR])
        assert parameters == [Literal('css(".x")', SELECTOR)]

    def test_selector_value_with_args(self, resolver):
        spec = SelectorSpec(kind="css", template="li:nth-child(%d)", args=(ValueArgument(2),))
        [parameter] = resolver.resolve([ValueArgument(spec)])
        assert parameter.value == 'css("li:nth-child(%d)", 2)'

    def test_selector_value_with_named_args(self, resolver):
        spec = SelectorSpec(kind="css", template="li:nth-child(%d)", args=(NamedArgument("i", "number"),))
        with pytest.raises(MalformedDeclaration, match="must be literal values"):
            resolver.resolve([ValueArgument(spec)])

    def test_element_reference_needs_context(self, resolver):
        with pytest.raises(MalformedDeclaration, match="not allowed here"):
            resolver.resolve([ValueArgument(ElementReferenceSpec(element="target"))])


class TestResolveSelector:
    def test_placeholders_typed(self, resolver):
        spec = SelectorSpec(
            kind="css",
            template="a[title='%s'] > li:nth-child(%d)",
            args=(NamedArgument("title", "string"), NamedArgument("index", "number")),
        )
        selector = resolver.resolve_selector(spec)
        assert selector.parameters == (Regular("title", STRING), Regular("index", NUMBER))

    def test_placeholder_type_mismatch(self, resolver):
        spec = SelectorSpec(kind="css", template="li:nth-child(%d)", args=(ValueArgument("x"),))
        with pytest.raises(TypeMismatch):
            resolver.resolve_selector(spec)

    def test_missing_argument(self, resolver):
        spec = SelectorSpec(kind="css", template="li:nth-child(%d)")
        with pytest.raises(ArgumentCountMismatch):
            resolver.resolve_selector(spec)

    def test_uiautomator_prefix(self, resolver):
        selector = resolver.resolve_selector(SelectorSpec(kind="uiautomator", template="checked(true)"))
        assert selector.template == "new UiSelector().checked(true)"


class TestCheckUniqueNames:
    def test_literals_ignored(self):
        check_unique_names([Literal("1", NUMBER), Literal("1", NUMBER)])

    def test_duplicate(self):
        with pytest.raises(DuplicateArgumentName):
            check_unique_names([Regular("a", STRING), Regular("a", STRING)])
