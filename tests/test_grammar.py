"""Tests for parsing decoded page object trees into specs."""

import pytest

from page_compiler.errors import MalformedDeclaration
from page_compiler.grammar import (
    ElementReferenceSpec,
    GrammarParser,
    NamedArgument,
    PredicateArgument,
    SelectorSpec,
    ValueArgument,
    parse_page_object,
)


@pytest.fixture
def parser():
    return GrammarParser(strict=True)


class TestPageObject:
    def test_empty_document(self):
        spec = parse_page_object({})
        assert spec.elements == []
        assert spec.methods == []
        assert spec.is_interface is False
        assert spec.root_selector is None

    def test_root_properties(self):
        spec = parse_page_object({
            "root": True,
            "selector": {"css": "my-component"},
            "type": ["clickable", "editable"],
            "exposeRootElement": True,
            "implements": "utam/pageObjects/base",
            "description": ["first line", "second line"],
        })
        assert spec.is_root
        assert spec.root_selector == SelectorSpec(kind="css", template="my-component")
        assert spec.root_type == ("clickable", "editable")
        assert spec.expose_root_element
        assert spec.implements == "utam/pageObjects/base"
        assert spec.description == "first line\nsecond line"

    def test_not_an_object(self):
        with pytest.raises(MalformedDeclaration, match="expected an object"):
            parse_page_object([])

    def test_unknown_property_strict(self):
        with pytest.raises(MalformedDeclaration, match="unsupported properties \\['beforeLoad'\\]"):
            parse_page_object({"beforeLoad": []})

    def test_unknown_property_lenient(self):
        spec = parse_page_object({"beforeLoad": []}, strict=False)
        assert spec.methods == []

    def test_wrong_bool_type(self):
        with pytest.raises(MalformedDeclaration, match="expected a boolean"):
            parse_page_object({"interface": "yes"})


class TestElements:
    def test_nested_and_shadow(self, parser):
        element = parser.parse_element(
            {
                "name": "outer",
                "selector": {"css": ".outer"},
                "elements": [{"name": "inner", "selector": {"css": ".inner"}}],
                "shadow": {"elements": [{"name": "deep", "selector": {"css": ".deep"}}]},
            },
            "elements[0]",
        )
        assert [e.name for e in element.elements] == ["inner"]
        assert [e.name for e in element.shadow_elements] == ["deep"]

    def test_missing_name(self, parser):
        with pytest.raises(MalformedDeclaration, match="expected a non-empty string"):
            parser.parse_element({"selector": {"css": ".x"}}, "elements[0]")

    def test_selector_needs_exactly_one_kind(self, parser):
        with pytest.raises(MalformedDeclaration, match="exactly one of"):
            parser.parse_selector({"css": ".a", "accessid": "b"}, "selector")
        with pytest.raises(MalformedDeclaration, match="exactly one of"):
            parser.parse_selector({"returnAll": True}, "selector")

    def test_selector_args(self, parser):
        selector = parser.parse_selector(
            {"css": ".a[title='%s']", "returnAll": True, "args": [{"name": "title", "type": "string"}]},
            "selector",
        )
        assert selector.returns_all
        assert selector.args == (NamedArgument(name="title", type_token="string"),)

    def test_filter(self, parser):
        element = parser.parse_element(
            {
                "name": "items",
                "selector": {"css": ".item", "returnAll": True},
                "filter": {"apply": "getText", "matcher": {"type": "stringEquals", "args": [{"value": "x"}]}, "findFirst": True},
            },
            "elements[0]",
        )
        assert element.filter.apply == "getText"
        assert element.filter.matcher.type == "stringEquals"
        assert element.filter.find_first


class TestArguments:
    def test_value(self, parser):
        assert parser.parse_argument({"value": 5}, "m") == ValueArgument(value=5)

    def test_value_with_type(self, parser):
        assert parser.parse_argument({"value": "a", "type": "string"}, "m") == ValueArgument(
            value="a", type_token="string"
        )

    def test_named(self, parser):
        assert parser.parse_argument({"name": "x", "type": "number"}, "m") == NamedArgument(
            name="x", type_token="number"
        )

    def test_predicate(self, parser):
        arg = parser.parse_argument(
            {"type": "function", "predicate": [{"element": "a", "apply": "isVisible"}]}, "m"
        )
        assert isinstance(arg, PredicateArgument)
        assert arg.statements[0].apply == "isVisible"

    def test_predicate_with_wrong_type(self, parser):
        with pytest.raises(MalformedDeclaration, match="type 'function'"):
            parser.parse_argument({"type": "string", "predicate": []}, "m")

    def test_selector_value(self, parser):
        arg = parser.parse_argument({"value": {"css": ".x"}}, "m")
        assert arg.value == SelectorSpec(kind="css", template=".x")

    def test_element_reference_value(self, parser):
        arg = parser.parse_argument({"value": {"element": "target", "args": [{"value": 1}]}}, "m")
        assert arg.value == ElementReferenceSpec(element="target", args=(ValueArgument(value=1),))

    def test_two_shapes(self, parser):
        with pytest.raises(MalformedDeclaration, match="exactly one of"):
            parser.parse_argument({"value": 1, "name": "x"}, "m")

    def test_no_shape(self, parser):
        with pytest.raises(MalformedDeclaration, match="exactly one of"):
            parser.parse_argument({"type": "string"}, "m")

    def test_unsupported_value(self, parser):
        with pytest.raises(MalformedDeclaration, match="unsupported argument value"):
            parser.parse_argument({"value": [1, 2]}, "m")


class TestMethods:
    def test_absent_and_empty_are_distinct(self, parser):
        absent = parser.parse_method({"name": "m"}, "methods[0]")
        assert absent.compose is None
        assert absent.chain is None
        assert absent.args is None
        empty = parser.parse_method({"name": "m", "compose": [], "chain": [], "args": []}, "methods[0]")
        assert empty.compose == ()
        assert empty.chain == ()
        assert empty.args == ()

    def test_compose_statement(self, parser):
        method = parser.parse_method(
            {
                "name": "m",
                "return": "string",
                "returnAll": True,
                "compose": [
                    {
                        "element": "list",
                        "apply": "getText",
                        "predicate": [{"element": "root", "apply": "isVisible"}],
                    }
                ],
            },
            "methods[0]",
        )
        statement = method.compose[0]
        assert method.return_type == "string"
        assert method.returns_all is True
        assert statement.element == "list"
        assert statement.predicate[0].element == "root"

    def test_chain(self, parser):
        method = parser.parse_method(
            {"name": "m", "chain": [{"element": "a"}, {"element": "b", "type": "utam/pageObjects/b", "returnAll": True}]},
            "methods[0]",
        )
        assert method.chain[0].type is None
        assert method.chain[1].returns_all

    def test_external_utility(self, parser):
        method = parser.parse_method(
            {"name": "m", "externalUtility": {"type": "utam/utils/helper", "invoke": "run", "args": [{"value": True}]}},
            "methods[0]",
        )
        assert method.external_utility.invoke == "run"
        assert method.external_utility.args == (ValueArgument(value=True),)

    def test_unknown_statement_key(self, parser):
        with pytest.raises(MalformedDeclaration, match="unsupported properties"):
            parser.parse_method(
                {"name": "m", "compose": [{"element": "a", "apply": "click", "chain": True}]},
                "methods[0]",
            )
