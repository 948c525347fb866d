"""Tests for element declarations and the scope validator."""

import pytest

from page_compiler.compiler import PageObjectCompiler
from page_compiler.elements import (
    BasicElement,
    ContainerElement,
    CustomElement,
    RootElement,
    validate_pair,
)
from page_compiler.errors import (
    ComponentElementDuplicateSelector,
    DuplicateArgumentName,
    DuplicateElementName,
    DuplicateWithRootSelector,
    MalformedDeclaration,
    SameSelectorDifferentTypes,
    TypeMismatch,
    UnknownType,
)
from page_compiler.selectors import LocatorKind, Selector
from page_compiler.types import ACTIONABLE, BASIC_ELEMENT, CONTAINER, CustomTypeDefinition

IDENTIFIER = "utam-test/pageObjects/test/testObject"


def compile_tree(tree):
    return PageObjectCompiler().compile(IDENTIFIER, tree)


def css(template, returns_all=False):
    return Selector(kind=LocatorKind.CSS, template=template, returns_all=returns_all)


COMPONENT = CustomTypeDefinition(name="Component", package="utam.pageobjects")
OTHER_COMPONENT = CustomTypeDefinition(name="Other", package="utam.pageobjects")


class TestValidatePair:
    def test_different_selectors(self):
        validate_pair(BasicElement("a", ACTIONABLE, css(".a")), BasicElement("b", ACTIONABLE, css(".b")))

    def test_two_basic_elements_may_share(self):
        validate_pair(BasicElement("a", ACTIONABLE, css(".a")), BasicElement("b", ACTIONABLE, css(".a")))

    def test_same_components(self):
        validate_pair(CustomElement("a", COMPONENT, css(".a")), CustomElement("b", COMPONENT, css(".a")))

    def test_components_of_different_types(self):
        with pytest.raises(SameSelectorDifferentTypes):
            validate_pair(
                CustomElement("a", COMPONENT, css(".a")), CustomElement("b", OTHER_COMPONENT, css(".a"))
            )

    def test_component_and_basic(self):
        with pytest.raises(ComponentElementDuplicateSelector):
            validate_pair(CustomElement("a", COMPONENT, css(".a")), BasicElement("b", ACTIONABLE, css(".a")))

    def test_component_and_basic_list(self):
        with pytest.raises(ComponentElementDuplicateSelector):
            validate_pair(
                CustomElement("a", COMPONENT, css(".a")),
                BasicElement("b", ACTIONABLE, css(".a", returns_all=True)),
            )

    def test_container_never_conflicts(self):
        validate_pair(ContainerElement("a"), CustomElement("b", COMPONENT, css(":scope > *:first-child")))

    def test_root(self):
        with pytest.raises(DuplicateWithRootSelector):
            validate_pair(BasicElement("a", ACTIONABLE, css("root")), RootElement(selector=css("root")))

    def test_container_sharing_root_selector(self):
        with pytest.raises(DuplicateWithRootSelector):
            validate_pair(ContainerElement("a", selector=css("root")), RootElement(selector=css("root")))
        with pytest.raises(DuplicateWithRootSelector):
            validate_pair(RootElement(selector=css("root")), ContainerElement("a", selector=css("root")))

    def test_root_without_selector(self):
        with pytest.raises(RuntimeError):
            validate_pair(BasicElement("a", ACTIONABLE, css(".a")), RootElement())


class TestElementProperties:
    def test_getter_names(self):
        assert BasicElement("item", ACTIONABLE, css(".a"), is_public=True).getter_name == "getItem"
        assert BasicElement("item", ACTIONABLE, css(".a")).getter_name == "getItemElement"
        assert RootElement(is_public=True).getter_name == "getRoot"
        assert RootElement().getter_name == "getRootElement"

    def test_reference_types(self):
        assert BasicElement("a", ACTIONABLE, css(".a")).reference_type == BASIC_ELEMENT
        assert BasicElement("a", ACTIONABLE, css(".a", True)).reference_type.name == "element[]"
        assert CustomElement("a", COMPONENT, css(".a")).reference_type == COMPONENT
        assert ContainerElement("a").reference_type == CONTAINER


class TestDeclaredElements:
    def test_basic_element_types(self):
        declaration = compile_tree({
            "elements": [
                {"name": "plain", "selector": {"css": ".plain"}},
                {"name": "button", "type": "clickable", "selector": {"css": ".button"}},
                {"name": "input", "type": ["editable", "clickable"], "selector": {"css": "input"}},
            ]
        })
        getters = {m.name: m.declaration.return_type.name for m in declaration.implementation.methods}
        assert getters == {
            "getPlainElement": "actionable",
            "getButtonElement": "clickable",
            "getInputElement": "clickable+editable",
        }

    def test_unknown_capability(self):
        with pytest.raises(UnknownType, match="unknown type 'shiny'"):
            compile_tree({"elements": [{"name": "a", "type": "shiny", "selector": {"css": ".a"}}]})

    def test_duplicate_name(self):
        with pytest.raises(DuplicateElementName):
            compile_tree({
                "elements": [
                    {"name": "a", "selector": {"css": ".a"}},
                    {"name": "a", "selector": {"css": ".b"}},
                ]
            })

    def test_duplicate_name_across_scopes(self):
        with pytest.raises(DuplicateElementName):
            compile_tree({
                "elements": [
                    {
                        "name": "outer",
                        "selector": {"css": ".outer"},
                        "elements": [{"name": "outer", "selector": {"css": ".inner"}}],
                    }
                ]
            })

    def test_root_is_reserved(self):
        with pytest.raises(DuplicateElementName):
            compile_tree({"elements": [{"name": "root", "selector": {"css": ".a"}}]})

    def test_same_selector_as_root(self):
        with pytest.raises(DuplicateWithRootSelector):
            compile_tree({
                "root": True,
                "selector": {"css": "my-root"},
                "elements": [{"name": "a", "selector": {"css": "my-root"}}],
            })

    def test_same_selector_in_different_scopes(self):
        compile_tree({
            "elements": [
                {"name": "a", "type": "utam/pageObjects/one", "selector": {"css": ".x"}},
                {
                    "name": "scope",
                    "selector": {"css": ".scope"},
                    "elements": [{"name": "b", "selector": {"css": ".x"}}],
                },
            ]
        })

    def test_component_and_basic_in_one_scope(self):
        with pytest.raises(ComponentElementDuplicateSelector):
            compile_tree({
                "elements": [
                    {"name": "a", "type": "utam/pageObjects/one", "selector": {"css": ".x"}},
                    {"name": "b", "selector": {"css": ".x"}},
                ]
            })

    def test_missing_selector(self):
        with pytest.raises(MalformedDeclaration, match="must declare a selector"):
            compile_tree({"elements": [{"name": "a"}]})

    def test_container_default_selector(self):
        declaration = compile_tree({"elements": [{"name": "slot", "type": "container", "public": True}]})
        getter = declaration.method("getSlot")
        assert getter.body.selector.template == ":scope > *:first-child"
        assert getter.declaration.return_type == CONTAINER

    def test_component_cannot_nest(self):
        with pytest.raises(MalformedDeclaration, match="only basic elements"):
            compile_tree({
                "elements": [
                    {
                        "name": "a",
                        "type": "utam/pageObjects/one",
                        "selector": {"css": ".a"},
                        "elements": [{"name": "b", "selector": {"css": ".b"}}],
                    }
                ]
            })


class TestScopeParameters:
    def test_nested_parameters_accumulate(self):
        declaration = compile_tree({
            "elements": [
                {
                    "name": "row",
                    "selector": {"css": "tr:nth-child(%d)", "args": [{"name": "rowIndex", "type": "number"}]},
                    "elements": [
                        {
                            "name": "cell",
                            "public": True,
                            "selector": {"css": "td:nth-child(%d)", "args": [{"name": "cellIndex", "type": "number"}]},
                        }
                    ],
                }
            ]
        })
        getter = declaration.method("getCell")
        assert [p.name for p in getter.declaration.parameters] == ["rowIndex", "cellIndex"]
        assert getter.body.scope == "row"

    def test_nested_parameter_name_clash(self):
        with pytest.raises(DuplicateArgumentName):
            compile_tree({
                "elements": [
                    {
                        "name": "row",
                        "selector": {"css": "tr:nth-child(%d)", "args": [{"name": "index", "type": "number"}]},
                        "elements": [
                            {
                                "name": "cell",
                                "selector": {"css": "td:nth-child(%d)", "args": [{"name": "index", "type": "number"}]},
                            }
                        ],
                    }
                ]
            })

    def test_shadow_elements_share_scope(self):
        declaration = compile_tree({
            "shadow": {"elements": [{"name": "inner", "public": True, "selector": {"css": ".inner"}}]}
        })
        assert declaration.method("getInner").body.scope == "root"


class TestFilters:
    def test_boolean_action_filter(self):
        declaration = compile_tree({
            "elements": [
                {
                    "name": "items",
                    "public": True,
                    "selector": {"css": ".item", "returnAll": True},
                    "filter": {"apply": "isVisible", "findFirst": True},
                }
            ]
        })
        getter = declaration.method("getItems")
        assert getter.body.filter.find_first
        assert not getter.body.is_list
        assert getter.declaration.return_type == ACTIONABLE

    def test_matcher_filter_adds_parameters(self):
        declaration = compile_tree({
            "elements": [
                {
                    "name": "items",
                    "public": True,
                    "selector": {"css": ".item", "returnAll": True},
                    "filter": {
                        "apply": "getText",
                        "matcher": {"type": "stringContains", "args": [{"name": "text", "type": "string"}]},
                    },
                }
            ]
        })
        getter = declaration.method("getItems")
        assert [p.name for p in getter.declaration.parameters] == ["text"]
        assert getter.declaration.return_type.name == "actionable[]"

    def test_non_boolean_without_matcher(self):
        with pytest.raises(TypeMismatch):
            compile_tree({
                "elements": [
                    {
                        "name": "items",
                        "selector": {"css": ".item", "returnAll": True},
                        "filter": {"apply": "getText"},
                    }
                ]
            })

    def test_filter_needs_return_all(self):
        with pytest.raises(MalformedDeclaration, match="returning all"):
            compile_tree({
                "elements": [
                    {"name": "item", "selector": {"css": ".item"}, "filter": {"apply": "isVisible"}}
                ]
            })

    def test_component_filter(self):
        declaration = compile_tree({
            "elements": [
                {
                    "name": "cards",
                    "type": "utam/pageObjects/card",
                    "public": True,
                    "selector": {"css": ".card", "returnAll": True},
                    "filter": {"apply": "isSelected", "matcher": {"type": "isTrue"}, "findFirst": True},
                }
            ]
        })
        getter = declaration.method("getCards")
        assert getter.body.filter.action is None
        assert getter.declaration.return_type.name == "Card"
