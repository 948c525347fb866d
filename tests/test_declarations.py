"""Tests for assembled interface and implementation views."""

import pytest

from page_compiler.arguments import Regular
from page_compiler.compiler import PageObjectCompiler
from page_compiler.declarations import ElementGetterBody
from page_compiler.errors import MalformedDeclaration, RedundantMethodBody
from page_compiler.types import ACTIONABLE, STRING, TypeRegistry, list_of

IDENTIFIER = "utam-test/pageObjects/test/testObject"


def compile_tree(tree):
    return PageObjectCompiler().compile(IDENTIFIER, tree)


class TestTypes:
    def test_page_object_types(self):
        declaration = compile_tree({})
        assert declaration.type.full_name == "utam.test.pageobjects.test.TestObject"
        assert declaration.implementation.type.full_name == "utam.test.pageobjects.test.impl.TestObjectImpl"
        assert declaration.implementation.implements == declaration.type

    def test_implementation_imports_start_with_interface(self):
        declaration = compile_tree({})
        assert declaration.implementation.imports[0] == declaration.type


class TestGetters:
    def test_visibility(self):
        declaration = compile_tree({
            "elements": [
                {"name": "hidden", "selector": {"css": ".hidden"}},
                {"name": "shown", "public": True, "selector": {"css": ".shown"}},
            ]
        })
        assert [m.name for m in declaration.implementation.methods] == ["getHiddenElement", "getShown"]
        assert [m.name for m in declaration.interface.methods] == ["getShown"]
        assert declaration.method("getHiddenElement").is_public is False

    def test_getter_body(self):
        declaration = compile_tree({
            "elements": [{"name": "maybe", "nullable": True, "selector": {"css": ".maybe", "returnAll": True}}]
        })
        body = declaration.method("getMaybeElement").body
        assert isinstance(body, ElementGetterBody)
        assert body.is_nullable
        assert body.is_list
        assert body.scope == "root"
        assert body.selector.template == ".maybe"

    def test_root_getter_hidden_by_default(self):
        declaration = compile_tree({"root": True, "selector": {"css": "my-root"}})
        assert declaration.implementation.methods == ()

    def test_root_getter_exposed(self):
        declaration = compile_tree({
            "root": True,
            "selector": {"css": "my-root"},
            "type": "clickable",
            "exposeRootElement": True,
        })
        getter = declaration.method("getRoot")
        assert getter.is_public
        assert getter.declaration.return_type == TypeRegistry().resolve("clickable")
        assert [m.name for m in declaration.interface.methods] == ["getRoot"]

    def test_getters_before_methods(self):
        declaration = compile_tree({
            "methods": [{"name": "readLabel", "compose": [{"element": "label", "apply": "getText"}]}],
            "elements": [{"name": "label", "selector": {"css": ".label"}}],
        })
        assert [m.name for m in declaration.implementation.methods] == ["getLabelElement", "readLabel"]

    def test_description_becomes_comments(self):
        declaration = compile_tree({
            "elements": [
                {"name": "label", "public": True, "selector": {"css": ".label"}, "description": "The label.\n\nRead only."}
            ]
        })
        assert declaration.method("getLabel").declaration.comments == ("The label.", "Read only.")


class TestImports:
    def test_list_getter(self):
        declaration = compile_tree({
            "elements": [{"name": "items", "public": True, "selector": {"css": ".item", "returnAll": True}}]
        })
        assert declaration.interface.imports == (list_of(ACTIONABLE), ACTIONABLE)

    def test_primitives_not_imported(self):
        declaration = compile_tree({
            "elements": [{"name": "label", "selector": {"css": ".label"}}],
            "methods": [{"name": "readLabel", "compose": [{"element": "label", "apply": "getText"}]}],
        })
        assert declaration.method("readLabel").declaration.imports == ()

    def test_component_getter(self):
        declaration = compile_tree({
            "elements": [{"name": "card", "public": True, "type": "utam/pageObjects/card", "selector": {"css": ".card"}}]
        })
        names = [getattr(t, "full_name", t.name) for t in declaration.interface.imports]
        assert names == ["utam.pageobjects.Card"]

    def test_combined_capabilities_import_each(self):
        declaration = compile_tree({
            "elements": [
                {"name": "input", "public": True, "type": ["clickable", "editable"], "selector": {"css": "input"}}
            ]
        })
        assert [t.name for t in declaration.interface.imports] == ["clickable", "editable"]

    def test_compose_body_types_in_implementation(self):
        declaration = compile_tree({
            "elements": [{"name": "button", "type": "clickable", "selector": {"css": "button"}}],
            "methods": [{"name": "press", "compose": [{"element": "button", "apply": "click"}]}],
        })
        assert TypeRegistry().resolve("clickable") in declaration.method("press").class_imports


class TestInterfaces:
    def test_interface_only(self):
        declaration = compile_tree({
            "interface": True,
            "methods": [
                {"name": "getTitle", "return": "string", "args": [{"name": "locale", "type": "string"}]},
                {"name": "getButton", "return": ["clickable"]},
                {"name": "reset"},
            ],
        })
        assert declaration.is_interface
        assert declaration.implementation is None
        title, button, reset = declaration.interface.methods
        assert title.return_type == STRING
        assert title.parameters == (Regular("locale", STRING),)
        assert button.return_type.name == "clickable"
        assert reset.return_type.name == "void"

    def test_interface_method_with_body(self):
        with pytest.raises(RedundantMethodBody, match="interface method"):
            compile_tree({
                "interface": True,
                "methods": [{"name": "m", "compose": [{"element": "root", "apply": "focus"}]}],
            })

    def test_implements(self):
        declaration = compile_tree({"implements": "utam/pageObjects/base"})
        assert declaration.interface is None
        assert declaration.implements.full_name == "utam.pageobjects.Base"
        assert declaration.implementation.implements == declaration.implements
        assert declaration.implementation.imports[0] == declaration.implements

    def test_implements_must_be_reference(self):
        with pytest.raises(MalformedDeclaration, match="'implements'"):
            compile_tree({"implements": "base"})


class TestRoot:
    def test_selector_requires_root(self):
        with pytest.raises(MalformedDeclaration, match="requires 'root'"):
            compile_tree({"selector": {"css": "my-root"}})

    def test_root_requires_selector(self):
        with pytest.raises(MalformedDeclaration, match="must declare a selector"):
            compile_tree({"root": True})

    def test_root_selector_parameters(self):
        with pytest.raises(MalformedDeclaration, match="cannot have parameters"):
            compile_tree({
                "root": True,
                "selector": {"css": "my-root[title='%s']", "args": [{"name": "title", "type": "string"}]},
            })

    def test_root_type_defaults_to_actionable(self):
        declaration = compile_tree({"root": True, "selector": {"css": "my-root"}, "exposeRootElement": True})
        assert declaration.method("getRoot").declaration.return_type == ACTIONABLE
