"""Tests for the default type namer."""

import pytest

from page_compiler.errors import InvalidTypeReference
from page_compiler.naming import default_type_namer, implementation_type, is_type_reference
from page_compiler.types import CustomTypeDefinition


class TestDefaultTypeNamer:
    def test_with_sub_package(self):
        type_def = default_type_namer("utam-test/pageObjects/test/testObject")
        assert type_def.name == "TestObject"
        assert type_def.package == "utam.test.pageobjects.test"
        assert type_def.full_name == "utam.test.pageobjects.test.TestObject"

    def test_without_sub_package(self):
        type_def = default_type_namer("my-app/pageObjects/loginForm")
        assert type_def.full_name == "my.app.pageobjects.LoginForm"

    def test_utility_kind(self):
        type_def = default_type_namer("utam/utils/helpers")
        assert type_def.full_name == "utam.utils.Helpers"

    def test_same_identifier_same_type(self):
        a = default_type_namer("utam/pageObjects/foo")
        b = default_type_namer("utam/pageObjects/foo")
        assert a == b

    @pytest.mark.parametrize("identifier", ["foo", "utam/foo", "utam//foo", "utam/pageObjects/"])
    def test_invalid(self, identifier):
        with pytest.raises(InvalidTypeReference):
            default_type_namer(identifier)


class TestImplementationType:
    def test_suffixes(self):
        impl = implementation_type(CustomTypeDefinition(name="Foo", package="utam.pageobjects"))
        assert impl.name == "FooImpl"
        assert impl.package == "utam.pageobjects.impl"

    def test_no_package(self):
        impl = implementation_type(CustomTypeDefinition(name="Foo"))
        assert impl.full_name == "impl.FooImpl"


class TestIsTypeReference:
    def test_reference(self):
        assert is_type_reference("utam/pageObjects/foo")

    def test_capability(self):
        assert not is_type_reference("clickable")
        assert not is_type_reference(["clickable"])
