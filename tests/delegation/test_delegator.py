#!/usr/bin/env python3
"""Tests for delegators."""

import argparse
from types import SimpleNamespace

import pytest

from silhouette.core.errors import AttributeNotFoundError
from silhouette.delegation.delegator import (
    FetchableObject,
    HashObject,
    PlainObject,
    StructObject,
    delegator_for,
)


class User:
    def __init__(self, name):
        self.name = name

    def greeting(self):
        return f"Hello {self.name}"

    @property
    def initials(self):
        return self.name[0]


class Record:
    def __init__(self, **fields):
        self._fields = fields

    def fetch(self, name):
        return self._fields[name]


class TestDelegatorFor:
    """Tests for variant selection."""

    def test_mapping(self):
        """Test mappings use the hash delegator."""
        assert isinstance(delegator_for({"a": 1}), HashObject)

    def test_namespaces(self):
        """Test namespaces use the struct delegator."""
        assert isinstance(delegator_for(SimpleNamespace(a=1)), StructObject)
        assert isinstance(delegator_for(argparse.Namespace(a=1)), StructObject)

    def test_fetchable(self):
        """Test objects with fetch() use the fetchable delegator."""
        assert isinstance(delegator_for(Record(a=1)), FetchableObject)

    def test_plain(self):
        """Test other objects use the plain delegator."""
        assert isinstance(delegator_for(User("Ada")), PlainObject)


class TestHashObject:
    """Tests for mapping delegation."""

    def test_reads_keys(self):
        """Test values are read by key."""
        assert HashObject({"name": "Ada"}).delegate("name") == "Ada"

    def test_missing_key_is_none(self):
        """Test missing keys read as None."""
        assert HashObject({}).delegate("name") is None


class TestStructObject:
    """Tests for namespace delegation."""

    def test_reads_attributes(self):
        """Test values are read by attribute."""
        assert StructObject(SimpleNamespace(name="Ada")).delegate("name") == "Ada"

    def test_missing_attribute_is_none(self):
        """Test missing attributes read as None."""
        assert StructObject(SimpleNamespace()).delegate("name") is None


class TestFetchableObject:
    """Tests for fetch() delegation."""

    def test_reads_through_fetch(self):
        """Test values are read with fetch()."""
        assert FetchableObject(Record(name="Ada")).delegate("name") == "Ada"

    def test_missing_raises(self):
        """Test a KeyError from fetch() becomes AttributeNotFoundError."""
        with pytest.raises(AttributeNotFoundError):
            FetchableObject(Record()).delegate("name")


class TestPlainObject:
    """Tests for attribute delegation."""

    def test_attribute(self):
        """Test plain attributes."""
        assert PlainObject(User("Ada")).delegate("name") == "Ada"

    def test_method_is_called(self):
        """Test bound methods are called."""
        assert PlainObject(User("Ada")).delegate("greeting") == "Hello Ada"

    def test_property(self):
        """Test properties are read."""
        assert PlainObject(User("Ada")).delegate("initials") == "A"

    def test_missing_attribute_raises(self):
        """Test missing attributes raise."""
        delegator = PlainObject(User("Ada"))
        assert not delegator.delegatable("email")
        with pytest.raises(AttributeNotFoundError) as exc_info:
            delegator.delegate("email")
        assert exc_info.value.attribute == "email"

    def test_object_builtins_not_delegatable(self):
        """Test names every object has are never exposed."""
        delegator = PlainObject(User("Ada"))
        assert not delegator.delegatable("__class__")
        assert not delegator.delegatable("__init__")
