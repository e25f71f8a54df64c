#!/usr/bin/env python3
"""Tests for the entity declaration API."""

import pytest

from silhouette.core.constants import ExposureKind
from silhouette.core.errors import (
    DeclarationError,
    InvalidMultiAttributeUsageError,
    NestingMisuseError,
    UnknownEntityError,
    UnknownOptionError,
)
from silhouette.entity.entity import Entity, resolve_entity


class TestExpose:
    """Tests for Entity.expose()."""

    def test_declares_exposures_in_order(self):
        """Test exposures are kept in declaration order."""

        class UserEntity(Entity):
            pass

        UserEntity.expose("name", "email")
        assert [e.attribute for e in UserEntity.root_exposures()] == ["name", "email"]

    def test_declare_hook_runs_once(self):
        """Test a declare classmethod runs when the class is created."""
        calls = []

        class UserEntity(Entity):
            @classmethod
            def declare(cls):
                calls.append(cls)
                cls.expose("name")

        assert calls == [UserEntity]
        assert UserEntity.find_exposure("name") is not None

    def test_declare_not_rerun_for_subclass(self):
        """Test a subclass without declare inherits the parent's exposures only."""
        calls = []

        class UserEntity(Entity):
            @classmethod
            def declare(cls):
                calls.append(cls)
                cls.expose("name")

        class AdminEntity(UserEntity):
            pass

        assert calls == [UserEntity]
        assert [e.attribute for e in AdminEntity.root_exposures()] == ["name"]

    def test_unknown_option(self):
        """Test unknown options fail at declaration time."""

        class UserEntity(Entity):
            pass

        with pytest.raises(UnknownOptionError):
            UserEntity.expose("name", colour="red")
        assert len(UserEntity.root_exposures()) == 0

    def test_multi_attribute_as(self):
        """Test as cannot be used with several attributes."""

        class UserEntity(Entity):
            pass

        with pytest.raises(InvalidMultiAttributeUsageError):
            UserEntity.expose("name", "email", as_="contact")

    def test_multi_attribute_shared_options(self):
        """Test shared options apply to every attribute."""

        class UserEntity(Entity):
            pass

        UserEntity.expose("name", "email", if_={"full": True})
        assert all(e.conditional for e in UserEntity.root_exposures())

    def test_with_alias(self):
        """Test with_ is an alias of using."""

        class FriendEntity(Entity):
            pass

        class UserEntity(Entity):
            pass

        (exposure,) = UserEntity.expose("friends", with_=FriendEntity)
        assert exposure.kind == ExposureKind.REPRESENT
        assert exposure.using_class is FriendEntity

    def test_override_replaces_previous(self):
        """Test override removes earlier declarations of the attribute."""

        class UserEntity(Entity):
            pass

        UserEntity.expose("name")
        UserEntity.expose("email")
        UserEntity.expose("name", as_="title", override=True)
        assert [(e.attribute, e.key()) for e in UserEntity.root_exposures()] == [
            ("email", "email"),
            ("name", "title"),
        ]

    def test_duplicates_kept_without_override(self):
        """Test repeated declarations are kept."""

        class UserEntity(Entity):
            pass

        UserEntity.expose("name")
        UserEntity.expose("name", as_="title")
        assert len(UserEntity.root_exposures().select_by("name")) == 2


class TestNesting:
    """Tests for nesting blocks."""

    def test_children_added_to_nesting(self):
        """Test exposures inside the block become children."""

        class UserEntity(Entity):
            pass

        with UserEntity.nesting("contact") as contact:
            UserEntity.expose("email")
            with UserEntity.nesting("phone"):
                UserEntity.expose("mobile")
        UserEntity.expose("name")

        assert [e.attribute for e in UserEntity.root_exposures()] == ["contact", "name"]
        assert contact.kind == ExposureKind.NESTING
        assert [e.attribute for e in contact.nested_exposures] == ["email", "phone"]
        assert contact.find_nested_exposure("phone").find_nested_exposure("mobile") is not None

    def test_stack_restored_after_error(self):
        """Test the nesting scope closes when the block raises."""

        class UserEntity(Entity):
            pass

        with pytest.raises(RuntimeError):
            with UserEntity.nesting("contact"):
                raise RuntimeError("boom")
        UserEntity.expose("name")
        assert [e.attribute for e in UserEntity.root_exposures()] == ["contact", "name"]

    def test_nesting_rejects_using(self):
        """Test a nesting block cannot also use an entity."""

        class UserEntity(Entity):
            pass

        with pytest.raises(DeclarationError):
            with UserEntity.nesting("contact", using="Other"):
                pass

    def test_unexpose_inside_nesting(self):
        """Test unexpose is forbidden inside a nesting block."""

        class UserEntity(Entity):
            pass

        UserEntity.expose("name")
        with pytest.raises(NestingMisuseError):
            with UserEntity.nesting("contact"):
                UserEntity.unexpose("name")
        with pytest.raises(NestingMisuseError):
            with UserEntity.nesting("contact"):
                UserEntity.unexpose_all()


class TestWithOptions:
    """Tests for with_options blocks."""

    def test_options_applied(self):
        """Test block options reach every exposure in the block."""

        class UserEntity(Entity):
            pass

        with UserEntity.with_options(safe=True):
            UserEntity.expose("name")
            UserEntity.expose("email", safe=False)
        UserEntity.expose("id")

        assert UserEntity.find_exposure("name").is_safe
        assert not UserEntity.find_exposure("email").is_safe
        assert not UserEntity.find_exposure("id").is_safe

    def test_nested_blocks_accumulate_conditions(self):
        """Test conditions of nested blocks all apply."""

        class UserEntity(Entity):
            pass

        with UserEntity.with_options(if_={"a": 1}):
            with UserEntity.with_options(if_="admin"):
                UserEntity.expose("secret")

        assert len(UserEntity.find_exposure("secret").conditions) == 2

    def test_unknown_option(self):
        """Test block options are validated."""

        class UserEntity(Entity):
            pass

        with pytest.raises(UnknownOptionError):
            with UserEntity.with_options(colour="red"):
                pass

    def test_stack_restored_after_error(self):
        """Test block options are popped when the block raises."""

        class UserEntity(Entity):
            pass

        with pytest.raises(RuntimeError):
            with UserEntity.with_options(safe=True):
                raise RuntimeError("boom")
        UserEntity.expose("name")
        assert not UserEntity.find_exposure("name").is_safe


class TestInheritance:
    """Tests for copying declarations to subclasses."""

    def test_subclass_inherits(self):
        """Test subclasses start with the parent's exposures."""

        class UserEntity(Entity):
            pass

        UserEntity.expose("name")

        class AdminEntity(UserEntity):
            pass

        AdminEntity.expose("permissions")
        assert [e.attribute for e in AdminEntity.root_exposures()] == ["name", "permissions"]
        assert [e.attribute for e in UserEntity.root_exposures()] == ["name"]

    def test_unexpose_does_not_touch_parent(self):
        """Test removing from a subclass leaves the parent intact."""

        class UserEntity(Entity):
            pass

        UserEntity.expose("name", "email")

        class PublicEntity(UserEntity):
            pass

        PublicEntity.unexpose("email")
        assert [e.attribute for e in PublicEntity.root_exposures()] == ["name"]
        assert [e.attribute for e in UserEntity.root_exposures()] == ["name", "email"]

    def test_unexpose_all(self):
        """Test every root exposure can be removed."""

        class UserEntity(Entity):
            pass

        UserEntity.expose("name", "email")

        class EmptyEntity(UserEntity):
            pass

        EmptyEntity.unexpose_all()
        assert len(EmptyEntity.root_exposures()) == 0
        assert len(UserEntity.root_exposures()) == 2

    def test_nested_children_copied(self):
        """Test nested children of a subclass are independent."""

        class UserEntity(Entity):
            pass

        with UserEntity.nesting("contact"):
            UserEntity.expose("email")

        class AdminEntity(UserEntity):
            pass

        with AdminEntity.nesting("contact"):
            AdminEntity.expose("phone")

        assert len(UserEntity.find_exposure("contact").nested_exposures) == 1

    def test_formatters_inherited(self):
        """Test subclasses inherit formatters without sharing the registry."""

        class UserEntity(Entity):
            pass

        UserEntity.format_with("upper", str.upper)

        class AdminEntity(UserEntity):
            pass

        AdminEntity.format_with("lower", str.lower)
        assert set(AdminEntity.formatters()) == {"upper", "lower"}
        assert set(UserEntity.formatters()) == {"upper"}

    def test_format_with_requires_callable(self):
        """Test formatters must be callable."""

        class UserEntity(Entity):
            pass

        with pytest.raises(DeclarationError):
            UserEntity.format_with("bad", "not callable")


class TestDocumentation:
    """Tests for exposure documentation."""

    def test_documentation_by_key(self):
        """Test documented exposures are listed under their keys."""

        class UserEntity(Entity):
            pass

        UserEntity.expose("name", documentation={"type": "String"})
        UserEntity.expose("email", as_="mail", documentation={"type": "String", "desc": "Address"})
        UserEntity.expose("id")

        assert UserEntity.documentation() == {
            "name": {"type": "String"},
            "mail": {"type": "String", "desc": "Address"},
        }

    def test_documentation_reset_on_change(self):
        """Test documentation reflects later declarations."""

        class UserEntity(Entity):
            pass

        UserEntity.expose("name", documentation={"type": "String"})
        assert "name" in UserEntity.documentation()
        UserEntity.unexpose("name")
        assert UserEntity.documentation() == {}


class TestResolveEntity:
    """Tests for resolving using references."""

    def test_class(self):
        """Test classes resolve to themselves."""

        class UserEntity(Entity):
            pass

        assert resolve_entity(UserEntity) is UserEntity

    def test_registered_name(self):
        """Test registered names resolve."""

        class ResolvableUserEntity(Entity):
            pass

        assert resolve_entity("ResolvableUserEntity") is ResolvableUserEntity
        assert resolve_entity(ResolvableUserEntity.__qualname__) is ResolvableUserEntity

    def test_dotted_path(self):
        """Test dotted import paths resolve."""
        assert resolve_entity("silhouette.entity.entity.Entity") is Entity

    def test_unknown(self):
        """Test unknown references raise."""
        with pytest.raises(UnknownEntityError):
            resolve_entity("NoSuchEntity")
        with pytest.raises(UnknownEntityError):
            resolve_entity("no.such.module.Entity")
        with pytest.raises(UnknownEntityError):
            resolve_entity(42)
