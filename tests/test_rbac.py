"""Tests for role based access control."""

import pytest

from dependencies.rbac import normalize_path, translate_method_to_action, has_permission, is_internal_request
from conftest import INTERNAL_SECRET


@pytest.mark.parametrize("path, resource", [
    ("/users/me", "users/me"),
    ("/users/7", "users/profiles"),
    ("/products/3", "products"),
    ("/applications/filter", "applications"),
])
def test_normalize_path(path, resource):
    """Test request paths map onto resources."""
    assert normalize_path(path) == resource


def test_translate_method_to_action():
    """Test HTTP methods map onto actions."""
    assert translate_method_to_action("get") == "read"
    assert translate_method_to_action("PUT") == "write"
    assert translate_method_to_action("DELETE") == "delete"


@pytest.mark.parametrize("role, resource, permission, allowed", [
    ("Producer", "products", "write", True),
    ("Receiver", "products", "write", False),
    ("Receiver", "applications", "write", True),
    ("Receiver", "applications", "delete", True),
    ("Producer", "applications", "write", False),
    ("Producer", "applications", "read", True),
    ("Donor", "products", "read", False),
])
def test_has_permission(role, resource, permission, allowed):
    """Test the role permission table."""
    assert has_permission(role, resource, permission) is allowed


def test_is_internal_request():
    """Test the chatbot secret check."""
    assert is_internal_request(INTERNAL_SECRET)
    assert not is_internal_request("wrong")
    assert not is_internal_request(None)
