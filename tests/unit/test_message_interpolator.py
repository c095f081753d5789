"""Tests for {{placeholder}} interpolation and payload helpers."""

from poam_automation.application.services.message_interpolator import interpolate
from poam_automation.shared.utils.payload import MISSING, resolve_path, stringify


def test_replaces_resolved_placeholder() -> None:
    assert interpolate("Item {{name}} due", {"name": "X"}) == "Item X due"


def test_unresolved_placeholder_is_left_verbatim() -> None:
    assert interpolate("Hi {{user.name}}", {}) == "Hi {{user.name}}"


def test_nested_paths_and_scalar_forms() -> None:
    payload = {"item": {"days": 3.0, "open": True, "owner": None}}
    assert (
        interpolate("{{item.days}} days, open={{item.open}}, owner={{item.owner}}", payload)
        == "3 days, open=true, owner=null"
    )


def test_template_without_placeholders_is_unchanged() -> None:
    assert interpolate("No placeholders {here}", {"here": 1}) == "No placeholders {here}"


def test_resolve_path_never_raises() -> None:
    assert resolve_path({"a": "text"}, "a.b") is MISSING
    assert resolve_path({"a": [1, 2]}, "a.5") is MISSING
    assert resolve_path({"a": [1, 2]}, "a.x") is MISSING
    assert resolve_path({}, "") is MISSING
    assert resolve_path({"a": {"b": 0}}, "a.b") == 0


def test_stringify_lists_and_floats() -> None:
    assert stringify(["a", 1, 2.5, None]) == "a,1,2.5,"
    assert stringify(2.0) == "2"
    assert stringify(False) == "false"
