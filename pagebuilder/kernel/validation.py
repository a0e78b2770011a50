"""
Page Builder Kernel -- Event Validation

Validates event payloads before they reach the reducer.
Validation is structural (well-formed?) not semantic (will it apply?).
The reducer handles semantic checks (is the field registered? is the color
a real hex color? is the URL allowed?).
"""

from __future__ import annotations

from typing import Any

from pagebuilder.kernel.types import EVENT_TYPES, is_number, is_valid_id

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def validate_event(type: str, payload: dict[str, Any]) -> list[str]:
    """
    Validate an event's type and payload structure.
    Returns a list of error strings. Empty list = valid.
    """
    errors: list[str] = []

    if type not in EVENT_TYPES:
        errors.append(f"Unknown event type: {type}")
        return errors

    if not isinstance(payload, dict):
        errors.append("Payload must be a non-null object")
        return errors

    validator = _VALIDATORS.get(type)
    if validator:
        errors.extend(validator(type, payload))

    return errors


# ---------------------------------------------------------------------------
# Shared checks
# ---------------------------------------------------------------------------


def _require_field(type: str, p: dict) -> list[str]:
    if "field" not in p:
        return [f"{type} requires 'field'"]
    if not isinstance(p["field"], str) or not is_valid_id(p["field"]):
        return [f"Invalid field ID: {p['field']}"]
    return []


def _require_string(type: str, p: dict, key: str) -> list[str]:
    if key not in p:
        return [f"{type} requires '{key}'"]
    if not isinstance(p[key], str):
        return [f"{type} '{key}' must be a string"]
    return []


def _optional_number(type: str, p: dict, key: str) -> list[str]:
    if key in p and p[key] is not None and not is_number(p[key]):
        return [f"{type} '{key}' must be a number"]
    return []


def _optional_string(type: str, p: dict, key: str) -> list[str]:
    if key in p and p[key] is not None and not isinstance(p[key], str):
        return [f"{type} '{key}' must be a string"]
    return []


# ---------------------------------------------------------------------------
# Per-event validators
# ---------------------------------------------------------------------------


def _validate_field_value(type: str, p: dict) -> list[str]:
    return _require_field(type, p) + _require_string(type, p, "value")


def _validate_image_upload(type: str, p: dict) -> list[str]:
    return _require_field(type, p) + _require_string(type, p, "data_uri")


def _validate_image_link(type: str, p: dict) -> list[str]:
    return _require_field(type, p) + _require_string(type, p, "url")


def _validate_style_set(type: str, p: dict) -> list[str]:
    errors = _require_field(type, p)
    errors += _optional_string(type, p, "color")
    errors += _optional_string(type, p, "font")
    errors += _optional_number(type, p, "size")
    return errors


def _validate_position_set(type: str, p: dict) -> list[str]:
    errors = _require_field(type, p)
    if "offset" not in p:
        errors.append(f"{type} requires 'offset'")
    else:
        errors += _optional_number(type, p, "offset")
    return errors


def _validate_toggle(type: str, p: dict) -> list[str]:
    errors = _require_string(type, p, "toggle")
    if type == "visibility.set":
        if "visible" not in p:
            errors.append("visibility.set requires 'visible'")
        elif not isinstance(p["visible"], bool):
            errors.append("visibility.set 'visible' must be a boolean")
    return errors


def _validate_arc_set(type: str, p: dict) -> list[str]:
    return _optional_number(type, p, "depth") + _optional_number(type, p, "font_size")


def _validate_background_set(type: str, p: dict) -> list[str]:
    return _optional_string(type, p, "color") + _optional_number(type, p, "opacity")


def _validate_background_image_set(type: str, p: dict) -> list[str]:
    return _require_string(type, p, "data_uri")


def _validate_border_style(type: str, p: dict) -> list[str]:
    return _require_string(type, p, "style")


def _validate_border_color(type: str, p: dict) -> list[str]:
    return _require_string(type, p, "color")


def _validate_viewport_resize(type: str, p: dict) -> list[str]:
    if "width" not in p:
        return [f"{type} requires 'width'"]
    return _optional_number(type, p, "width")


_VALIDATORS: dict[str, Any] = {
    "field.input": _validate_field_value,
    "image.upload": _validate_image_upload,
    "image.link": _validate_image_link,
    "style.set": _validate_style_set,
    "position.set": _validate_position_set,
    "visibility.toggle": _validate_toggle,
    "visibility.set": _validate_toggle,
    "arc.set": _validate_arc_set,
    "background.set": _validate_background_set,
    "background.image_set": _validate_background_image_set,
    "border.style": _validate_border_style,
    "border.color": _validate_border_color,
    "viewport.resize": _validate_viewport_resize,
}
