# Request payload checks for the JSON routes

import math

from focusroom.errors import ValidationError


def get_json_payload(request):
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('JSON object expected')
    return data


def require_string(data, key, allow_empty=False, max_length=None):
    value = data.get(key)
    if not isinstance(value, str):
        raise ValidationError(f"'{key}' must be a string")
    if not allow_empty and not value.strip():
        raise ValidationError(f"'{key}' must not be empty")
    if max_length is not None and len(value) > max_length:
        raise ValidationError(f"'{key}' must be at most {max_length} characters")
    return value


def optional_string(data, key, max_length=None):
    if data.get(key) is None:
        return None
    return require_string(data, key, allow_empty=True, max_length=max_length)


def require_number(data, key):
    value = data.get(key)
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"'{key}' must be a number")
    if not math.isfinite(value):
        raise ValidationError(f"'{key}' must be finite")
    return value


def require_int(data, key, minimum=None):
    value = data.get(key)
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"'{key}' must be an integer")
    if minimum is not None and value < minimum:
        raise ValidationError(f"'{key}' must be >= {minimum}")
    return value


def optional_int(data, key, minimum=None):
    if data.get(key) is None:
        return None
    return require_int(data, key, minimum=minimum)


def require_choice(data, key, choices):
    value = data.get(key)
    if value not in choices:
        raise ValidationError(f"'{key}' must be one of: {', '.join(choices)}")
    return value


def optional_choice(data, key, choices):
    if data.get(key) is None:
        return None
    return require_choice(data, key, choices)
