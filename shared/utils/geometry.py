import math

from shared.errors import InputValidationError


def clamp(value, low, high):
    return max(low, min(high, value))


def coerce_float(value, label):
    if isinstance(value, bool):
        raise InputValidationError("invalid {} value: {!r}".format(label, value))
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise InputValidationError("invalid {} value: {!r}".format(label, value)) from exc
    if math.isnan(number) or math.isinf(number):
        raise InputValidationError("invalid {} value: {!r}".format(label, value))
    return number


def coerce_coord(value, label, max_value):
    coord = coerce_float(value, label)
    if coord < 0:
        raise InputValidationError("{} must not be negative: {}".format(label, value))
    if coord > max_value:
        raise InputValidationError(
            "{} out of range (max {}): {}".format(label, max_value, value)
        )
    return int(round(coord))
