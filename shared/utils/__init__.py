from shared.utils.geometry import clamp, coerce_coord, coerce_float

__all__ = [
    "clamp",
    "coerce_coord",
    "coerce_float",
]
