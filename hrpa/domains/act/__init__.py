from hrpa.domains.act.executor import (
    KEYCODE_MAP,
    ActionExecutor,
    normalize_keycode,
    swipe_velocity,
)

__all__ = [
    "KEYCODE_MAP",
    "ActionExecutor",
    "normalize_keycode",
    "swipe_velocity",
]
