import logging
from typing import Optional, Union

from hrpa.domains.ports import DeviceChannel
from hrpa.settings import InputSettings
from shared.errors import InputValidationError
from shared.utils.geometry import clamp, coerce_coord, coerce_float

LOGGER = logging.getLogger("hrpa.act")

KEYCODE_MAP = {
    "HOME": 1,
    "BACK": 2,
    "VOLUME_UP": 16,
    "VOLUME_DOWN": 17,
    "POWER": 18,
    "ENTER": 2054,
    "DEL": 2055,
    "MENU": 2067,
    "ESCAPE": 2070,
}


def normalize_keycode(value: Union[int, str, None]) -> int:
    if value is None or isinstance(value, bool):
        raise InputValidationError("key event missing keycode")
    if isinstance(value, int):
        code = value
    else:
        name = str(value).strip()
        if not name:
            raise InputValidationError("key event missing keycode")
        key = name.upper().replace("KEYCODE_", "")
        if key in KEYCODE_MAP:
            return KEYCODE_MAP[key]
        try:
            code = int(name)
        except ValueError as exc:
            raise InputValidationError("unknown keycode: {}".format(value)) from exc
    if code < 0:
        raise InputValidationError("keycode must not be negative: {}".format(value))
    return code


def swipe_velocity(duration_ms, settings: Optional[InputSettings] = None) -> int:
    settings = settings or InputSettings()
    duration = coerce_float(duration_ms, "duration_ms")
    if duration <= 0:
        raise InputValidationError("duration_ms must be positive: {}".format(duration_ms))
    velocity = int(round(settings.velocity_ceiling - settings.velocity_slope * duration))
    return clamp(velocity, settings.velocity_min, settings.velocity_max)


class ActionExecutor:
    def __init__(self, channel: DeviceChannel, settings: Optional[InputSettings] = None):
        self.channel = channel
        self.settings = settings or InputSettings()

    def _coord(self, value, label) -> int:
        return coerce_coord(value, label, self.settings.max_coordinate)

    def tap(self, x, y) -> str:
        x = self._coord(x, "x")
        y = self._coord(y, "y")
        LOGGER.debug("tap x=%s y=%s", x, y)
        return self.channel.send_input("click", [x, y])

    def swipe(self, x1, y1, x2, y2, duration_ms=300) -> str:
        x1 = self._coord(x1, "x1")
        y1 = self._coord(y1, "y1")
        x2 = self._coord(x2, "x2")
        y2 = self._coord(y2, "y2")
        velocity = swipe_velocity(duration_ms, self.settings)
        LOGGER.debug(
            "swipe x1=%s y1=%s x2=%s y2=%s velocity=%s", x1, y1, x2, y2, velocity
        )
        return self.channel.send_input("swipe", [x1, y1, x2, y2, velocity])

    def press_key(self, code) -> str:
        keycode = normalize_keycode(code)
        LOGGER.debug("key event code=%s", keycode)
        return self.channel.send_input("keyEvent", [keycode])
