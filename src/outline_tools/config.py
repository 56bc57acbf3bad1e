"""Configuration constants and settings for outline-tools."""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, time

# Separator between the segments of a name chain, e.g. "work::project::".
CHAIN_SEPARATOR: str = "::"

# Time of day every interpreted date is normalised to.
NOON: time = time(12, 0)

# Fixed dates for the "epoch" and "end of time" expressions.
EPOCH_DATE: date = date(1970, 1, 1)
END_OF_TIME_DATE: date = date(9999, 12, 31)

# Tag used for embedded date markers in rich text.
DATE_MARKER_TAG: str = "time"

_TRUE_VALUES = {"true", "yes", "on", "1"}
_FALSE_VALUES = {"false", "no", "off", "0"}


@dataclass(frozen=True)
class Settings:
    """Options the calling layer maps from raw configuration pairs."""

    ignore_completed: bool = True
    include_embedded: bool = False
    end_of_time: date = END_OF_TIME_DATE


def _parse_bool(key: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    msg = f"Setting {key!r} expects a boolean, got {value!r}"
    raise ValueError(msg)


def settings_from_pairs(pairs: Mapping[str, str]) -> Settings:
    """Build Settings from raw key/value strings.

    Raises:
        ValueError: On unknown keys or malformed values.
    """
    kwargs: dict[str, object] = {}
    for key, value in pairs.items():
        if key == "name_tree.ignore_completed":
            kwargs["ignore_completed"] = _parse_bool(key, value)
        elif key == "name_tree.include_embedded":
            kwargs["include_embedded"] = _parse_bool(key, value)
        elif key == "dates.end_of_time":
            try:
                kwargs["end_of_time"] = date.fromisoformat(value.strip())
            except ValueError:
                msg = f"Setting {key!r} expects a YYYY-MM-DD date, got {value!r}"
                raise ValueError(msg) from None
        else:
            msg = f"Unknown setting: {key!r}"
            raise ValueError(msg)
    return Settings(**kwargs)  # type: ignore[arg-type]
