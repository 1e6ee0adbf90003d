"""
Base class for settings value objects.

Every effect is configured by an immutable pydantic model. Field names are
snake_case in Python and serialize with camelCase aliases matching the
editor's JSON, e.g. ``highlight_mode`` <-> ``highlightMode``.

Validation failures surface as ``InvalidParameterError`` instead of pydantic's
``ValidationError`` so callers only deal with the engine's error taxonomy.

Slider-like fields use the annotated types below, which clamp instead of
rejecting:

| Type | Range |
|------|-------|
| Percent | 0 - 100 |
| SignedPercent | -100 - 100 |
| UnitFraction | 0.0 - 1.0 |
| HexColor | normalized to lowercase ``#rrggbb`` |
"""

from typing import Annotated, Any, Dict

from pydantic import BaseModel, BeforeValidator, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from .color_math import parse_color, rgb_to_hex
from .errors import InvalidParameterError


class SettingsModel(BaseModel):
    """Immutable, fully enumerable settings record."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra='ignore',
        arbitrary_types_allowed=True,
    )

    def __init__(self, **data: Any):
        try:
            super().__init__(**data)
        except ValidationError as exc:
            raise InvalidParameterError(
                f"Invalid {self.__class__.__name__} settings: {exc}"
            ) from exc

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SettingsModel":
        """Build settings from a dict using camelCase or snake_case keys."""
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise InvalidParameterError(
                f"Invalid {cls.__name__} settings: {exc}"
            ) from exc

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-compatible dict with camelCase keys."""
        return self.model_dump(by_alias=True, mode='json')


def clamp(value: float, low: float, high: float) -> float:
    """Clamp a slider value into ``[low, high]``."""
    return max(low, min(high, float(value)))


def _clamper(low: float, high: float):
    def clamp_value(value: Any) -> Any:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return value
        return clamp(value, low, high)
    return clamp_value


def normalize_hex_color(value: Any) -> str:
    """Accept ``#RRGGBB``/``RRGGBB`` or an RGB sequence, return ``#rrggbb``."""
    return rgb_to_hex(*parse_color(value))


Percent = Annotated[float, BeforeValidator(_clamper(0.0, 100.0))]
SignedPercent = Annotated[float, BeforeValidator(_clamper(-100.0, 100.0))]
UnitFraction = Annotated[float, BeforeValidator(_clamper(0.0, 1.0))]
HexColor = Annotated[str, BeforeValidator(normalize_hex_color)]


__all__ = [
    "SettingsModel",
    "clamp",
    "normalize_hex_color",
    "Percent",
    "SignedPercent",
    "UnitFraction",
    "HexColor",
]
