"""
Breakpoint tiers.

Tiers are ordered widest to narrowest and cascade like desktop-first
media queries: a narrower tier inherits every value it does not override.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from nocode_contracts.errors import BreakpointError

# Viewport widths styling functions see for the standard tier ids
DEFAULT_DEVICE_WIDTHS: dict[str, int] = {"xl": 1440, "lg": 1024, "md": 768, "sm": 640, "xs": 375}

# Used for an unknown tier whose min_width is 0
MOBILE_DEVICE_WIDTH = DEFAULT_DEVICE_WIDTHS["xs"]


class Breakpoint(BaseModel):
    """
    A named viewport tier.

    ``device_width`` is the viewport width styling functions are evaluated
    at; it is not part of the published contract. When omitted it comes
    from DEFAULT_DEVICE_WIDTHS for a standard id, else from ``min_width``,
    else MOBILE_DEVICE_WIDTH. It is never 0.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    min_width: int = Field(ge=0)
    label: str = ""
    device_width: int = Field(default=MOBILE_DEVICE_WIDTH, gt=0, exclude=True)

    @model_validator(mode="before")
    @classmethod
    def _default_device_width(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        if data.get("device_width") or data.get("deviceWidth"):
            return data

        min_width = data.get("min_width", data.get("minWidth"))
        width = DEFAULT_DEVICE_WIDTHS.get(str(data.get("id")))
        if width is None:
            width = min_width if isinstance(min_width, int) and min_width > 0 else MOBILE_DEVICE_WIDTH
        return {**{k: v for k, v in data.items() if k != "deviceWidth"}, "device_width": width}


DEFAULT_BREAKPOINTS: tuple[Breakpoint, ...] = (
    Breakpoint(id="xl", min_width=1440, label="Wide", device_width=1440),
    Breakpoint(id="lg", min_width=1024, label="Desktop", device_width=1024),
    Breakpoint(id="md", min_width=768, label="Tablet", device_width=768),
    Breakpoint(id="sm", min_width=640, label="Mobile L", device_width=640),
    Breakpoint(id="xs", min_width=0, label="Mobile", device_width=375),
)


class BreakpointSet:
    """
    An ordered, validated list of breakpoint tiers.

    Example:
        bps = BreakpointSet.default()
        bps.ids            # ("xl", "lg", "md", "sm", "xs")
        bps.widest.id      # "xl"
    """

    def __init__(self, breakpoints: Iterable[Breakpoint]):
        tiers = tuple(breakpoints)
        if not tiers:
            raise BreakpointError("At least one breakpoint is required")

        seen: set[str] = set()
        for tier in tiers:
            if tier.id in seen:
                raise BreakpointError(f"Duplicate breakpoint id '{tier.id}'")
            seen.add(tier.id)

        for wider, narrower in zip(tiers, tiers[1:]):
            if narrower.min_width >= wider.min_width:
                raise BreakpointError(
                    f"Breakpoints must be ordered widest to narrowest: "
                    f"'{narrower.id}' ({narrower.min_width}) follows "
                    f"'{wider.id}' ({wider.min_width})"
                )

        self._tiers = tiers
        self._index = {tier.id: i for i, tier in enumerate(tiers)}

    @classmethod
    def default(cls) -> BreakpointSet:
        return cls(DEFAULT_BREAKPOINTS)

    @classmethod
    def from_dicts(cls, items: Iterable[Mapping[str, Any]]) -> BreakpointSet:
        """Build from plain mappings (config file or JSON), snake or camel case keys."""
        return cls(Breakpoint.model_validate(item) for item in items)

    def __iter__(self) -> Iterator[Breakpoint]:
        return iter(self._tiers)

    def __len__(self) -> int:
        return len(self._tiers)

    def __contains__(self, breakpoint_id: object) -> bool:
        return breakpoint_id in self._index

    @property
    def ids(self) -> tuple[str, ...]:
        return tuple(tier.id for tier in self._tiers)

    @property
    def widest(self) -> Breakpoint:
        return self._tiers[0]

    def get(self, breakpoint_id: str) -> Breakpoint | None:
        index = self._index.get(breakpoint_id)
        return None if index is None else self._tiers[index]

    def index_of(self, breakpoint_id: str) -> int:
        """Position of a tier, 0 being the widest. -1 when unknown."""
        return self._index.get(breakpoint_id, -1)

    def present_in(self, mapping: Mapping[str, Any]) -> list[str]:
        """Tier ids that are keys of ``mapping``, widest first."""
        return [bp for bp in self.ids if bp in mapping]


def cascade_value(values: Mapping[str, Any], breakpoint_id: str, breakpoints: BreakpointSet) -> Any:
    """
    Find the value that applies at ``breakpoint_id``.

    Uses the tier's own value if present, else the nearest wider tier that
    defines one (CSS min-width cascade). Partial maps that only define
    narrower tiers fall back to the nearest narrower one.

    Example:
        cascade_value({"xl": "4", "xs": "1"}, "md", bps)  # "4"
        cascade_value({"xl": "4", "xs": "1"}, "xs", bps)  # "1"
        cascade_value({"xs": "1"}, "xl", bps)              # "1"

    Returns:
        The applicable value, or None when the map has no known tier.
    """
    target = breakpoints.index_of(breakpoint_id)
    if target == -1:
        return None

    ids = breakpoints.ids
    for bp in reversed(ids[: target + 1]):
        if bp in values:
            return values[bp]
    for bp in ids[target + 1 :]:
        if bp in values:
            return values[bp]
    return None
