"""
Component definition registry.

The registry is the compiler's read-only view of the editor's component
definitions: their prop schemas, their child slots and their styling
functions. It is built once by the caller and passed to the enricher,
the style compiler and the catalog builder; nothing here is global.

Styling functions are reached only through the StyleResolver protocol
(``resolve(values, device) -> StyleResult``) so tests and callers can
substitute them freely.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from nocode_contracts.errors import RegistryError

logger = logging.getLogger(__name__)

# Schema entries of these types are child slots, not props
SLOT_SCHEMA_TYPES = frozenset({"component-collection", "component"})


# =============================================================================
# Styling capability
# =============================================================================


@dataclass(frozen=True)
class Device:
    """The breakpoint a styling function is evaluated for."""

    id: str
    width: int


@dataclass
class StyleResult:
    """
    Output of one styling evaluation.

    Attributes:
        styled: slot name -> CSS property bag
        props: extra computed component props (e.g. {"as": "h2"})
    """

    styled: dict[str, dict[str, Any]] = field(default_factory=dict)
    props: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_raw(cls, raw: Any) -> StyleResult:
        """Normalize whatever a styling function returned."""
        if raw is None:
            return cls()
        if isinstance(raw, StyleResult):
            return raw
        if not isinstance(raw, Mapping):
            raise TypeError(f"styles() must return a mapping, got {type(raw).__name__}")

        styled = {
            slot: dict(css)
            for slot, css in (raw.get("styled") or {}).items()
            if isinstance(css, Mapping)
        }
        props = dict(raw.get("props") or {})
        return cls(styled=styled, props=props)


@runtime_checkable
class StyleResolver(Protocol):
    """Computes CSS for a set of concrete prop values at one breakpoint."""

    def resolve(self, values: dict[str, Any], device: Device) -> StyleResult:
        """Return the styled slots and computed props."""
        ...


# styles(values, params, is_editing, device)
StylesFunction = Callable[[dict[str, Any], dict[str, Any], bool, Device], Any]


class StylesFunctionResolver:
    """
    Adapts a definition's ``styles(values, params, is_editing, device)``
    callable to the StyleResolver protocol.

    Offline compilation always passes empty params and ``is_editing=False``.
    """

    def __init__(self, styles: StylesFunction):
        self._styles = styles

    def resolve(self, values: dict[str, Any], device: Device) -> StyleResult:
        return StyleResult.from_raw(self._styles(values, {}, False, device))


# =============================================================================
# Definitions
# =============================================================================


class SchemaProp(BaseModel):
    """
    One entry of a component's prop schema.

    Example:
        SchemaProp(prop="gap", type="space", label="Gap")
        SchemaProp(prop="Children", type="component-collection", accepts=["*"])
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    prop: str = Field(description="Prop name as stored on raw nodes")
    type: str = Field(description="Schema type (color, space, font, radius, select, ...)")
    label: str | None = None
    default_value: Any = None
    responsive: bool = False
    required: bool = False
    accepts: list[str] | None = None
    params: dict[str, Any] | None = None

    @property
    def is_slot(self) -> bool:
        return self.type in SLOT_SCHEMA_TYPES

    @property
    def options(self) -> list[Any] | None:
        if not self.params:
            return None
        return self.params.get("options")


@dataclass
class ComponentDefinition:
    """
    A component definition as the compiler sees it.

    Attributes:
        id: Host component id (e.g. "NsStack")
        type: Semantic node type (e.g. "stack"); defaults to ``id``
        label: Human-readable name
        category: Palette category
        schema: Prop and slot schema entries (SchemaProp or plain mappings)
        styles: Styling function or StyleResolver, if the component is styled
    """

    id: str
    type: str | None = None
    label: str = ""
    category: str | None = None
    schema: list[SchemaProp] = field(default_factory=list)
    styles: StylesFunction | StyleResolver | None = None

    def __post_init__(self) -> None:
        self.schema = [
            entry if isinstance(entry, SchemaProp) else SchemaProp.model_validate(entry)
            for entry in self.schema
        ]
        self._schema_by_prop = {entry.prop: entry for entry in self.schema}

    @property
    def node_type(self) -> str:
        return self.type or self.id

    def schema_prop(self, prop: str) -> SchemaProp | None:
        return self._schema_by_prop.get(prop)

    @property
    def style_resolver(self) -> StyleResolver | None:
        if self.styles is None:
            return None
        if isinstance(self.styles, StyleResolver):
            return self.styles
        return StylesFunctionResolver(self.styles)


# =============================================================================
# Registry
# =============================================================================


class ComponentRegistry:
    """
    Definitions indexed by component id and by semantic type.

    Example:
        registry = ComponentRegistry([stack_definition, heading_definition])
        registry.node_type_for("NsStack")     # "stack"
        registry.for_node_type("heading")     # heading_definition
    """

    def __init__(self, definitions: Iterable[ComponentDefinition] = ()):
        self._by_id: dict[str, ComponentDefinition] = {}
        self._by_type: dict[str, ComponentDefinition] = {}

        for definition in definitions:
            if definition.id in self._by_id:
                raise RegistryError(f"Duplicate component definition id '{definition.id}'")
            existing = self._by_type.get(definition.node_type)
            if existing is not None:
                raise RegistryError(
                    f"Component '{definition.id}' and '{existing.id}' "
                    f"both declare type '{definition.node_type}'"
                )
            self._by_id[definition.id] = definition
            self._by_type[definition.node_type] = definition

        logger.debug("Component registry built with %d definitions", len(self._by_id))

    def __iter__(self) -> Iterator[ComponentDefinition]:
        return iter(self._by_id.values())

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, component_id: object) -> bool:
        return component_id in self._by_id

    def get(self, component_id: str) -> ComponentDefinition | None:
        return self._by_id.get(component_id)

    def node_type_for(self, component_id: str) -> str:
        """Semantic type of a host component id; unknown ids pass through."""
        definition = self._by_id.get(component_id)
        return definition.node_type if definition else component_id

    def for_node_type(self, node_type: str) -> ComponentDefinition | None:
        """Definition for a semantic type, accepting raw component ids too."""
        return self._by_type.get(node_type) or self._by_id.get(node_type)

    def schema_type(self, component_id: str, prop: str) -> str | None:
        """Declared schema type of ``prop`` on ``component_id``, if any."""
        definition = self._by_id.get(component_id)
        if definition is None:
            return None
        entry = definition.schema_prop(prop)
        return entry.type if entry else None
