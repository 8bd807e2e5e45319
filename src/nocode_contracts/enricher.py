"""
Entry enricher.

Walks a raw host node tree (the editor's internal per-page document) and
produces an EnrichedNode tree where:

- token wrappers like {"tokenId": "accent", "value": "#6d9cff"} become
  "$tokens.colors.accent", keeping the reference instead of the literal
- responsive wrappers like {"$res": True, "xl": "4", "xs": "1"} are kept
  in ``responsive`` when the values really differ across breakpoints
- props holding {{...}} template placeholders are listed in ``bindings``

Raw host node shape:
    {"_id": "...", "_component": "NsStack", "<prop>": <value>, ..., "Children": [...]}
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from nocode_contracts.breakpoints import BreakpointSet
from nocode_contracts.registry import ComponentRegistry
from nocode_contracts.specs import EnrichedNode
from nocode_contracts.tokens import TokenIndex, detect_token_group, format_token_ref

logger = logging.getLogger(__name__)

NODE_ID_KEY = "_id"
COMPONENT_KEY = "_component"
CHILDREN_KEY = "Children"
RESPONSIVE_FLAG = "$res"

# Props stored as JSON strings by the host, renamed to their semantic name
JSON_PROP_ALIASES: dict[str, str] = {
    "columnsJson": "columns",
    "itemsJson": "items",
    "tabsJson": "items",
    "optionsJson": "options",
}

TEMPLATE_RE = re.compile(r"\{\{.+?\}\}")


# =============================================================================
# Helpers
# =============================================================================


def is_responsive(value: Any) -> bool:
    return isinstance(value, Mapping) and value.get(RESPONSIVE_FLAG) is True


def is_template(value: Any) -> bool:
    """True for strings containing at least one {{...}} placeholder."""
    return isinstance(value, str) and TEMPLATE_RE.search(value) is not None


def is_meta_key(key: str) -> bool:
    return key.startswith("_") or key == CHILDREN_KEY


def _is_empty(value: Any) -> bool:
    return value is None or value == ""


def _same_structure(left: Any, right: Any) -> bool:
    # json.dumps keeps True distinct from 1, unlike ==
    return json.dumps(left, sort_keys=True, default=str) == json.dumps(
        right, sort_keys=True, default=str
    )


def _add_binding(bindings: list[str], prop: str) -> None:
    if prop not in bindings:
        bindings.append(prop)


# =============================================================================
# Value resolution
# =============================================================================


def enrich_value(
    value: Any,
    raw_prop: str,
    component_id: str,
    token_index: TokenIndex,
    registry: ComponentRegistry,
) -> Any:
    """
    Resolve one raw prop value.

    - {"tokenId", "value"} -> "$tokens.<group>.<id>" (literal or id if no group)
    - {"value": X} with at most two keys -> X
    - objects with "fontFamily" -> unchanged (already concrete)
    - JSON-encoded string props -> parsed, raw string kept on failure
    - anything else -> unchanged
    """
    if value is None:
        return None

    if isinstance(value, Mapping):
        token_id = value.get("tokenId")
        if token_id:
            token_id = str(token_id)
            schema_type = registry.schema_type(component_id, raw_prop)
            group = detect_token_group(token_id, schema_type, token_index)
            if group:
                return format_token_ref(group, token_id)
            literal = value.get("value")
            return literal if literal is not None else token_id

        if "value" in value and "tokenId" not in value and len(value) <= 2:
            return value["value"]

        # {"fontFamily": ...} objects and other mappings pass through
        return value

    if raw_prop in JSON_PROP_ALIASES and isinstance(value, str):
        try:
            return json.loads(value)
        except ValueError:
            logger.debug("Prop %s on %s is not valid JSON, keeping raw string", raw_prop, component_id)
            return value

    return value


# =============================================================================
# Main enricher
# =============================================================================


@dataclass
class EnrichResult:
    """
    Attributes:
        tree: Enriched root node
        template_bindings: node id -> prop names holding template placeholders
    """

    tree: EnrichedNode
    template_bindings: dict[str, list[str]] = field(default_factory=dict)


def enrich_entry(
    entry: Mapping[str, Any],
    token_index: TokenIndex,
    registry: ComponentRegistry,
    breakpoints: BreakpointSet | None = None,
) -> EnrichResult:
    """
    Enrich a raw host entry into an EnrichedNode tree.

    Args:
        entry: Raw host root node
        token_index: Index built from the same token source
        registry: Component definitions (type mapping and prop schemas)
        breakpoints: Breakpoint tiers, widest first (defaults to the standard five)

    Returns:
        EnrichResult with the tree and the template binding catalog
    """
    bps = breakpoints or BreakpointSet.default()
    template_bindings: dict[str, list[str]] = {}

    def walk(node: Mapping[str, Any]) -> EnrichedNode:
        component_id = str(node.get(COMPONENT_KEY, ""))
        node_id = node.get(NODE_ID_KEY)

        props: dict[str, Any] = {}
        responsive: dict[str, dict[str, Any]] = {}
        bindings: list[str] = []

        for key, raw_value in node.items():
            if is_meta_key(key):
                continue

            prop = JSON_PROP_ALIASES.get(key, key)

            if is_responsive(raw_value):
                per_breakpoint: dict[str, Any] = {}
                varies = False
                for bp in bps.present_in(raw_value):
                    resolved = enrich_value(raw_value[bp], key, component_id, token_index, registry)
                    if per_breakpoint and not varies:
                        first = next(iter(per_breakpoint.values()))
                        varies = not _same_structure(resolved, first)
                    per_breakpoint[bp] = resolved
                    if is_template(resolved):
                        _add_binding(bindings, prop)

                default = next(
                    (v for v in per_breakpoint.values() if v is not None), None
                )
                if not _is_empty(default):
                    props[prop] = default
                if varies:
                    responsive[prop] = per_breakpoint
            else:
                resolved = enrich_value(raw_value, key, component_id, token_index, registry)
                if not _is_empty(resolved):
                    props[prop] = resolved
                if is_template(resolved):
                    _add_binding(bindings, prop)

        raw_children = node.get(CHILDREN_KEY)
        children = None
        if isinstance(raw_children, list) and raw_children:
            children = [walk(child) for child in raw_children]

        if bindings and node_id is not None:
            template_bindings[str(node_id)] = bindings

        return EnrichedNode(
            id=None if node_id is None else str(node_id),
            type=registry.node_type_for(component_id) if component_id else None,
            props=props or None,
            responsive=responsive or None,
            bindings=bindings or None,
            children=children,
        )

    return EnrichResult(tree=walk(entry), template_bindings=template_bindings)


# =============================================================================
# Fallback enricher
# =============================================================================


def enrich_legacy_node(node: Mapping[str, Any]) -> EnrichedNode:
    """
    Enrich a legacy persisted node ``{id, type, props?, style?, children?}``.

    Token references and responsive variation are gone at the source for
    these pages; this pass copies literal props, style and children and
    still detects template bindings.
    """
    raw_props = node.get("props")
    props = dict(raw_props) if isinstance(raw_props, Mapping) and raw_props else None
    bindings = [key for key, value in (props or {}).items() if is_template(value)]

    raw_style = node.get("style")
    style = dict(raw_style) if isinstance(raw_style, Mapping) and raw_style else None

    raw_children = node.get("children")
    children = None
    if isinstance(raw_children, list) and raw_children:
        children = [enrich_legacy_node(child) for child in raw_children]

    node_id = node.get("id")
    node_type = node.get("type")
    return EnrichedNode(
        id=None if node_id is None else str(node_id),
        type=None if node_type is None else str(node_type),
        props=props,
        bindings=bindings or None,
        children=children,
        style=style,
    )
