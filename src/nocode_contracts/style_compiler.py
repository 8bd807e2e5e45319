"""
Style compiler.

Runs each component's styling function offline, outside the editor, for
every node of an enriched tree at every breakpoint. The resulting CSS is
re-tokenized (concrete literals back to var(--...) references, so themes
can still be switched at runtime) and diff-compressed across breakpoints:
the widest breakpoint holds the full declaration, narrower ones only what
changes, mirroring desktop-first media queries.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from nocode_contracts.breakpoints import BreakpointSet, cascade_value
from nocode_contracts.registry import ComponentRegistry, Device, StyleResult
from nocode_contracts.specs import ComponentPropsMap, ComponentStyleMap, EnrichedNode
from nocode_contracts.tokens import ReverseTokenIndex, TokenIndex, css_variable_ref, parse_token_ref

logger = logging.getLogger(__name__)


@dataclass
class StyleCompileResult:
    component_styles: ComponentStyleMap = field(default_factory=dict)
    component_props: ComponentPropsMap = field(default_factory=dict)


# =============================================================================
# Tokenization
# =============================================================================


def tokenize_css(css: Mapping[str, Any], reverse_index: ReverseTokenIndex) -> dict[str, Any]:
    """
    Replace concrete token values in a CSS bag with var(--...) references.

    - already var(...) -> kept
    - "$tokens.group.id" -> the group/id's variable
    - a literal some token produces exactly -> that token's variable
    - anything else -> kept as-is

    None values are dropped.
    """
    result: dict[str, Any] = {}

    for prop, value in css.items():
        if value is None:
            continue

        text = value if isinstance(value, str) else _css_text(value)

        if text.startswith("var("):
            result[prop] = value
            continue

        ref = parse_token_ref(text)
        if ref:
            result[prop] = css_variable_ref(ref[0], ref[1], reverse_index.prefix)
            continue

        variable = reverse_index.lookup(text)
        result[prop] = variable if variable else value

    return result


def _css_text(value: Any) -> str:
    # Matches how the value would be written into a stylesheet
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


# =============================================================================
# Diff compression
# =============================================================================


def _fingerprint(value: Any) -> str:
    return json.dumps(value, sort_keys=True, default=str)


def compress_breakpoints(
    full: Mapping[str, Mapping[str, Any]], breakpoints: BreakpointSet
) -> dict[str, dict[str, Any]]:
    """
    Diff-compress per-breakpoint bags.

    The widest present breakpoint keeps its full bag; every narrower one
    keeps only the properties whose value differs from the nearest wider
    present breakpoint. Breakpoints left with an empty diff are dropped.

    Example:
        compress_breakpoints({"xl": {"gap": "24px", "display": "flex"},
                              "xs": {"gap": "8px", "display": "flex"}}, bps)
        # {"xl": {"gap": "24px", "display": "flex"}, "xs": {"gap": "8px"}}
    """
    present = breakpoints.present_in(full)
    if not present:
        return {}

    compressed: dict[str, dict[str, Any]] = {present[0]: dict(full[present[0]])}

    for wider, narrower in zip(present, present[1:]):
        previous = full[wider]
        diff = {
            prop: value
            for prop, value in full[narrower].items()
            if prop not in previous or _fingerprint(value) != _fingerprint(previous[prop])
        }
        if diff:
            compressed[narrower] = diff

    return compressed


# =============================================================================
# Main style compiler
# =============================================================================


def breakpoint_values(
    node: EnrichedNode, breakpoint_id: str, token_index: TokenIndex, breakpoints: BreakpointSet
) -> dict[str, Any]:
    """
    Concrete prop values of ``node`` at one breakpoint.

    Static props are the base; each responsive prop cascades from the
    breakpoint itself or the nearest wider one. Token refs are resolved to
    literals because styling functions only understand concrete CSS.
    """
    values: dict[str, Any] = {}

    for key, value in (node.props or {}).items():
        values[key] = token_index.resolve_ref(value)

    for key, per_breakpoint in (node.responsive or {}).items():
        applicable = cascade_value(per_breakpoint, breakpoint_id, breakpoints)
        if applicable is not None:
            values[key] = token_index.resolve_ref(applicable)

    return values


def compile_styles(
    tree: EnrichedNode,
    token_index: TokenIndex,
    reverse_index: ReverseTokenIndex,
    registry: ComponentRegistry,
    breakpoints: BreakpointSet | None = None,
) -> StyleCompileResult:
    """
    Pre-compute CSS for every styled node of an enriched tree.

    Nodes whose type has no styling function are skipped, but their
    children are still visited. A styling function raising at some
    breakpoint is logged and that breakpoint contributes nothing.

    Args:
        tree: Enriched root node
        token_index: Forward index for resolving "$tokens" refs
        reverse_index: Reverse index for re-tokenizing CSS literals
        registry: Component definitions providing styling functions
        breakpoints: Breakpoint tiers, widest first

    Returns:
        StyleCompileResult with the compressed style and computed-props maps
    """
    bps = breakpoints or BreakpointSet.default()
    result = StyleCompileResult()

    for node in tree.walk():
        definition = registry.for_node_type(node.type) if node.type else None
        resolver = definition.style_resolver if definition else None
        if resolver is None:
            continue

        # slot -> breakpoint -> css
        full_styles: dict[str, dict[str, dict[str, Any]]] = {}
        # breakpoint -> computed props
        full_props: dict[str, dict[str, Any]] = {}

        for bp in bps:
            values = breakpoint_values(node, bp.id, token_index, bps)
            try:
                output = StyleResult.from_raw(
                    resolver.resolve(values, Device(id=bp.id, width=bp.device_width))
                )
            except Exception as e:
                logger.warning("styles() failed for node %s at %s: %s", node.id, bp.id, e)
                continue

            for slot, css in output.styled.items():
                full_styles.setdefault(slot, {})[bp.id] = tokenize_css(css, reverse_index)
            if output.props:
                full_props[bp.id] = dict(output.props)

        node_styles = {}
        for slot, per_breakpoint in full_styles.items():
            compressed = compress_breakpoints(per_breakpoint, bps)
            if compressed:
                node_styles[slot] = compressed
        if node_styles and node.id is not None:
            result.component_styles[node.id] = node_styles

        if full_props and node.id is not None:
            compressed_props = compress_breakpoints(full_props, bps)
            if compressed_props:
                result.component_props[node.id] = compressed_props

    return result
