"""
Stylesheet rendering for style contracts.

Runtimes may apply the style contract directly as inline styles; these
helpers render the same data as a plain stylesheet instead: a :root block
for the CSS variables, and per node/slot rules where the widest breakpoint
is the base and each narrower one sits in a max-width media query.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from nocode_contracts.breakpoints import BreakpointSet
from nocode_contracts.specs import StyleContract
from nocode_contracts.tokens import DEFAULT_CSS_PREFIX

ROOT_SLOT = "Root"

_UPPER_RE = re.compile(r"[A-Z]")


def camel_to_kebab(name: str) -> str:
    """fontSize -> font-size. Custom properties (--x) are left alone."""
    if name.startswith("--"):
        return name
    return _UPPER_RE.sub(lambda m: f"-{m.group(0).lower()}", name)


def _css_value(value: Any) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


def css_variables_to_css(variables: Mapping[str, str]) -> str:
    """
    Render a CSS variable map as a :root block.

    Example:
        css_variables_to_css({"--ns-accent": "#6d9cff"})
        # ':root {\\n  --ns-accent: #6d9cff;\\n}'
    """
    lines = [":root {"]
    for name, value in variables.items():
        lines.append(f"  {name}: {value};")
    lines.append("}")
    return "\n".join(lines)


def node_selector(node_id: str, slot: str, prefix: str = DEFAULT_CSS_PREFIX) -> str:
    selector = f'[data-{prefix}-id="{node_id}"]'
    if slot != ROOT_SLOT:
        selector += f' [data-{prefix}-slot="{slot}"]'
    return selector


def _declarations(css: Mapping[str, Any], indent: str) -> list[str]:
    return [f"{indent}{camel_to_kebab(prop)}: {_css_value(value)};" for prop, value in css.items()]


def component_styles_to_css(
    styles: Mapping[str, Mapping[str, Mapping[str, Mapping[str, Any]]]],
    breakpoints: BreakpointSet | None = None,
    prefix: str = DEFAULT_CSS_PREFIX,
) -> str:
    """
    Render a compressed component style map as CSS rules.

    The widest breakpoint's bag is emitted unwrapped; a narrower breakpoint
    is wrapped in ``@media (max-width: <next wider min width - 1>px)``.
    """
    bps = breakpoints or BreakpointSet.default()
    tiers = list(bps)
    lines: list[str] = []

    for node_id, slots in styles.items():
        for slot, per_breakpoint in slots.items():
            selector = node_selector(node_id, slot, prefix)

            base = per_breakpoint.get(bps.widest.id)
            if base:
                lines.append(f"{selector} {{")
                lines.extend(_declarations(base, "  "))
                lines.append("}")

            for index, tier in enumerate(tiers[1:], start=1):
                css = per_breakpoint.get(tier.id)
                if not css:
                    continue
                max_width = tiers[index - 1].min_width - 1
                lines.append(f"@media (max-width: {max_width}px) {{")
                lines.append(f"  {selector} {{")
                lines.extend(_declarations(css, "    "))
                lines.append("  }")
                lines.append("}")

    return "\n".join(lines)


def style_contract_to_css(contract: StyleContract, prefix: str = DEFAULT_CSS_PREFIX) -> str:
    """Render a whole style contract: variables first, then component rules."""
    bps = BreakpointSet(contract.breakpoints) if contract.breakpoints else None
    parts = [css_variables_to_css(contract.css_variables)]
    rules = component_styles_to_css(contract.component_styles, bps, prefix)
    if rules:
        parts.append(rules)
    return "\n\n".join(parts) + "\n"
