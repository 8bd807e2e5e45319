"""
Design token indexing.

Builds the two lookup tables the compiler needs from a token source
(a nested ``group -> id -> token`` dictionary):

- TokenIndex: token id -> group, and "group.id" -> resolved CSS literal
- ReverseTokenIndex: CSS literal -> var(--...) reference, used to turn
  concrete values computed by styling functions back into variables

It also owns the CSS variable naming scheme, which is shared by forward
resolution and reverse lookup so a value that round-trips through both
always ends on the same variable name.

Both indexes are rebuilt on every compile call and never mutated after
construction.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_CSS_PREFIX = "ns"

TOKEN_REF_PREFIX = "$tokens."

_TOKEN_REF_RE = re.compile(r"^\$tokens\.(.+)$")

# Group -> CSS variable name pattern ({id} is the token id)
CSS_VARIABLE_PATTERNS: dict[str, str] = {
    "colors": "{id}",
    "spacing": "spacing-{id}",
    "sizing": "sizing-{id}",
    "fontFamilies": "font-{id}",
    "borderRadius": "radius-{id}",
    "fontSizes": "font-size-{id}",
    "fontWeights": "font-weight-{id}",
    "lineHeights": "line-height-{id}",
    "letterSpacings": "letter-spacing-{id}",
    "borderWidth": "border-width-{id}",
}

# Unit used in the CSS variable map for unitless numeric tokens
CSS_DEFAULT_UNITS: dict[str, str] = {
    "spacing": "px",
    "sizing": "px",
    "fontSizes": "px",
    "borderRadius": "px",
    "borderWidth": "px",
    "letterSpacings": "em",
}

# Text style fields that only describe the style
TEXT_STYLE_METADATA_KEYS = frozenset({"description"})


# =============================================================================
# Token references
# =============================================================================


def format_token_ref(group: str, token_id: str) -> str:
    """Build a symbolic token reference, e.g. "$tokens.spacing.md"."""
    return f"{TOKEN_REF_PREFIX}{group}.{token_id}"


def parse_token_ref(value: Any) -> tuple[str, str] | None:
    """
    Split a "$tokens.<group>.<id>" string into (group, id).

    The group is everything up to the first dot; the id may itself
    contain dots. Returns None for anything that is not a token ref.
    """
    if not isinstance(value, str):
        return None
    match = _TOKEN_REF_RE.match(value)
    if not match:
        return None
    group, sep, token_id = match.group(1).partition(".")
    if not sep or not group or not token_id:
        return None
    return group, token_id


def css_variable_name(group: str, token_id: str, prefix: str = DEFAULT_CSS_PREFIX) -> str:
    """
    CSS custom property name for a token.

    Example:
        css_variable_name("spacing", "lg")      # "--ns-spacing-lg"
        css_variable_name("colors", "accent")   # "--ns-accent"
        css_variable_name("shadows", "card")    # "--ns-shadows-card"
    """
    pattern = CSS_VARIABLE_PATTERNS.get(group)
    suffix = pattern.format(id=token_id) if pattern else f"{group}-{token_id}"
    return f"--{prefix}-{suffix}"


def css_variable_ref(group: str, token_id: str, prefix: str = DEFAULT_CSS_PREFIX) -> str:
    """``var(...)`` reference for a token."""
    return f"var({css_variable_name(group, token_id, prefix)})"


def _format_literal(token: Mapping[str, Any], default_unit: str = "") -> str | None:
    """Resolve a single token definition to a CSS literal, or None if it has no value."""
    family = token.get("family")
    if family:
        fallbacks = token.get("fallbacks")
        fallback_list = ", ".join(str(f) for f in fallbacks) if fallbacks else ""
        return f"'{family}', {fallback_list or 'sans-serif'}"

    if "value" not in token or token["value"] is None:
        return None

    value = token["value"]
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (int, float)):
        unit = token.get("unit") or default_unit
        return f"{_format_number(value)}{unit}"
    return str(value)


def _format_number(value: int | float) -> str:
    # 16.0 -> "16", 1.25 -> "1.25"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _iter_tokens(tokens: Mapping[str, Any]) -> Iterator[tuple[str, str, Mapping[str, Any]]]:
    """Yield (group, id, token) in declared order, skipping non-mapping entries."""
    for group, entries in tokens.items():
        if not isinstance(entries, Mapping):
            continue
        for token_id, token in entries.items():
            if not isinstance(token, Mapping):
                continue
            yield group, token_id, token


# =============================================================================
# Forward index
# =============================================================================


@dataclass(frozen=True)
class TokenIndex:
    """
    Forward token lookups.

    Attributes:
        id_to_group: token id -> first group declaring it
        resolved_values: "group.id" -> resolved CSS literal
    """

    id_to_group: dict[str, str] = field(default_factory=dict)
    resolved_values: dict[str, str] = field(default_factory=dict)

    def resolve(self, group: str, token_id: str) -> str | None:
        return self.resolved_values.get(f"{group}.{token_id}")

    def has(self, group: str, token_id: str) -> bool:
        return f"{group}.{token_id}" in self.resolved_values

    def resolve_ref(self, value: Any) -> Any:
        """
        Replace a "$tokens.group.id" string with its literal.

        Anything else, including refs to unknown tokens, is returned unchanged.
        """
        if not isinstance(value, str):
            return value
        match = _TOKEN_REF_RE.match(value)
        if match:
            resolved = self.resolved_values.get(match.group(1))
            if resolved is not None:
                return resolved
        return value


def build_token_index(tokens: Mapping[str, Any]) -> TokenIndex:
    """
    Index a token source.

    Iteration follows the mapping's declared order. When an id occurs in
    several groups, ``id_to_group`` keeps the first group; later groups
    are ignored here and disambiguated by prop schema type downstream.
    Tokens without ``family`` or ``value`` get no resolved literal but
    still count for ``id_to_group``.

    Args:
        tokens: ``{group: {id: {value|family, unit?, fallbacks?}}}``

    Returns:
        A fresh TokenIndex
    """
    id_to_group: dict[str, str] = {}
    resolved_values: dict[str, str] = {}

    for group, token_id, token in _iter_tokens(tokens):
        id_to_group.setdefault(token_id, group)

        literal = _format_literal(token)
        if literal is not None:
            resolved_values[f"{group}.{token_id}"] = literal

    logger.debug(
        "Indexed %d token ids (%d with resolved values)", len(id_to_group), len(resolved_values)
    )
    return TokenIndex(id_to_group=id_to_group, resolved_values=resolved_values)


# =============================================================================
# Reverse index
# =============================================================================


@dataclass(frozen=True)
class ReverseTokenIndex:
    """
    Literal -> token lookups.

    Attributes:
        value_to_var: CSS literal -> "var(--prefix-...)"
        value_to_ref: CSS literal -> "$tokens.group.id"
        prefix: CSS variable prefix the references were built with
    """

    value_to_var: dict[str, str] = field(default_factory=dict)
    value_to_ref: dict[str, str] = field(default_factory=dict)
    prefix: str = DEFAULT_CSS_PREFIX

    def lookup(self, literal: str) -> str | None:
        return self.value_to_var.get(literal)

    def lookup_ref(self, literal: str) -> str | None:
        """Token reference ("$tokens.group.id") owning a literal."""
        return self.value_to_ref.get(literal)


def build_reverse_token_index(
    token_index: TokenIndex, prefix: str = DEFAULT_CSS_PREFIX
) -> ReverseTokenIndex:
    """
    Invert resolved literals into CSS variable references.

    The first "group.id" registering a literal owns it, in the token
    source's declared order: with spacing.md = 16px declared before
    fontSizes.lg = 16px, "16px" maps to var(--ns-spacing-md).
    """
    value_to_var: dict[str, str] = {}
    value_to_ref: dict[str, str] = {}

    for key, literal in token_index.resolved_values.items():
        group, _, token_id = key.partition(".")
        if literal in value_to_var:
            continue
        value_to_var[literal] = css_variable_ref(group, token_id, prefix)
        value_to_ref[literal] = format_token_ref(group, token_id)

    return ReverseTokenIndex(value_to_var=value_to_var, value_to_ref=value_to_ref, prefix=prefix)


# =============================================================================
# CSS variables and text styles
# =============================================================================


def generate_css_variable_map(
    tokens: Mapping[str, Any], prefix: str = DEFAULT_CSS_PREFIX
) -> dict[str, str]:
    """
    Flat map of CSS custom property -> value for :root injection.

    Covers every group of the token source in declared order. Unitless
    numeric values get the group's default unit (px for spacing-like
    groups, em for letter spacing).
    """
    variables: dict[str, str] = {}
    for group, token_id, token in _iter_tokens(tokens):
        literal = _format_literal(token, CSS_DEFAULT_UNITS.get(group, ""))
        if literal is None:
            continue
        variables[css_variable_name(group, token_id, prefix)] = literal
    return variables


def resolve_text_styles(
    text_styles: Mapping[str, Any] | None, prefix: str = DEFAULT_CSS_PREFIX
) -> dict[str, dict[str, Any]]:
    """
    Resolve shared text styles for CSS consumption.

    Token refs become var(--...) references; descriptive fields are dropped.

    Example:
        resolve_text_styles({"body": {"description": "Body copy",
                                      "fontSize": "$tokens.fontSizes.md"}})
        # {"body": {"fontSize": "var(--ns-font-size-md)"}}
    """
    if not text_styles:
        return {}

    resolved: dict[str, dict[str, Any]] = {}
    for name, style in text_styles.items():
        if not isinstance(style, Mapping):
            continue

        props: dict[str, Any] = {}
        for prop, value in style.items():
            if prop in TEXT_STYLE_METADATA_KEYS:
                continue
            ref = parse_token_ref(value)
            props[prop] = css_variable_ref(ref[0], ref[1], prefix) if ref else value

        if props:
            resolved[name] = props

    return resolved


# =============================================================================
# Group disambiguation
# =============================================================================

# Prop schema type -> candidate token groups, most specific first.
# The first candidate holding the token id wins; the last is the default.
TOKEN_GROUPS_BY_SCHEMA_TYPE: dict[str, tuple[str, ...]] = {
    "color": ("colors",),
    "space": ("sizing", "spacing"),
    "font": ("fontFamilies",),
    "radius": ("borderRadius",),
    "border-radius": ("borderRadius",),
}


def detect_token_group(
    token_id: str, schema_type: str | None, token_index: TokenIndex
) -> str | None:
    """
    Decide which group a token id refers to.

    An id such as "md" can live in spacing and borderRadius at once. The
    consuming prop's schema type is authoritative; the index's first-seen
    group is only consulted when the schema type says nothing.
    """
    candidates = TOKEN_GROUPS_BY_SCHEMA_TYPE.get(schema_type or "")
    if candidates:
        for group in candidates:
            if token_index.has(group, token_id):
                return group
        return candidates[-1]
    return token_index.id_to_group.get(token_id)
