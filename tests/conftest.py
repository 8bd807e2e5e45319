"""Shared pytest fixtures for nocode-contracts tests."""

from __future__ import annotations

import copy
from typing import Any

import pytest

from nocode_contracts.registry import ComponentDefinition, ComponentRegistry, Device
from nocode_contracts.tokens import build_reverse_token_index, build_token_index

# =============================================================================
# Token source
# =============================================================================

TOKENS: dict[str, Any] = {
    "colors": {
        "accent": {"value": "#6d9cff"},
        "text": {"value": "#e4e4e7"},
        "card-bg": {"value": "#141417"},
        "border": {"value": "#2e2e33"},
    },
    "spacing": {
        "xs": {"value": 4, "unit": "px"},
        "sm": {"value": 8, "unit": "px"},
        "md": {"value": 16, "unit": "px"},
        "lg": {"value": 24, "unit": "px"},
        "xl": {"value": 32, "unit": "px"},
    },
    "sizing": {
        "sidebar-width": {"value": 240, "unit": "px"},
        "header-height": {"value": 48, "unit": "px"},
    },
    "fontFamilies": {
        "primary": {"family": "Inter", "fallbacks": ["-apple-system", "sans-serif"]},
        "mono": {"family": "JetBrains Mono", "fallbacks": ["monospace"]},
    },
    "fontSizes": {
        "sm": {"value": 13, "unit": "px"},
        "md": {"value": 14, "unit": "px"},
        "lg": {"value": 16, "unit": "px"},
        "2xl": {"value": 22, "unit": "px"},
        "3xl": {"value": 28, "unit": "px"},
    },
    "fontWeights": {
        "regular": {"value": 400},
        "medium": {"value": 500},
        "semibold": {"value": 600},
        "bold": {"value": 700},
    },
    "lineHeights": {
        "tight": {"value": 1.2},
        "normal": {"value": 1.5},
    },
    "letterSpacings": {
        "tight": {"value": -0.02, "unit": "em"},
    },
    "borderRadius": {
        "none": {"value": 0, "unit": "px"},
        "sm": {"value": 4, "unit": "px"},
        "md": {"value": 6, "unit": "px"},
        "lg": {"value": 8, "unit": "px"},
        "xl": {"value": 12, "unit": "px"},
        "full": {"value": 9999, "unit": "px"},
    },
}

TEXT_STYLES: dict[str, Any] = {
    "heading-1": {
        "description": "Page titles",
        "fontFamily": "$tokens.fontFamilies.primary",
        "fontSize": "$tokens.fontSizes.3xl",
        "fontWeight": "$tokens.fontWeights.bold",
        "lineHeight": "$tokens.lineHeights.tight",
    },
    "body": {
        "description": "Body copy",
        "fontFamily": "$tokens.fontFamilies.primary",
        "fontSize": "$tokens.fontSizes.md",
        "lineHeight": "$tokens.lineHeights.normal",
    },
}


# =============================================================================
# Styling functions
# =============================================================================

HEADING_SIZES = {1: "28px", 2: "22px", 3: "16px"}
HEADING_WEIGHTS = {1: "700", 2: "600", 3: "600"}


def stack_styles(values: dict, params: dict, is_editing: bool, device: Device) -> dict:
    return {
        "styled": {
            "Root": {
                "display": "flex",
                "flexDirection": "column",
                "gap": values.get("gap"),
                "padding": values.get("padding"),
                "background": values.get("background"),
                "width": "100%",
            }
        }
    }


def row_styles(values: dict, params: dict, is_editing: bool, device: Device) -> dict:
    return {
        "styled": {
            "Root": {
                "display": "flex",
                "flexDirection": "row",
                "gap": values.get("gap"),
                "alignItems": values.get("align", "stretch"),
                "justifyContent": values.get("justify", "flex-start"),
                "flexWrap": "wrap" if values.get("wrap") else "nowrap",
            }
        }
    }


def grid_styles(values: dict, params: dict, is_editing: bool, device: Device) -> dict:
    return {
        "styled": {
            "Root": {
                "display": "grid",
                "gridTemplateColumns": f"repeat({values.get('columns', 1)}, 1fr)",
                "gap": values.get("gap"),
            }
        }
    }


def heading_styles(values: dict, params: dict, is_editing: bool, device: Device) -> dict:
    level = int(values.get("level") or 2)
    return {
        "styled": {
            "Root": {
                "fontSize": HEADING_SIZES[level],
                "fontWeight": HEADING_WEIGHTS[level],
                "color": values.get("color"),
                "fontFamily": values.get("font"),
                "margin": 0,
            }
        },
        "props": {"as": f"h{level}"},
    }


def stat_styles(values: dict, params: dict, is_editing: bool, device: Device) -> dict:
    return {
        "styled": {
            "Root": {"borderRadius": values.get("radius"), "padding": "16px"},
            "Label": {"color": "#e4e4e7"},
            "Value": {"fontSize": "22px"},
        }
    }


def make_definitions() -> list[ComponentDefinition]:
    children_slot = {"prop": "Children", "type": "component-collection", "accepts": ["*"]}
    return [
        ComponentDefinition(
            id="NsStack",
            type="stack",
            label="Stack",
            category="Layout",
            schema=[
                {"prop": "gap", "type": "space", "label": "Gap", "responsive": True},
                {"prop": "padding", "type": "space", "label": "Padding"},
                {"prop": "background", "type": "color", "label": "Background"},
                children_slot,
            ],
            styles=stack_styles,
        ),
        ComponentDefinition(
            id="NsRow",
            type="row",
            label="Row",
            category="Layout",
            schema=[
                {"prop": "gap", "type": "space", "label": "Gap"},
                {
                    "prop": "align",
                    "type": "select",
                    "label": "Align",
                    "params": {"options": ["start", "center", "end", "stretch"]},
                },
                {"prop": "justify", "type": "select", "responsive": True},
                {"prop": "wrap", "type": "boolean", "defaultValue": False, "responsive": True},
                children_slot,
            ],
            styles=row_styles,
        ),
        ComponentDefinition(
            id="NsGrid",
            type="grid",
            label="Grid",
            category="Layout",
            schema=[
                {"prop": "columns", "type": "number", "defaultValue": 3, "responsive": True},
                {"prop": "gap", "type": "space"},
                children_slot,
            ],
            styles=grid_styles,
        ),
        ComponentDefinition(
            id="NsSection",
            type="section",
            label="Section",
            category="Layout",
            schema=[
                {
                    "prop": "Children",
                    "type": "component-collection",
                    "accepts": ["grid", "row"],
                    "required": True,
                },
            ],
        ),
        ComponentDefinition(
            id="NsHeading",
            type="heading",
            label="Heading",
            category="Typography",
            schema=[
                {"prop": "content", "type": "string", "label": "Content"},
                {
                    "prop": "level",
                    "type": "select",
                    "defaultValue": "2",
                    "responsive": True,
                    "params": {
                        "options": [
                            {"value": "1", "label": "H1"},
                            {"value": "2", "label": "H2"},
                            {"value": "3", "label": "H3"},
                        ]
                    },
                },
                {"prop": "color", "type": "color"},
                {"prop": "font", "type": "font"},
            ],
            styles=heading_styles,
        ),
        ComponentDefinition(
            id="NsStat",
            type="stat",
            label="Stat",
            category="Data",
            schema=[
                {"prop": "label", "type": "string"},
                {"prop": "value", "type": "string"},
                {"prop": "radius", "type": "radius"},
            ],
            styles=stat_styles,
        ),
        ComponentDefinition(
            id="NsButton",
            type="button",
            label="Button",
            category="Actions",
            schema=[
                {"prop": "label", "type": "string"},
                {"prop": "Icon", "type": "component"},
            ],
        ),
    ]


# =============================================================================
# Raw host entry
# =============================================================================

ENTRY: dict[str, Any] = {
    "_id": "stack-root",
    "_component": "NsStack",
    "gap": {
        "$res": True,
        "xl": {"tokenId": "lg", "value": "24px"},
        "md": {"tokenId": "md", "value": "16px"},
        "xs": {"tokenId": "sm", "value": "8px"},
    },
    "padding": {"tokenId": "md", "value": "16px"},
    "background": {"tokenId": "card-bg", "value": "#141417"},
    "Children": [
        {
            "_id": "heading-1",
            "_component": "NsHeading",
            "content": "Hello {{user.name}}, you have {{count}} tasks",
            "level": {"$res": True, "xl": "1", "md": "2", "xs": "3"},
            "color": {"tokenId": "text", "value": "#e4e4e7"},
            "font": {"tokenId": "primary", "value": "Inter"},
        },
        {
            "_id": "row-stats",
            "_component": "NsRow",
            "gap": {"tokenId": "md", "value": "16px"},
            "align": "center",
            "justify": {"$res": True, "xl": "space-between", "xs": "flex-start"},
            "wrap": {"$res": True, "xl": False, "xs": True},
            "Children": [
                {
                    "_id": "stat-1",
                    "_component": "NsStat",
                    "label": "{{stats.label}}",
                    "value": "{{stats.value}}",
                    "radius": {"tokenId": "xl", "value": "12px"},
                },
                {"_id": "button-1", "_component": "NsButton", "label": "Open"},
            ],
        },
        {
            "_id": "section-1",
            "_component": "NsSection",
            "Children": [
                {
                    "_id": "grid-1",
                    "_component": "NsGrid",
                    "columns": {"$res": True, "xl": 3, "md": 2, "xs": 1},
                },
            ],
        },
    ],
}

LEGACY_CONTENT: dict[str, Any] = {
    "id": "settings-root",
    "type": "stack",
    "props": {"gap": "16px", "title": "Hi {{user.name}}"},
    "style": {"padding": "8px"},
    "children": [
        {
            "id": "settings-heading",
            "type": "heading",
            "props": {"content": "Settings", "level": "2"},
        }
    ],
}


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def tokens() -> dict[str, Any]:
    """Return a fresh copy of the test token source."""
    return copy.deepcopy(TOKENS)


@pytest.fixture
def text_styles() -> dict[str, Any]:
    return copy.deepcopy(TEXT_STYLES)


@pytest.fixture
def token_index(tokens):
    return build_token_index(tokens)


@pytest.fixture
def reverse_index(token_index):
    return build_reverse_token_index(token_index)


@pytest.fixture
def registry() -> ComponentRegistry:
    """Return a registry of small layout, text and data components."""
    return ComponentRegistry(make_definitions())


@pytest.fixture
def entry() -> dict[str, Any]:
    """Return the raw host entry of the dashboard page."""
    return copy.deepcopy(ENTRY)


@pytest.fixture
def legacy_content() -> dict[str, Any]:
    return copy.deepcopy(LEGACY_CONTENT)


@pytest.fixture
def layout_source(tokens, text_styles, legacy_content) -> dict[str, Any]:
    """Return editor layout state with a raw, a legacy and an empty page."""
    return {
        "structure": {"regions": {"header": {"enabled": True}, "sidebar": {"enabled": True}}},
        "tokens": tokens,
        "textStyles": text_styles,
        "pages": {
            "dashboard": {
                "id": "dashboard",
                "label": "Dashboard",
                "route": "/",
                "browserTitle": "Dashboard",
            },
            "settings": {
                "id": "settings",
                "label": "Settings",
                "route": "/settings",
                "content": legacy_content,
            },
            "empty": {"id": "empty", "label": "Empty", "route": "/empty"},
        },
        "variables": {"user": {"name": "string"}},
    }


@pytest.fixture
def entries(entry) -> dict[str, Any]:
    return {"dashboard": entry}
