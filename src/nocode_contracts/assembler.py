"""
Contract assembler.

Single entry point of the compiler. For every page it enriches the raw
host entry (or, when none exists, the legacy page content), compiles the
page's styles, merges the results and emits three independent documents:

1. layout contract - enriched pages with token refs and responsive maps
2. style contract - CSS variables, component styles/props per breakpoint
3. registry contract - component catalog derived from the definitions

Usage:
    output = compile_contracts(layout, entries, registry)
    save(output.layout_contract.to_dict())
    save(output.style_contract.to_dict())
    save(output.registry_contract.to_dict())

Apart from ``generatedAt``, identical inputs give identical documents.
"""

from __future__ import annotations

import hashlib
import json
import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, TypeVar

from nocode_contracts.breakpoints import BreakpointSet
from nocode_contracts.config import CompilerConfig
from nocode_contracts.enricher import enrich_entry, enrich_legacy_node
from nocode_contracts.errors import DuplicateNodeIdError
from nocode_contracts.registry import ComponentRegistry
from nocode_contracts.specs import (
    ENVELOPE_KEY,
    LAYOUT_SCHEMA,
    LAYOUT_VERSION,
    REGISTRY_SCHEMA,
    REGISTRY_VERSION,
    STYLE_SCHEMA,
    STYLE_VERSION,
    CatalogEntry,
    CatalogOption,
    CatalogPropDef,
    CatalogSlotDef,
    ComponentPropsMap,
    ComponentStyleMap,
    ContractMeta,
    EnrichedNode,
    EnrichedPage,
    LayoutContract,
    LayoutContractMeta,
    LayoutSource,
    PageSource,
    RegistryContract,
    StyleContract,
)
from nocode_contracts.style_compiler import compile_styles
from nocode_contracts.tokens import (
    TokenIndex,
    build_reverse_token_index,
    build_token_index,
    generate_css_variable_map,
    resolve_text_styles,
)

logger = logging.getLogger(__name__)

_Contract = TypeVar("_Contract", LayoutContract, StyleContract, RegistryContract)

# Tree used for pages with neither a raw entry nor legacy content
PLACEHOLDER_NODE_TYPE = "stack"


@dataclass
class CompilerOutput:
    layout_contract: LayoutContract
    style_contract: StyleContract
    registry_contract: RegistryContract


@dataclass
class PageCompileResult:
    enriched_page: EnrichedPage
    styles: ComponentStyleMap = field(default_factory=dict)
    props: ComponentPropsMap = field(default_factory=dict)
    template_bindings: dict[str, list[str]] = field(default_factory=dict)


# =============================================================================
# Helpers
# =============================================================================


def _utc_now() -> datetime:
    return datetime.now(UTC)


def payload_hash(document: Mapping[str, Any]) -> str:
    """SHA-256 of a document's canonical JSON, envelope excluded."""
    payload = {key: value for key, value in document.items() if key != ENVELOPE_KEY}
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def _with_hash(contract: _Contract) -> _Contract:
    """Fill in the envelope hash from the serialized payload."""
    contract.meta.hash = payload_hash(contract.to_dict())
    return contract


def _coerce_layout(layout: LayoutSource | Mapping[str, Any]) -> LayoutSource:
    if isinstance(layout, LayoutSource):
        return layout
    return LayoutSource.model_validate(layout)


def _page_tree(
    page_id: str,
    page: PageSource,
    raw_entry: Mapping[str, Any] | None,
    token_index: TokenIndex,
    registry: ComponentRegistry,
    breakpoints: BreakpointSet,
) -> tuple[EnrichedNode, dict[str, list[str]]]:
    if raw_entry:
        result = enrich_entry(raw_entry, token_index, registry, breakpoints)
        return result.tree, result.template_bindings

    if page.content:
        logger.debug("Page %s has no raw entry, using legacy content", page_id)
        return enrich_legacy_node(page.content), {}

    logger.debug("Page %s has no content, using placeholder tree", page_id)
    return EnrichedNode(id=page_id, type=PLACEHOLDER_NODE_TYPE), {}


def _enriched_page(page_id: str, page: PageSource, tree: EnrichedNode) -> EnrichedPage:
    return EnrichedPage(
        id=page_id,
        label=page.label,
        route=page.route,
        browser_title=page.browser_title,
        content=tree,
    )


# =============================================================================
# Main compiler
# =============================================================================


def compile_contracts(
    layout: LayoutSource | Mapping[str, Any],
    entries: Mapping[str, Mapping[str, Any]] | None,
    registry: ComponentRegistry,
    config: CompilerConfig | None = None,
    clock: Callable[[], datetime] = _utc_now,
) -> CompilerOutput:
    """
    Compile the three contracts from editor state.

    Args:
        layout: Layout source (structure, tokens, textStyles, pages, variables)
        entries: Raw host entry per page id; pages without one use the
            legacy fallback
        registry: Component definitions
        config: Compiler settings (prefix, breakpoints, strict node ids)
        clock: Source of the generation timestamp

    Returns:
        CompilerOutput with the layout, style and registry contracts

    Raises:
        DuplicateNodeIdError: Only with ``strict_node_ids``, when two pages
            style the same node id
    """
    settings = config or CompilerConfig()
    source = _coerce_layout(layout)
    entries = entries or {}
    breakpoints = settings.breakpoint_set()
    prefix = settings.css_prefix
    started = time.perf_counter()

    token_index = build_token_index(source.tokens)
    reverse_index = build_reverse_token_index(token_index, prefix)

    pages: dict[str, EnrichedPage] = {}
    component_styles: ComponentStyleMap = {}
    component_props: ComponentPropsMap = {}
    style_owner: dict[str, str] = {}

    for page_id, page in source.pages.items():
        tree, _ = _page_tree(page_id, page, entries.get(page_id), token_index, registry, breakpoints)
        styles = compile_styles(tree, token_index, reverse_index, registry, breakpoints)
        pages[page_id] = _enriched_page(page_id, page, tree)

        for node_id in styles.component_styles.keys() | styles.component_props.keys():
            owner = style_owner.get(node_id)
            if owner is not None and owner != page_id:
                if settings.strict_node_ids:
                    raise DuplicateNodeIdError(node_id, owner, page_id)
                logger.warning(
                    "Node id %s appears in pages %s and %s; keeping styles from %s",
                    node_id,
                    owner,
                    page_id,
                    page_id,
                )
            style_owner[node_id] = page_id

        component_styles.update(styles.component_styles)
        component_props.update(styles.component_props)

    generated_at = clock().isoformat()

    layout_contract = LayoutContract(
        meta=LayoutContractMeta(
            schema_=LAYOUT_SCHEMA,
            version=LAYOUT_VERSION,
            generated_at=generated_at,
            page_count=len(pages),
        ),
        structure=source.structure,
        tokens=source.tokens,
        text_styles=source.text_styles,
        variables=source.variables,
        pages=pages,
    )

    style_contract = StyleContract(
        meta=ContractMeta(schema_=STYLE_SCHEMA, version=STYLE_VERSION, generated_at=generated_at),
        css_variables=generate_css_variable_map(source.tokens, prefix),
        component_styles=component_styles,
        component_props=component_props,
        resolved_text_styles=resolve_text_styles(source.text_styles, prefix),
        breakpoints=list(breakpoints),
    )

    registry_contract = RegistryContract(
        meta=ContractMeta(
            schema_=REGISTRY_SCHEMA, version=REGISTRY_VERSION, generated_at=generated_at
        ),
        catalog=build_catalog(registry),
    )

    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(
        "Compiled %d pages, %d styled nodes in %.1fms",
        len(pages),
        len(component_styles),
        elapsed_ms,
    )

    return CompilerOutput(
        layout_contract=_with_hash(layout_contract),
        style_contract=_with_hash(style_contract),
        registry_contract=_with_hash(registry_contract),
    )


def compile_page(
    page_id: str,
    page: PageSource | Mapping[str, Any],
    raw_entry: Mapping[str, Any] | None,
    tokens: Mapping[str, Any],
    registry: ComponentRegistry,
    config: CompilerConfig | None = None,
) -> PageCompileResult:
    """
    Compile a single page, e.g. for incremental updates while editing.

    Indexes are rebuilt from ``tokens`` on every call.
    """
    settings = config or CompilerConfig()
    page_source = page if isinstance(page, PageSource) else PageSource.model_validate(page)
    breakpoints = settings.breakpoint_set()

    token_index = build_token_index(tokens)
    reverse_index = build_reverse_token_index(token_index, settings.css_prefix)

    tree, bindings = _page_tree(
        page_id, page_source, raw_entry, token_index, registry, breakpoints
    )
    styles = compile_styles(tree, token_index, reverse_index, registry, breakpoints)

    return PageCompileResult(
        enriched_page=_enriched_page(page_id, page_source, tree),
        styles=styles.component_styles,
        props=styles.component_props,
        template_bindings=bindings,
    )


# =============================================================================
# Component catalog
# =============================================================================


def _catalog_options(options: list[Any] | None) -> list[CatalogOption] | None:
    if not options:
        return None
    normalized = []
    for option in options:
        if isinstance(option, Mapping):
            value = str(option.get("value", ""))
            normalized.append(CatalogOption(value=value, label=str(option.get("label", value))))
        else:
            normalized.append(CatalogOption(value=str(option), label=str(option)))
    return normalized


def build_catalog(registry: ComponentRegistry) -> dict[str, CatalogEntry]:
    """
    Describe every registered component: its props and its child slots.

    Keyed by host component id.
    """
    catalog: dict[str, CatalogEntry] = {}

    for definition in registry:
        props: dict[str, CatalogPropDef] = {}
        slots: dict[str, CatalogSlotDef] = {}

        for entry in definition.schema:
            if entry.is_slot:
                slots[entry.prop] = CatalogSlotDef(
                    accepts=entry.accepts or ["*"],
                    min=1 if entry.required else 0,
                )
                continue

            props[entry.prop] = CatalogPropDef(
                type=entry.type,
                label=entry.label,
                default=entry.default_value,
                responsive=True if entry.responsive else None,
                options=_catalog_options(entry.options),
            )

        catalog[definition.id] = CatalogEntry(
            type=definition.node_type,
            label=definition.label or definition.id,
            category=definition.category.lower() if definition.category else None,
            props=props,
            slots=slots,
        )

    return catalog
