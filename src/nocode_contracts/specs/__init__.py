"""
Contract document types.

This module exports the node, page and contract models.
"""

from nocode_contracts.specs.base import ContractModel
from nocode_contracts.specs.contracts import (
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
    LayoutContract,
    LayoutContractMeta,
    RegistryContract,
    StyleContract,
)
from nocode_contracts.specs.nodes import EnrichedNode, EnrichedPage, LayoutSource, PageSource

__all__ = [
    "ContractModel",
    # Nodes and pages
    "EnrichedNode",
    "EnrichedPage",
    "PageSource",
    "LayoutSource",
    # Envelope
    "ENVELOPE_KEY",
    "ContractMeta",
    "LayoutContractMeta",
    # Documents
    "LayoutContract",
    "StyleContract",
    "RegistryContract",
    "ComponentStyleMap",
    "ComponentPropsMap",
    "LAYOUT_SCHEMA",
    "LAYOUT_VERSION",
    "STYLE_SCHEMA",
    "STYLE_VERSION",
    "REGISTRY_SCHEMA",
    "REGISTRY_VERSION",
    # Catalog
    "CatalogEntry",
    "CatalogPropDef",
    "CatalogSlotDef",
    "CatalogOption",
]
