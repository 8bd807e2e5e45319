"""
Layout contract validator.

Structural sanity check of an assembled layout document. Issues are
reported, never raised, and the document is only read.

Errors make the document invalid:
- page without a content tree
- node without a type
- missing structure or tokens section
- tree deeper than MAX_TREE_DEPTH

Warnings are advisory:
- unexpected schema version
- no pages
- no color or spacing tokens
- node without an id
- a {"tokenId": ...} wrapper that survived enrichment
- a binding whose prop does not exist
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from nocode_contracts.specs import ENVELOPE_KEY, LAYOUT_VERSION, LayoutContract

MAX_TREE_DEPTH = 50


@dataclass
class ValidationResult:
    """
    Result of validating a layout contract.

    Attributes:
        errors: Issues that make the contract unusable
        warnings: Issues worth reporting that do not block it
    """

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        """Whether the contract passed (no errors)."""
        return len(self.errors) == 0

    def add_error(self, message: str) -> None:
        self.errors.append(message)

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)

    def to_dict(self) -> dict[str, Any]:
        return {"valid": self.valid, "errors": list(self.errors), "warnings": list(self.warnings)}


def validate_layout_contract(document: Mapping[str, Any] | LayoutContract) -> ValidationResult:
    """
    Validate a layout contract document.

    Args:
        document: Parsed layout contract JSON, or a LayoutContract model

    Returns:
        ValidationResult listing errors and warnings
    """
    result = ValidationResult()

    if isinstance(document, LayoutContract):
        document = document.to_dict()
    if not isinstance(document, Mapping):
        result.add_error("Layout contract must be an object")
        return result

    envelope = document.get(ENVELOPE_KEY)
    version = envelope.get("version") if isinstance(envelope, Mapping) else None
    if version != LAYOUT_VERSION:
        result.add_warning(f"Unexpected schema version: {version}")

    pages = document.get("pages")
    if not isinstance(pages, Mapping) or not pages:
        result.add_warning("No pages defined in the contract")
        pages = pages if isinstance(pages, Mapping) else {}

    for page_id, page in pages.items():
        content = page.get("content") if isinstance(page, Mapping) else None
        if not content:
            result.add_error(f'Page "{page_id}" has no content tree')
            continue
        _validate_node(content, str(page_id), result, depth=0)

    tokens = document.get("tokens")
    if not tokens:
        result.add_error("No tokens defined")
    elif isinstance(tokens, Mapping):
        if not tokens.get("colors"):
            result.add_warning("No color tokens defined")
        if not tokens.get("spacing"):
            result.add_warning("No spacing tokens defined")

    if not document.get("structure"):
        result.add_error("No structure defined")

    return result


def _validate_node(node: Any, page_id: str, result: ValidationResult, depth: int) -> None:
    if depth > MAX_TREE_DEPTH:
        result.add_error(
            f'Page "{page_id}": tree exceeds {MAX_TREE_DEPTH} levels deep (possible cycle)'
        )
        return

    if not isinstance(node, Mapping):
        result.add_error(f'Page "{page_id}": node at depth {depth} is not an object')
        return

    node_id = node.get("id")
    if not node_id:
        result.add_warning(f'Page "{page_id}": node at depth {depth} has no id')

    if not node.get("type"):
        result.add_error(f'Page "{page_id}": node "{node_id}" has no type')

    props = node.get("props")
    props = props if isinstance(props, Mapping) else {}
    for key, value in props.items():
        if isinstance(value, Mapping) and "tokenId" in value:
            result.add_warning(
                f'Page "{page_id}": node "{node_id}" prop "{key}" '
                f'has unresolved tokenId "{value["tokenId"]}"'
            )

    bindings = node.get("bindings")
    for binding in bindings if isinstance(bindings, list) else []:
        if not isinstance(binding, str) or binding not in props:
            result.add_warning(
                f'Page "{page_id}": node "{node_id}" declares binding "{binding}" '
                f"but the prop does not exist"
            )

    children = node.get("children")
    if isinstance(children, list):
        for child in children:
            _validate_node(child, page_id, result, depth + 1)
