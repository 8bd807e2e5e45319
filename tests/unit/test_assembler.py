"""Tests for contract assembly."""

from __future__ import annotations

import copy
import json
import logging
from datetime import UTC, datetime

import pytest

from nocode_contracts.assembler import (
    build_catalog,
    compile_contracts,
    compile_page,
    payload_hash,
)
from nocode_contracts.breakpoints import Breakpoint
from nocode_contracts.config import CompilerConfig
from nocode_contracts.errors import DuplicateNodeIdError
from nocode_contracts.registry import ComponentRegistry
from nocode_contracts.specs import LayoutSource

FIXED_TIME = datetime(2026, 1, 15, 9, 30, tzinfo=UTC)


def fixed_clock() -> datetime:
    return FIXED_TIME


@pytest.fixture
def output(layout_source, entries, registry):
    return compile_contracts(layout_source, entries, registry, clock=fixed_clock)


class TestLayoutContract:
    def test_envelope(self, output) -> None:
        doc = output.layout_contract.to_dict()
        meta = doc["$contract"]

        assert meta["schema"] == "layout-contract"
        assert meta["version"] == "3.0.0"
        assert meta["generatedAt"] == "2026-01-15T09:30:00+00:00"
        assert meta["pageCount"] == 3
        assert len(meta["hash"]) == 64

    def test_payload_passes_through(self, output, tokens) -> None:
        doc = output.layout_contract.to_dict()

        assert doc["structure"]["regions"]["header"] == {"enabled": True}
        assert doc["tokens"] == tokens
        assert doc["textStyles"]["body"]["description"] == "Body copy"
        assert doc["variables"] == {"user": {"name": "string"}}

    def test_pages(self, output) -> None:
        pages = output.layout_contract.to_dict()["pages"]

        assert list(pages) == ["dashboard", "settings", "empty"]
        assert pages["dashboard"]["browserTitle"] == "Dashboard"
        assert pages["dashboard"]["content"]["id"] == "stack-root"
        assert pages["dashboard"]["content"]["props"]["gap"] == "$tokens.spacing.lg"

    def test_legacy_page_fallback(self, output) -> None:
        content = output.layout_contract.pages["settings"].content

        assert content.id == "settings-root"
        assert content.style == {"padding": "8px"}
        assert content.bindings == ["title"]

    def test_placeholder_page(self, output) -> None:
        content = output.layout_contract.to_dict()["pages"]["empty"]["content"]
        assert content == {"id": "empty", "type": "stack"}


class TestStyleContract:
    def test_envelope(self, output) -> None:
        meta = output.style_contract.to_dict()["$contract"]
        assert meta["schema"] == "style-contract"
        assert meta["version"] == "1.0.0"
        assert "pageCount" not in meta

    def test_end_to_end_gap(self, output) -> None:
        root = output.style_contract.component_styles["stack-root"]["Root"]
        assert root["xl"]["gap"] == "var(--ns-spacing-lg)"
        assert root["xs"]["gap"] == "var(--ns-spacing-sm)"

    def test_styles_merged_across_pages(self, output) -> None:
        styles = output.style_contract.component_styles

        assert set(styles) == {
            "stack-root",
            "heading-1",
            "row-stats",
            "stat-1",
            "grid-1",
            "settings-root",
            "settings-heading",
            "empty",
        }
        assert styles["settings-root"]["Root"]["xl"]["gap"] == "var(--ns-spacing-md)"
        assert output.style_contract.component_props["settings-heading"] == {"xl": {"as": "h2"}}

    def test_css_variables_and_text_styles(self, output) -> None:
        doc = output.style_contract.to_dict()

        assert doc["cssVariables"]["--ns-spacing-lg"] == "24px"
        assert doc["resolvedTextStyles"]["heading-1"]["fontSize"] == "var(--ns-font-size-3xl)"
        assert "description" not in doc["resolvedTextStyles"]["body"]

    def test_breakpoints_published(self, output) -> None:
        breakpoints = output.style_contract.to_dict()["breakpoints"]
        assert breakpoints[0] == {"id": "xl", "minWidth": 1440, "label": "Wide"}
        assert [bp["id"] for bp in breakpoints] == ["xl", "lg", "md", "sm", "xs"]

    def test_custom_prefix(self, layout_source, entries, registry) -> None:
        output = compile_contracts(
            layout_source, entries, registry, CompilerConfig(css_prefix="acme")
        )
        root = output.style_contract.component_styles["stack-root"]["Root"]

        assert root["xl"]["gap"] == "var(--acme-spacing-lg)"
        assert "--acme-accent" in output.style_contract.css_variables


class TestRegistryContract:
    def test_envelope(self, output) -> None:
        meta = output.registry_contract.to_dict()["$contract"]
        assert meta["schema"] == "ui-registry-contract"
        assert meta["version"] == "2.0.0"

    def test_catalog(self, registry) -> None:
        catalog = {key: entry.to_dict() for key, entry in build_catalog(registry).items()}
        stack = catalog["NsStack"]

        assert stack["type"] == "stack"
        assert stack["label"] == "Stack"
        assert stack["category"] == "layout"
        assert stack["props"]["gap"] == {"type": "space", "label": "Gap", "responsive": True}
        assert stack["slots"] == {"Children": {"accepts": ["*"], "min": 0}}

    def test_catalog_options_normalized(self, registry) -> None:
        catalog = build_catalog(registry)

        align = catalog["NsRow"].props["align"].to_dict()
        assert align["options"][0] == {"value": "start", "label": "start"}
        level = catalog["NsHeading"].props["level"].to_dict()
        assert level["options"][0] == {"value": "1", "label": "H1"}
        assert level["default"] == "2"

    def test_required_slots(self, registry) -> None:
        catalog = build_catalog(registry)

        section = catalog["NsSection"].to_dict()
        assert section["slots"]["Children"] == {"accepts": ["grid", "row"], "min": 1}
        assert section["props"] == {}
        assert catalog["NsButton"].to_dict()["slots"]["Icon"] == {"accepts": ["*"], "min": 0}

    def test_default_false_is_published(self, registry) -> None:
        wrap = build_catalog(registry)["NsRow"].props["wrap"].to_dict()
        assert wrap["default"] is False


class TestDeterminism:
    def test_identical_inputs_give_identical_hashes(self, layout_source, entries, registry) -> None:
        first = compile_contracts(layout_source, entries, registry, clock=fixed_clock)
        later = compile_contracts(
            layout_source,
            entries,
            registry,
            clock=lambda: datetime(2030, 6, 1, tzinfo=UTC),
        )

        assert first.layout_contract.meta.hash == later.layout_contract.meta.hash
        assert first.style_contract.meta.hash == later.style_contract.meta.hash
        assert first.registry_contract.meta.hash == later.registry_contract.meta.hash
        assert first.layout_contract.meta.generated_at != later.layout_contract.meta.generated_at

    def test_hash_tracks_payload(self, layout_source, entries, registry) -> None:
        first = compile_contracts(layout_source, entries, registry)
        changed = copy.deepcopy(layout_source)
        changed["tokens"]["colors"]["accent"]["value"] = "#ff0000"
        second = compile_contracts(changed, entries, registry)

        assert first.style_contract.meta.hash != second.style_contract.meta.hash

    def test_hash_matches_document(self, output) -> None:
        doc = output.style_contract.to_dict()
        assert doc["$contract"]["hash"] == payload_hash(doc)

    def test_documents_are_json_serializable(self, output) -> None:
        for contract in (output.layout_contract, output.style_contract, output.registry_contract):
            json.dumps(contract.to_dict())

    def test_inputs_not_mutated(self, layout_source, entries, registry) -> None:
        layout_snapshot = copy.deepcopy(layout_source)
        entries_snapshot = copy.deepcopy(entries)
        compile_contracts(layout_source, entries, registry)

        assert layout_source == layout_snapshot
        assert entries == entries_snapshot

    def test_accepts_layout_source_model(self, layout_source, entries, registry) -> None:
        source = LayoutSource.model_validate(layout_source)
        output = compile_contracts(source, entries, registry)
        assert output.layout_contract.meta.page_count == 3


class TestNodeIdCollisions:
    @pytest.fixture
    def colliding_source(self, layout_source, legacy_content):
        source = copy.deepcopy(layout_source)
        clash = copy.deepcopy(legacy_content)
        clash["id"] = "stack-root"
        clash["children"] = []
        source["pages"]["settings"]["content"] = clash
        return source

    def test_later_page_wins_with_warning(self, colliding_source, entries, registry, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger="nocode_contracts.assembler"):
            output = compile_contracts(colliding_source, entries, registry)

        root = output.style_contract.component_styles["stack-root"]["Root"]
        assert root["xl"]["gap"] == "var(--ns-spacing-md)"
        assert "xs" not in root
        assert "dashboard" in caplog.text
        assert "settings" in caplog.text

    def test_strict_mode_raises(self, colliding_source, entries, registry) -> None:
        config = CompilerConfig(strict_node_ids=True)

        with pytest.raises(DuplicateNodeIdError) as exc_info:
            compile_contracts(colliding_source, entries, registry, config)

        assert exc_info.value.node_id == "stack-root"
        assert exc_info.value.first_page == "dashboard"
        assert exc_info.value.second_page == "settings"


class TestCompileOptions:
    def test_summary_logged(self, layout_source, entries, registry, caplog) -> None:
        with caplog.at_level(logging.INFO, logger="nocode_contracts.assembler"):
            compile_contracts(layout_source, entries, registry)

        assert "Compiled 3 pages, 8 styled nodes" in caplog.text

    def test_custom_breakpoints(self, layout_source, entries, registry) -> None:
        config = CompilerConfig(
            breakpoints=[
                Breakpoint(id="desktop", min_width=1024),
                Breakpoint(id="mobile", min_width=0, device_width=375),
            ]
        )
        output = compile_contracts(layout_source, entries, registry, config)

        assert [bp.id for bp in output.style_contract.breakpoints] == ["desktop", "mobile"]
        # raw responsive keys for other tiers are ignored
        assert output.layout_contract.pages["dashboard"].content.responsive is None

    def test_without_entries_or_registry(self, layout_source) -> None:
        output = compile_contracts(layout_source, None, ComponentRegistry())

        assert output.style_contract.component_styles == {}
        assert output.registry_contract.catalog == {}
        dashboard = output.layout_contract.pages["dashboard"].content
        assert dashboard.to_dict() == {"id": "dashboard", "type": "stack"}


class TestCompilePage:
    def test_single_page(self, entry, tokens, registry) -> None:
        page = {"id": "dashboard", "label": "Dashboard", "route": "/"}
        result = compile_page("dashboard", page, entry, tokens, registry)

        assert result.enriched_page.id == "dashboard"
        assert result.enriched_page.content.id == "stack-root"
        assert result.styles["stack-root"]["Root"]["xs"]["gap"] == "var(--ns-spacing-sm)"
        assert result.props["heading-1"]["md"] == {"as": "h2"}
        assert result.template_bindings["stat-1"] == ["label", "value"]

    def test_matches_full_compile(self, layout_source, entries, registry, tokens) -> None:
        output = compile_contracts(layout_source, entries, registry)
        result = compile_page(
            "dashboard", layout_source["pages"]["dashboard"], entries["dashboard"], tokens, registry
        )

        assert result.enriched_page == output.layout_contract.pages["dashboard"]
        for node_id, styles in result.styles.items():
            assert output.style_contract.component_styles[node_id] == styles

    def test_legacy_page(self, legacy_content, tokens, registry) -> None:
        page = {"id": "settings", "content": legacy_content}
        result = compile_page("settings", page, None, tokens, registry)

        assert result.enriched_page.content.id == "settings-root"
        assert result.template_bindings == {}
        assert "settings-root" in result.styles
