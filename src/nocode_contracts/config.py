"""
Compiler configuration.

Read from ``contracts.toml`` (or the file named by NOCODE_CONTRACTS_CONFIG):

    [compiler]
    css_prefix = "ns"
    strict_node_ids = false

    [[compiler.breakpoints]]
    id = "xl"
    min_width = 1440
    label = "Wide"
    device_width = 1440

    [output]
    directory = "contracts"
    css_file = "contracts.css"
    indent = 2

Every key is optional; a missing file means defaults.
"""

from __future__ import annotations

import logging
import os
import re
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from nocode_contracts.breakpoints import DEFAULT_BREAKPOINTS, Breakpoint, BreakpointSet
from nocode_contracts.errors import BreakpointError, ConfigError, ErrorContext
from nocode_contracts.tokens import DEFAULT_CSS_PREFIX

logger = logging.getLogger(__name__)

CONFIG_FILE = "contracts.toml"
CONFIG_ENV_VAR = "NOCODE_CONTRACTS_CONFIG"

_PREFIX_RE = re.compile(r"^[a-z][a-z0-9-]*$")


@dataclass
class OutputConfig:
    """Where compiled contracts are written."""

    directory: str = "contracts"
    layout_file: str = "layout-contract.json"
    style_file: str = "style-contract.json"
    registry_file: str = "ui-registry-contract.json"
    css_file: str = ""  # empty: no stylesheet
    indent: int = 2


@dataclass
class CompilerConfig:
    """Compiler settings."""

    css_prefix: str = DEFAULT_CSS_PREFIX
    strict_node_ids: bool = False
    breakpoints: list[Breakpoint] = field(default_factory=lambda: list(DEFAULT_BREAKPOINTS))
    output: OutputConfig = field(default_factory=OutputConfig)

    def breakpoint_set(self) -> BreakpointSet:
        return BreakpointSet(self.breakpoints)


def get_config_path(project_root: Path | None = None) -> Path:
    """Config path from the environment, else contracts.toml in ``project_root``."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    return (project_root or Path.cwd()) / CONFIG_FILE


def load_config(path: Path | None = None) -> CompilerConfig:
    """
    Load compiler configuration.

    Args:
        path: Explicit config file; defaults to get_config_path()

    Returns:
        CompilerConfig (defaults when the file does not exist)

    Raises:
        ConfigError: If the file is not valid TOML or has wrong value types
    """
    config_path = path or get_config_path()
    if not config_path.exists():
        if path is not None:
            raise ConfigError("Config file not found", ErrorContext(file=config_path))
        logger.debug("No config at %s, using defaults", config_path)
        return CompilerConfig()

    try:
        data = tomllib.loads(config_path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML: {e}", ErrorContext(file=config_path)) from e

    return parse_config(data, config_path)


def _section(data: dict[str, Any], name: str, source: Path) -> dict[str, Any]:
    section = data.get(name, {})
    if not isinstance(section, dict):
        raise ConfigError(f"[{name}] must be a table", ErrorContext(file=source, key=name))
    return section


def parse_config(data: dict[str, Any], source: Path | None = None) -> CompilerConfig:
    """Build a CompilerConfig from already-parsed TOML data."""
    source = source or Path(CONFIG_FILE)
    compiler_data = _section(data, "compiler", source)
    output_data = _section(data, "output", source)

    css_prefix = compiler_data.get("css_prefix", DEFAULT_CSS_PREFIX)
    if not isinstance(css_prefix, str) or not _PREFIX_RE.match(css_prefix):
        raise ConfigError(
            f"css_prefix must be lowercase letters, digits and dashes, got {css_prefix!r}",
            ErrorContext(file=source, key="compiler.css_prefix"),
        )

    strict = compiler_data.get("strict_node_ids", False)
    if not isinstance(strict, bool):
        raise ConfigError(
            "strict_node_ids must be true or false",
            ErrorContext(file=source, key="compiler.strict_node_ids"),
        )

    breakpoints = list(DEFAULT_BREAKPOINTS)
    if "breakpoints" in compiler_data:
        raw_breakpoints = compiler_data["breakpoints"]
        if not isinstance(raw_breakpoints, list):
            raise ConfigError(
                "breakpoints must be an array of tables",
                ErrorContext(file=source, key="compiler.breakpoints"),
            )
        try:
            breakpoints = list(BreakpointSet.from_dicts(raw_breakpoints))
        except (ValidationError, BreakpointError) as e:
            raise ConfigError(
                f"Invalid breakpoints: {e}", ErrorContext(file=source, key="compiler.breakpoints")
            ) from e

    defaults = OutputConfig()
    indent = output_data.get("indent", defaults.indent)
    if not isinstance(indent, int) or isinstance(indent, bool) or indent < 0:
        raise ConfigError(
            "indent must be a non-negative integer", ErrorContext(file=source, key="output.indent")
        )

    output = OutputConfig(
        directory=str(output_data.get("directory", defaults.directory)),
        layout_file=str(output_data.get("layout_file", defaults.layout_file)),
        style_file=str(output_data.get("style_file", defaults.style_file)),
        registry_file=str(output_data.get("registry_file", defaults.registry_file)),
        css_file=str(output_data.get("css_file", defaults.css_file)),
        indent=indent,
    )

    return CompilerConfig(
        css_prefix=css_prefix,
        strict_node_ids=strict,
        breakpoints=breakpoints,
        output=output,
    )
