"""
nocode-contracts - compile no-code editor state into runtime contracts.

Turns the editor's raw per-page node trees, design tokens and component
definitions into three versioned JSON documents a runtime can render
without the editor: a layout contract, a style contract and a component
registry contract.
"""

from __future__ import annotations

from ._version import get_version
from .assembler import CompilerOutput, PageCompileResult, build_catalog, compile_contracts, compile_page
from .breakpoints import DEFAULT_BREAKPOINTS, Breakpoint, BreakpointSet
from .config import CompilerConfig, load_config
from .errors import (
    BreakpointError,
    ConfigError,
    ContractError,
    DuplicateNodeIdError,
    InputError,
    RegistryError,
)
from .registry import ComponentDefinition, ComponentRegistry, Device, StyleResolver, StyleResult
from .validator import ValidationResult, validate_layout_contract

__version__ = get_version()

__all__ = [
    "__version__",
    # Compiler
    "compile_contracts",
    "compile_page",
    "build_catalog",
    "CompilerOutput",
    "PageCompileResult",
    "validate_layout_contract",
    "ValidationResult",
    # Definitions
    "ComponentDefinition",
    "ComponentRegistry",
    "Device",
    "StyleResolver",
    "StyleResult",
    # Breakpoints and config
    "Breakpoint",
    "BreakpointSet",
    "DEFAULT_BREAKPOINTS",
    "CompilerConfig",
    "load_config",
    # Errors
    "ContractError",
    "ConfigError",
    "InputError",
    "RegistryError",
    "BreakpointError",
    "DuplicateNodeIdError",
]
