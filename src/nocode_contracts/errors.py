"""
Error types for contract compilation.

The compile pipeline itself has no fatal paths: styling failures and
malformed JSON props are downgraded to log records, and document issues
surface as validator output. These exceptions cover the edges around it
(configuration, input loading, registry construction, strict mode).
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


class ContractError(Exception):
    """Base exception for all contract compiler errors."""

    def __init__(self, message: str, context: ErrorContext | None = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}: {self.message}"
        return self.message


class ConfigError(ContractError):
    """
    Raised when a contracts.toml file cannot be used.

    Examples:
    - Invalid TOML syntax
    - Wrong value types (indent as string, breakpoints not a list)
    """

    pass


class InputError(ContractError):
    """
    Raised when compiler input cannot be loaded.

    Examples:
    - Layout source file missing or not JSON/YAML
    - Entries file that is not a mapping of page id to entry
    - Definitions import path that does not resolve
    """

    pass


class RegistryError(ContractError):
    """
    Raised when a component registry cannot be built.

    Examples:
    - Two definitions sharing one component id
    - Two definitions claiming the same semantic type
    """

    pass


class BreakpointError(ContractError):
    """Raised when a breakpoint tier list is empty, duplicated or out of order."""

    pass


class DuplicateNodeIdError(ContractError):
    """Raised in strict mode when two pages produce styles for the same node id."""

    def __init__(self, node_id: str, first_page: str, second_page: str):
        self.node_id = node_id
        self.first_page = first_page
        self.second_page = second_page
        super().__init__(
            f"Node id '{node_id}' appears in page '{first_page}' and page '{second_page}'"
        )


@dataclass
class ErrorContext:
    """
    Where an input error came from.

    Attributes:
        file: Path of the file being read
        key: Optional dotted key inside the file (e.g. "compiler.breakpoints")
    """

    file: Path
    key: str | None = None

    def format(self) -> str:
        """Format as "path" or "path [key]"."""
        if self.key:
            return f"{self.file} [{self.key}]"
        return str(self.file)
