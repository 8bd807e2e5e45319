"""
Input loading for the command line.

The compiler core does no I/O; these helpers read the documents it is
fed (layout source, raw host entries, contracts) from JSON or YAML files
and import component definitions from a ``module:attribute`` path.
"""

from __future__ import annotations

import importlib
import json
import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from nocode_contracts.errors import ErrorContext, InputError, RegistryError
from nocode_contracts.registry import ComponentDefinition, ComponentRegistry

logger = logging.getLogger(__name__)

YAML_SUFFIXES = frozenset({".yaml", ".yml"})
DOCUMENT_SUFFIXES = frozenset({".json"}) | YAML_SUFFIXES


def load_document(path: Path) -> dict[str, Any]:
    """
    Read a JSON or YAML file that must hold a mapping.

    The format is chosen by file suffix; anything that is not .yaml/.yml
    is parsed as JSON. Key order is preserved.

    Raises:
        InputError: If the file is missing, unparsable or not a mapping
    """
    if not path.is_file():
        raise InputError("File not found", ErrorContext(file=path))

    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() in YAML_SUFFIXES:
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (yaml.YAMLError, ValueError) as e:
        raise InputError(f"Cannot parse file: {e}", ErrorContext(file=path)) from e

    if not isinstance(data, dict):
        raise InputError(
            f"Expected an object at the top level, got {type(data).__name__}",
            ErrorContext(file=path),
        )
    return data


def load_entries(path: Path | None) -> dict[str, dict[str, Any]]:
    """
    Load raw host entries keyed by page id.

    ``path`` is either one file mapping page id to entry, or a directory
    of ``<page_id>.json`` / ``<page_id>.yaml`` files, one entry each.
    """
    if path is None:
        return {}

    if path.is_dir():
        entries: dict[str, dict[str, Any]] = {}
        for file in sorted(path.iterdir()):
            if file.suffix.lower() not in DOCUMENT_SUFFIXES:
                continue
            entries[file.stem] = load_document(file)
        logger.debug("Loaded %d entries from %s", len(entries), path)
        return entries

    data = load_document(path)
    for page_id, entry in data.items():
        if not isinstance(entry, dict):
            raise InputError(
                f"Entry for page '{page_id}' must be an object", ErrorContext(file=path, key=page_id)
            )
    return data


def load_registry(target: str | None) -> ComponentRegistry:
    """
    Import component definitions from ``"package.module:attribute"``.

    The attribute may be a ComponentRegistry, or an iterable of
    ComponentDefinition instances or definition mappings. No target
    gives an empty registry: nothing is styled and ids map to themselves.

    Raises:
        InputError: If the path does not resolve or holds something else
    """
    if not target:
        logger.warning("No component definitions given; styles will be empty")
        return ComponentRegistry()

    module_name, sep, attribute = target.partition(":")
    if not sep or not module_name or not attribute:
        raise InputError(f"Definitions must be given as 'module:attribute', got '{target}'")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise InputError(f"Cannot import definitions module '{module_name}': {e}") from e

    try:
        value = getattr(module, attribute)
    except AttributeError as e:
        raise InputError(f"Module '{module_name}' has no attribute '{attribute}'") from e

    if isinstance(value, ComponentRegistry):
        return value
    if isinstance(value, Mapping) or not isinstance(value, Iterable):
        raise InputError(
            f"'{target}' must be a ComponentRegistry or a list of definitions, "
            f"got {type(value).__name__}"
        )

    definitions = []
    for item in value:
        if isinstance(item, ComponentDefinition):
            definitions.append(item)
        elif isinstance(item, Mapping):
            try:
                definitions.append(ComponentDefinition(**item))
            except (TypeError, ValidationError) as e:
                raise InputError(f"Invalid definition in '{target}': {e}") from e
        else:
            raise InputError(f"'{target}' contains a {type(item).__name__}, not a definition")

    try:
        return ComponentRegistry(definitions)
    except RegistryError as e:
        raise InputError(f"Invalid definitions in '{target}': {e.message}") from e
