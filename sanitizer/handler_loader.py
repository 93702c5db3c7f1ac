#!/usr/bin/env python3
r"""
Build handler registries from JSON handler dictionaries.

Each entry of the "handlers" section describes one regex handler:

    {
        "name": "resolution",
        "pattern": "\\b\\d{3,4}p\\b",
        "flags": ["IGNORECASE"],
        "group": 1,
        "transformer": "lowercase",              # or {"name": "value", "args": ["1080p"]}
        "options": {"remove": true}
    }

Entries are registered in file order, which is the order handlers run in.
"""

import logging
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Union

import regex

from .dictionary_loader import DictionaryLoader
from .handler import HandlerConfigurationError
from .normalizer import TitleNormalizer
from .parser import TitleParser
from .registry import HandlerRegistry
from .transformers import TRANSFORMER_FACTORIES, TRANSFORMERS, Transformer

logger = logging.getLogger(__name__)

DEFAULT_HANDLERS = "handlers.json"


def resolve_transformer(reference: Union[str, Mapping[str, Any], None]) -> Optional[Transformer]:
    """
    Turn a transformer reference from a dictionary into a callable.

    Args:
        reference: Transformer name, {"name": ..., "args": [...]} for factories, or None

    Returns:
        The transformer, or None for the default (none)

    Raises:
        HandlerConfigurationError: For unknown names or malformed references
    """
    if reference is None:
        return None

    if isinstance(reference, str):
        if reference in TRANSFORMERS:
            return TRANSFORMERS[reference]
        if reference in TRANSFORMER_FACTORIES:
            return TRANSFORMER_FACTORIES[reference]()
        raise HandlerConfigurationError(f"Unknown transformer '{reference}'")

    if isinstance(reference, Mapping):
        name = reference.get("name")
        args = list(reference.get("args") or [])
        if name in TRANSFORMERS and not args:
            return TRANSFORMERS[name]
        if name not in TRANSFORMER_FACTORIES:
            raise HandlerConfigurationError(f"Unknown transformer factory '{name}'")
        if name in ("array", "uniq_concat"):
            # Their argument is itself a transformer reference
            args = [resolve_transformer(arg) for arg in args]
        return TRANSFORMER_FACTORIES[name](*args)

    raise HandlerConfigurationError(f"Invalid transformer reference: {reference!r}")


def compile_flags(flag_names: Optional[Iterable[str]]) -> int:
    """Combine regex flag names (e.g. "IGNORECASE") into a flags value."""
    flags = 0
    for flag_name in flag_names or []:
        flag = getattr(regex, str(flag_name).upper(), None)
        if not isinstance(flag, int):
            raise HandlerConfigurationError(f"Unknown regex flag '{flag_name}'")
        flags |= flag
    return flags


def register_entry(registry: HandlerRegistry, entry: Mapping[str, Any], position: int = 0) -> None:
    """Register one dictionary entry on the registry."""
    name = entry.get("name")
    pattern = entry.get("pattern")
    if not name or not pattern:
        raise HandlerConfigurationError(f"handlers[{position}]: 'name' and 'pattern' are required")

    try:
        compiled = regex.compile(pattern, compile_flags(entry.get("flags")))
    except regex.error as exc:
        raise HandlerConfigurationError(f"handlers[{position}] ({name}): invalid pattern: {exc}") from exc

    registry.add_handler(
        name,
        compiled,
        resolve_transformer(entry.get("transformer")),
        entry.get("options"),
        group=int(entry.get("group", 1))
    )


def build_registry(entries: Iterable[Mapping[str, Any]]) -> HandlerRegistry:
    """Build a registry from handler entries, in order."""
    registry = HandlerRegistry()
    for position, entry in enumerate(entries):
        register_entry(registry, entry, position)
    return registry


def load_handlers(dictionary_name: Union[str, Path] = DEFAULT_HANDLERS) -> HandlerRegistry:
    """
    Load a handler dictionary into a new registry.

    A missing or unreadable dictionary gives an empty registry (the parser then
    only normalizes); a readable dictionary with bad entries raises.
    """
    entries = DictionaryLoader.get_section("handlers", dictionary_name)
    if entries is None:
        logger.warning("No handlers section found in %s; parser will only normalize titles", dictionary_name)
        return HandlerRegistry()

    registry = build_registry(entries)
    logger.debug("Loaded %d handlers from %s", len(registry), dictionary_name)
    return registry


def build_default_parser(
    dictionary_name: Union[str, Path] = DEFAULT_HANDLERS,
    normalizer: Optional[TitleNormalizer] = None
) -> TitleParser:
    """Create a parser configured with the handler catalog from a dictionary."""
    return TitleParser(registry=load_handlers(dictionary_name), normalizer=normalizer)
