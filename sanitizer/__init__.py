"""
Title sanitizer package.

This package contains the extraction pipeline modules:
- registry: Ordered handler registry
- handler: Regex handler adapter, custom handlers and their data types
- parser: Boundary resolution over the registered handlers
- normalizer: Title cleanup cascade
- transformers: Stock transformer functions for regex handlers
- handler_loader: Handler registries built from JSON dictionaries
- dictionary_loader: Cached JSON dictionary access
- excel_writer: Excel reports of parse results
"""

# Explicit imports make the public API clear and prevent namespace pollution
from .handler import (
    FunctionHandler,
    HandlerConfigurationError,
    HandlerContext,
    HandlerOptions,
    MatchedEntry,
    MatchOutcome,
    RegexHandler,
)
from .registry import HandlerRegistry
from .normalizer import CharacterRange, TitleNormalizer, clean_title
from .parser import TitleParser
from .handler_loader import build_default_parser, build_registry, load_handlers
from .dictionary_loader import DictionaryLoader
from . import transformers

__all__ = [
    'FunctionHandler',
    'HandlerConfigurationError',
    'HandlerContext',
    'HandlerOptions',
    'MatchedEntry',
    'MatchOutcome',
    'RegexHandler',
    'HandlerRegistry',
    'CharacterRange',
    'TitleNormalizer',
    'clean_title',
    'TitleParser',
    'build_default_parser',
    'build_registry',
    'load_handlers',
    'DictionaryLoader',
    'transformers',
]
