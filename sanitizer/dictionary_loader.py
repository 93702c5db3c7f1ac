#!/usr/bin/env python3
"""
Dictionary loader utility for centralized dictionary loading and caching.

Provides a single point of access for the JSON dictionaries that configure
the sanitizer (handler catalog, normalizer character ranges) with error
handling and caching so repeated parser construction stays cheap.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)

DICTIONARY_DIR = Path(__file__).resolve().parent / "dictionaries"


class DictionaryLoader:
    """Centralized dictionary loader with caching support."""

    # Cache for loaded dictionaries, keyed by resolved path
    _cache: Dict[str, Any] = {}

    # Dictionaries shipped with the package
    BUILTIN_DICTIONARIES = (
        "handlers.json",
        "normalizer.json",
    )

    @staticmethod
    def get_dictionary_path(dictionary_name: Union[str, Path] = "handlers.json") -> Path:
        """
        Get the absolute path to a dictionary file.

        Bare names resolve inside the package's dictionaries folder; anything
        that already looks like a path (absolute, or with a parent folder) is
        used as given.

        Args:
            dictionary_name: Name of the dictionary file, or a path to one

        Returns:
            Absolute path to the dictionary file
        """
        candidate = Path(dictionary_name)
        if candidate.is_absolute() or len(candidate.parts) > 1:
            return candidate.resolve()
        return DICTIONARY_DIR / candidate

    @classmethod
    def load_dictionary(
        cls,
        dictionary_name: Union[str, Path] = "handlers.json",
        use_cache: bool = True
    ) -> Optional[Any]:
        """
        Load a dictionary from the dictionaries folder.

        Args:
            dictionary_name: Name of the dictionary file to load
            use_cache: Whether to use cached version if available

        Returns:
            Dictionary contents (can be dict, list, or other JSON types), or None if loading fails
        """
        dictionary_path = cls.get_dictionary_path(dictionary_name)
        cache_key = str(dictionary_path)

        if use_cache and cache_key in cls._cache:
            return cls._cache[cache_key]

        try:
            with open(dictionary_path, 'r', encoding='utf-8') as f:
                dictionary = json.load(f)
        except (FileNotFoundError, json.JSONDecodeError, IOError) as exc:
            logger.warning("Could not load dictionary %s: %s", dictionary_path, exc)
            return None

        logger.debug("Loaded dictionary %s", dictionary_path)
        if use_cache:
            cls._cache[cache_key] = dictionary

        return dictionary

    @classmethod
    def get_section(
        cls,
        section_name: str,
        dictionary_name: Union[str, Path] = "handlers.json",
        use_cache: bool = True
    ) -> Any:
        """
        Load a specific section from a dictionary.

        Args:
            section_name: Name of the section to retrieve (e.g., 'handlers')
            dictionary_name: Name of the dictionary file
            use_cache: Whether to use cached version if available

        Returns:
            The requested section, or None if the dictionary or section is missing
        """
        dictionary = cls.load_dictionary(dictionary_name, use_cache)
        if not isinstance(dictionary, dict):
            return None

        return dictionary.get(section_name)

    @classmethod
    def clear_cache(cls, dictionary_name: Optional[Union[str, Path]] = None) -> None:
        """
        Clear the dictionary cache.

        Args:
            dictionary_name: Specific dictionary to clear, or None to clear all
        """
        if dictionary_name:
            cls._cache.pop(str(cls.get_dictionary_path(dictionary_name)), None)
        else:
            cls._cache.clear()

    @classmethod
    def preload_all(cls) -> None:
        """Preload the built-in dictionaries into cache."""
        for dictionary_name in cls.BUILTIN_DICTIONARIES:
            cls.load_dictionary(dictionary_name, use_cache=True)
