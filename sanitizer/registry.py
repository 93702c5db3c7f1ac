#!/usr/bin/env python3
"""
Handler registry: the ordered list of handlers a parser runs.

Registration order matters. It is the precedence order for the title
boundary and the only tie-break between overlapping matches.
"""

import logging
from typing import Any, Callable, Iterator, List, Mapping, Optional, Union

from .handler import (
    PATTERN_TYPES,
    FunctionHandler,
    HandlerConfigurationError,
    HandlerOptions,
    RegexHandler,
)
from .transformers import Transformer

logger = logging.getLogger(__name__)

Handler = Union[RegexHandler, FunctionHandler]
OptionsLike = Union[HandlerOptions, Mapping[str, Any]]


class HandlerRegistry:
    """Ordered, reusable collection of named handlers."""

    def __init__(self):
        self.handlers: List[Handler] = []

    def add_handler(
        self,
        name: Union[str, Callable],
        handler: Any = None,
        transformer: Union[Transformer, OptionsLike, None] = None,
        options: Optional[OptionsLike] = None,
        group: int = 1
    ) -> Handler:
        """
        Append one handler.

        Accepted shapes:
            add_handler(func)                             -> custom handler named "unknown"
            add_handler("name", func)                     -> custom handler
            add_handler("name", pattern)                  -> regex handler, transformer none
            add_handler("name", pattern, transformer, options)
            add_handler("name", pattern, options)         -> options in the transformer slot

        Args:
            name: Result field name, or a bare callable
            handler: Compiled pattern, pattern string, or callable
            transformer: Transformer function, or options when no transformer is needed
            options: HandlerOptions or a mapping of option names
            group: Capture group whose text is transformed (regex handlers only)

        Returns:
            The handler that was appended

        Raises:
            HandlerConfigurationError: If the handler is neither a pattern nor a callable
        """
        if handler is None and callable(name):
            built: Handler = FunctionHandler("unknown", name)
        elif isinstance(name, str) and isinstance(handler, PATTERN_TYPES + (str,)):
            if transformer is not None and not callable(transformer):
                if options is not None:
                    raise HandlerConfigurationError(
                        f"Transformer for {name} should be callable. Got: {type(transformer).__name__}"
                    )
                transformer, options = None, transformer
            built = RegexHandler(name, handler, transformer, options, group=group)
        elif isinstance(name, str) and callable(handler):
            built = FunctionHandler(name, handler)
        else:
            raise HandlerConfigurationError(
                f"Handler for {name} should be a pattern or a function. Got: {type(handler).__name__}"
            )

        self.handlers.append(built)
        logger.debug("Registered handler #%d: %r", len(self.handlers), built)
        return built

    def names(self) -> List[str]:
        """Field names in registration order (duplicates kept)."""
        return [handler.name for handler in self.handlers]

    def __iter__(self) -> Iterator[Handler]:
        return iter(self.handlers)

    def __len__(self) -> int:
        return len(self.handlers)
