# src/dcsim_core/parser/__init__.py
from .parser import ANALYSIS_METHODS, ParsedRequest, RequestParser
from .exceptions import ParsingError, SchemaValidationError

__all__ = [
    "ANALYSIS_METHODS",
    "ParsedRequest",
    "RequestParser",
    "ParsingError",
    "SchemaValidationError",
]
