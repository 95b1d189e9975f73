# src/dcsim_core/parser/exceptions.py
"""
Defines the diagnosable exceptions of the request parsing stage.

`ParsingError` covers unreadable sources: a missing file, invalid JSON/YAML
syntax or a document whose root is not a mapping. `SchemaValidationError`
covers well-formed documents whose structure does not match the request
schema. Both derive from `DiagnosableError`, so the facade can render them
with the same reporting path as every other known failure.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from ..errors import DiagnosableError, format_diagnostic_report


class BaseParsingError(DiagnosableError):
    """A local base class for all request parsing and schema validation errors."""
    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Generic Parsing Error",
            details=str(self),
            suggestion="Please check the format and content of the simulation request.",
            context={}
        )


def _source_label(source: Optional[Path]) -> str:
    return f"'{source}'" if source is not None else "<in-memory request>"


@dataclass()
class ParsingError(BaseParsingError):
    """The request source could not be loaded at all."""
    details: str
    source: Optional[Path] = None

    def __str__(self):
        return f"Parsing error in {_source_label(self.source)}: {self.details}"

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Request Parsing or File Error",
            details=self.details,
            suggestion="Ensure the file exists, is readable and contains a valid JSON or YAML mapping.",
            context={'source_file': self.source}
        )


def _format_errors(errors: Dict[str, Any], prefix: str = "") -> list:
    """Flattens Cerberus' nested error tree into 'field.path: message' lines."""
    lines = []
    for field, messages in sorted(errors.items(), key=lambda item: str(item[0])):
        path = f"{prefix}.{field}" if prefix else str(field)
        for message in messages:
            if isinstance(message, dict):
                lines.extend(_format_errors(message, path))
            else:
                lines.append(f"{path}: {message}")
    return lines


@dataclass()
class SchemaValidationError(BaseParsingError):
    """
    The request is syntactically valid but does not conform to the request
    schema (missing keys, wrong types, duplicate component ids, ...).
    """
    errors: Dict[str, Any]
    source: Optional[Path] = None

    @property
    def messages(self) -> list:
        return _format_errors(self.errors)

    def __str__(self):
        return (
            f"Request schema validation failed for {_source_label(self.source)}:\n"
            + "\n".join(f"  - {line}" for line in self.messages)
        )

    def get_diagnostic_report(self) -> str:
        error_list_str = "\n".join(f"  - Field {line}" for line in self.messages)
        details = (
            "The structure of the request does not conform to the required schema.\n"
            f"See details for {len(self.messages)} issue(s) below:\n\n{error_list_str}"
        )
        return format_diagnostic_report(
            error_type="Request Schema Validation Error",
            details=details,
            suggestion="Correct the listed fields. Every component needs a unique 'id' and a 'type'; nets need a 'name' and a list of [component, terminal] pairs.",
            context={'source_file': self.source}
        )
