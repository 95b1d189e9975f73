# src/dcsim_core/validation/exceptions.py
"""
Defines the diagnosable exceptions raised when a circuit cannot be solved as
submitted: topology errors, schema errors and eligibility errors.

`ValidationError` is a container for every error-level `ValidationIssue` found
during a validation pass. The concrete subclass raised is chosen from the
category of the first error, so callers may catch a single category
(`except TopologyError:`) or all of them (`except ValidationError:`).
"""
from typing import Any, Dict, List, Optional, Type

from .issues import ErrorCategory, ValidationIssue, ValidationIssueLevel
from ..errors import DiagnosableError, format_diagnostic_report


class ValidationError(DiagnosableError, ValueError):
    """
    Raised when a solve request is rejected. Holds every error-level issue and
    exposes the first one's structured context for a precise user message.
    """
    error_type: str = "Circuit Validation Error"
    suggestion: str = "Review and correct all errors listed above, then resubmit the circuit."

    def __init__(self, issues: List[ValidationIssue]):
        """
        Args:
            issues: The issues found by a validation pass. Only those with a
                    level of `ERROR` are kept.
        """
        self.issues: List[ValidationIssue] = [
            issue for issue in issues if issue.level == ValidationIssueLevel.ERROR
        ]
        if not self.issues:
            summary_message = f"{type(self).__name__} was raised with no error-level issues."
        elif len(self.issues) == 1:
            summary_message = self.issues[0].message
        else:
            summary_message = (
                f"Validation failed with {len(self.issues)} error(s):\n"
                + "\n".join(f"  - {issue}" for issue in self.issues)
            )
        super().__init__(summary_message)

    @property
    def primary_issue(self) -> Optional[ValidationIssue]:
        return self.issues[0] if self.issues else None

    @property
    def category(self) -> Optional[ErrorCategory]:
        return self.primary_issue.category if self.primary_issue else None

    @property
    def code(self) -> Optional[str]:
        return self.primary_issue.code if self.primary_issue else None

    def to_payload(self) -> Dict[str, Any]:
        """
        Structured context for the caller: the first issue flattened at the top
        level plus the full list under 'issues'.
        """
        payload: Dict[str, Any] = {}
        if self.primary_issue:
            payload.update(self.primary_issue.to_payload())
            payload.pop("level", None)
        payload["issues"] = [issue.to_payload() for issue in self.issues]
        return payload

    def get_diagnostic_report(self) -> str:
        """
        Generates a complete, user-friendly, multi-line diagnostic report string
        that details every validation error found.
        """
        details = (
            f"The circuit cannot be solved as submitted.\n"
            f"Found {len(self.issues)} error(s). See details below:\n\n"
            + "\n".join(f"  - {issue}" for issue in self.issues)
        )
        context = {}
        if first_issue := self.primary_issue:
            context = {
                'component': first_issue.component,
                'net': first_issue.net,
                'parameter': first_issue.parameter,
            }
        return format_diagnostic_report(
            error_type=self.error_type,
            details=details,
            suggestion=self.suggestion,
            context=context
        )


class TopologyError(ValidationError):
    """Nets with fewer than two members, missing/ambiguous ground, dangling references."""
    error_type = "Circuit Topology Error"
    suggestion = "Check the wiring: every net needs at least two terminals and exactly one ground must be connected."


class SchemaError(ValidationError):
    """Unknown component types, missing parameters or unconnected required terminals."""
    error_type = "Component Schema Error"
    suggestion = "Check the component types, their required parameters and that every terminal is wired."


class EligibilityError(ValidationError):
    """Components or requests the linear DC path cannot handle."""
    error_type = "DC Eligibility Error"
    suggestion = "Remove reactive or AC elements, or run the circuit through the transient analysis instead."


_ERROR_CLASS_BY_CATEGORY: Dict[ErrorCategory, Type[ValidationError]] = {
    ErrorCategory.TOPOLOGY: TopologyError,
    ErrorCategory.SCHEMA: SchemaError,
    ErrorCategory.ELIGIBILITY: EligibilityError,
}


def error_class_for(issues: List[ValidationIssue]) -> Type[ValidationError]:
    """Picks the exception class matching the category of the first error issue."""
    for issue in issues:
        if issue.level == ValidationIssueLevel.ERROR:
            return _ERROR_CLASS_BY_CATEGORY.get(issue.category, ValidationError)
    return ValidationError
