# src/dcsim_core/validation/collector.py
import logging
from typing import List

from .exceptions import error_class_for
from .issue_codes import IssueCode
from .issues import ValidationIssue, ValidationIssueLevel

logger = logging.getLogger(__name__)


class IssueCollector:
    """
    Accumulates issues during a validation pass so that all problems of a
    request are reported together instead of one at a time.
    """

    def __init__(self):
        self.issues: List[ValidationIssue] = []

    def add(self, level: ValidationIssueLevel, code_enum: IssueCode, **kwargs) -> ValidationIssue:
        """Creates an issue from a code template and the keyword context, and records it."""
        message = code_enum.format_message(**kwargs)
        issue = ValidationIssue(
            level=level,
            code=code_enum.code,
            category=code_enum.category,
            message=message,
            component=kwargs.get('component'),
            net=kwargs.get('net'),
            parameter=kwargs.get('parameter'),
            details=kwargs,
        )
        self.issues.append(issue)
        return issue

    def error(self, code_enum: IssueCode, **kwargs) -> ValidationIssue:
        return self.add(ValidationIssueLevel.ERROR, code_enum, **kwargs)

    def warning(self, code_enum: IssueCode, **kwargs) -> ValidationIssue:
        return self.add(ValidationIssueLevel.WARNING, code_enum, **kwargs)

    def info(self, code_enum: IssueCode, **kwargs) -> ValidationIssue:
        return self.add(ValidationIssueLevel.INFO, code_enum, **kwargs)

    @property
    def errors(self) -> List[ValidationIssue]:
        return [issue for issue in self.issues if issue.level == ValidationIssueLevel.ERROR]

    @property
    def has_errors(self) -> bool:
        return any(issue.level == ValidationIssueLevel.ERROR for issue in self.issues)

    def raise_if_errors(self):
        """Raises the category-specific ValidationError if any error was recorded."""
        if not self.has_errors:
            return
        exc_class = error_class_for(self.issues)
        logger.debug(f"Validation produced {len(self.errors)} error(s); raising {exc_class.__name__}.")
        raise exc_class(self.issues)
