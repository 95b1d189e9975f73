# src/dcsim_core/validation/__init__.py
import logging
logger = logging.getLogger(__name__)

from .issues import ValidationIssue, ValidationIssueLevel, ErrorCategory
from .issue_codes import IssueCode
from .collector import IssueCollector
from .exceptions import ValidationError, TopologyError, SchemaError, EligibilityError

__all__ = [
    "ValidationIssue",
    "ValidationIssueLevel",
    "ErrorCategory",
    "IssueCode",
    "IssueCollector",
    "ValidationError",
    "TopologyError",
    "SchemaError",
    "EligibilityError",
]
