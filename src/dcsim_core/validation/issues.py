# src/dcsim_core/validation/issues.py
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional, Dict, Any

logger = logging.getLogger(__name__)


class ValidationIssueLevel(Enum):
    """Severity level of a validation issue."""
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"

    def __str__(self):
        return self.value


class ErrorCategory(Enum):
    """
    The error taxonomy of the solver core. TOPOLOGY, SCHEMA and ELIGIBILITY
    issues are reported to the caller; NUMERICAL issues are informational only,
    since numerical degeneracy is absorbed by the solver fallback chain.
    """
    TOPOLOGY = "topology"
    SCHEMA = "schema"
    ELIGIBILITY = "eligibility"
    NUMERICAL = "numerical"

    def __str__(self):
        return self.value


@dataclass
class ValidationIssue:
    """
    Represents a single issue found while validating or solving a circuit.
    Carries the offending component id, net name and parameter key (when they
    apply) so a caller can render a precise message.
    """
    level: ValidationIssueLevel
    code: str
    category: ErrorCategory
    message: str
    component: Optional[str] = None
    net: Optional[str] = None
    parameter: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        parts = [f"[{self.level.name} - {self.code}]"]
        if self.component:
            parts.append(f"Component: {self.component}")
        if self.net:
            parts.append(f"Net: {self.net}")
        if self.parameter:
            parts.append(f"Parameter: {self.parameter}")
        parts.append(f"Message: {self.message}")

        if self.details:
            filtered_details = {
                k: v for k, v in self.details.items()
                if k not in ['component', 'net', 'parameter']
            }
            if filtered_details:
                details_str = ", ".join(f"{k}={v}" for k, v in sorted(filtered_details.items()))
                parts.append(f"Details: ({details_str})")

        return " ".join(parts)

    def to_payload(self) -> Dict[str, Any]:
        """The structured, JSON-friendly form of this issue."""
        payload: Dict[str, Any] = {
            "level": self.level.value,
            "category": self.category.value,
            "code": self.code,
            "message": self.message,
        }
        for key in ("component", "net", "parameter"):
            value = getattr(self, key)
            if value is not None:
                payload[key] = value
        return payload
