# src/dcsim_core/analysis/exceptions.py
"""
Defines custom, diagnosable exceptions for the analysis services.
"""
from dataclasses import dataclass
from ..errors import DiagnosableError, format_diagnostic_report


@dataclass()
class DCAnalysisError(DiagnosableError, ValueError):
    """Raised when the DC pipeline fails for a reason that is not a validation issue."""
    circuit_name: str
    details: str

    def __str__(self) -> str:
        return f"DC analysis of '{self.circuit_name}' failed: {self.details}"

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="DC Analysis Error",
            details=self.details,
            suggestion="This indicates an internal problem of the solver core; please report the circuit that triggered it.",
            context={'component': None, 'net': None, 'source_file': None}
        )


@dataclass()
class TheveninAnalysisError(DiagnosableError, ValueError):
    """Raised when a Thevenin analysis fails for a reason that is not a validation issue."""
    circuit_name: str
    details: str

    def __str__(self) -> str:
        return f"Thevenin analysis of '{self.circuit_name}' failed: {self.details}"

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Thevenin Analysis Error",
            details=self.details,
            suggestion="This indicates an internal problem of the solver core; please report the circuit that triggered it.",
            context={}
        )
