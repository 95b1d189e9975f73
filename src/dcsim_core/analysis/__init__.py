# src/dcsim_core/analysis/__init__.py
"""
Defines the public interface for the analysis services package.

This package holds the linear DC path: the eligibility classifier, the MNA
builder and solver, the result extraction and the DC and Thevenin analysis
services with their formal result contracts.
"""
from .classifier import CircuitClassification, classify_circuit, is_dc_eligible, require_dc_eligible
from .config import ConfigParsingError, DCSolverConfig, parse_solver_config
from .dc import DCAnalyzer
from .exceptions import DCAnalysisError, TheveninAnalysisError
from .extraction import extract_solution
from .mna import Branch, BranchRef, MnaSystem, MnaSystemBuilder, Reused, Synthesized
from .results import DCSolution, SolveMethod, TheveninResult
from .solver import SolveOutcome, solve_mna_system
from .thevenin import TheveninAnalyzer

__all__ = [
    # Classifier
    "CircuitClassification",
    "classify_circuit",
    "is_dc_eligible",
    "require_dc_eligible",
    # Configuration
    "ConfigParsingError",
    "DCSolverConfig",
    "parse_solver_config",
    # MNA machinery
    "Branch",
    "BranchRef",
    "MnaSystem",
    "MnaSystemBuilder",
    "Reused",
    "Synthesized",
    "SolveOutcome",
    "solve_mna_system",
    "extract_solution",
    # Formal Result Contracts
    "DCSolution",
    "SolveMethod",
    "TheveninResult",
    # Cache-Aware Analysis Services
    "DCAnalyzer",
    "TheveninAnalyzer",
    # Exceptions
    "DCAnalysisError",
    "TheveninAnalysisError",
]
