# src/dcsim_core/analysis/dc.py

"""
Provides the cache-aware DC operating-point analysis service.
"""

import logging
from typing import List, Optional

from ..cache.keys import create_circuit_key
from ..cache.service import SolutionCache
from ..components.elements import instantiate_elements
from ..data_structures import Circuit
from ..netlist.resolver import NetIndex, NetResolver
from ..validation import IssueCode, IssueCollector, ValidationError, ValidationIssue
from .classifier import require_dc_eligible
from .config import DCSolverConfig
from .exceptions import DCAnalysisError
from .extraction import extract_solution
from .mna import MnaSystemBuilder
from .results import DCSolution, SolveMethod
from .solver import solve_mna_system

logger = logging.getLogger(__name__)


class DCAnalyzer:
    """
    Solves the DC operating point of a linear resistive circuit.

    The service runs a stateless pipeline: resolve nets, gate on DC
    eligibility, instantiate the element variants, assemble the MNA system,
    solve it with the staged fallback and map the solution back to nets and
    components. The optional cache is injected by the caller.
    """
    def __init__(self, circuit: Circuit, config: Optional[DCSolverConfig] = None, cache: Optional[SolutionCache] = None):
        if not isinstance(circuit, Circuit):
            raise TypeError("DCAnalyzer requires a Circuit object.")
        if cache is not None and not isinstance(cache, SolutionCache):
            raise TypeError("DCAnalyzer requires a SolutionCache instance or None.")

        self.circuit: Circuit = circuit
        self.config: DCSolverConfig = config or DCSolverConfig()
        self.cache: Optional[SolutionCache] = cache
        logger.debug(f"DCAnalyzer service initialized for circuit '{circuit.name}'.")

    def analyze(self) -> DCSolution:
        """
        Executes the full DC analysis pipeline, leveraging the injected cache.

        Raises:
            TopologyError, SchemaError: The circuit is malformed.
            EligibilityError: The circuit holds components the DC path cannot solve.
            DCAnalysisError: An unexpected internal failure.
        """
        cache_key = None
        if self.cache is not None:
            cache_key = create_circuit_key(self.circuit, self.config)
            cached_results = self.cache.get(cache_key)
            if cached_results:
                if not isinstance(cached_results, DCSolution):
                    logger.warning(
                        f"Cache integrity issue: expected DCSolution but got "
                        f"{type(cached_results)}. Re-computing."
                    )
                else:
                    return cached_results

        logger.info(f"Starting DC analysis for circuit '{self.circuit.name}'...")
        try:
            net_index = NetResolver().resolve(self.circuit)
            require_dc_eligible(self.circuit)
            elements = instantiate_elements(self.circuit)
            system = MnaSystemBuilder(elements, net_index, self.config).build()
            outcome = solve_mna_system(system.A, system.b, ridge=self.config.ridge)
            issues = self._collect_issues(net_index, system.issues, outcome.method)
            solution = extract_solution(system, outcome, issues)
        except (ValidationError, DCAnalysisError):
            raise
        except Exception as e:
            raise DCAnalysisError(
                circuit_name=self.circuit.name,
                details=f"An unexpected internal error occurred during DC analysis: {e}"
            ) from e

        logger.info(
            f"DC analysis for '{self.circuit.name}' complete (solver stage: {solution.solve_method.value})."
        )
        if self.cache is not None:
            self.cache.put(cache_key, solution)
        return solution

    @staticmethod
    def _collect_issues(net_index: NetIndex, build_issues, method: SolveMethod) -> List[ValidationIssue]:
        issues = IssueCollector()
        issues.issues.extend(net_index.warnings)
        issues.issues.extend(build_issues)
        if method is not SolveMethod.DIRECT:
            issues.warning(IssueCode.MNA_SOLVER_FALLBACK, method=method.value)
        return issues.issues
