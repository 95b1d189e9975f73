# src/dcsim_core/api.py
"""
Provides the public entry points of the solver core.

`solve_dc` and `solve_thevenin` are the typed facade for Python callers: they
return the formal result objects and turn every known failure into a single,
actionable `SimulationRunError`.

`run_simulation` is the request-level entry point used by a transport layer.
It takes a raw request mapping, dispatches on the analysis method and always
returns a response envelope, never raising:

    {"status": "ok", "message": ..., "method": ..., "data": ...}
    {"status": "error", "message": ..., "data": {...structured context...}}
"""
import logging
from typing import Any, Callable, Dict, List, Optional

from .analysis.classifier import is_dc_eligible
from .analysis.config import DCSolverConfig
from .analysis.dc import DCAnalyzer
from .analysis.results import DCSolution, TheveninResult
from .analysis.thevenin import TheveninAnalyzer
from .cache.service import SolutionCache
from .data_structures import Circuit, TheveninPort
from .errors import DiagnosableError, SimulationRunError, format_diagnostic_report
from .parser import ParsedRequest, ParsingError, RequestParser, SchemaValidationError
from .validation import IssueCode, IssueCollector, ValidationError

logger = logging.getLogger(__name__)

TransientSolver = Callable[[ParsedRequest], Dict[str, Any]]

_SUCCESS_MESSAGE = "simulation done"


def _run_guarded(description: str, action: Callable[[], Any]) -> Any:
    """Runs `action`, converting any failure into a `SimulationRunError` report."""
    try:
        return action()
    except DiagnosableError as e:
        logger.error(f"A diagnosable error occurred during {description}: {e}")
        raise SimulationRunError(e.get_diagnostic_report()) from e
    except Exception as e:
        logger.critical(f"An unexpected internal error occurred during {description}: {e}", exc_info=True)
        report = format_diagnostic_report(
            error_type=f"An Unexpected Simulation Error Occurred ({type(e).__name__})",
            details=f"The solver encountered an unexpected internal error: {e}",
            suggestion="This may be a bug. Review the traceback and consider filing a bug report.",
            context={}
        )
        raise SimulationRunError(report) from e


def solve_dc(
    circuit: Circuit,
    config: Optional[DCSolverConfig] = None,
    cache: Optional[SolutionCache] = None,
) -> DCSolution:
    """
    Solves the DC operating point of `circuit`.

    Raises:
        SimulationRunError: The circuit was rejected or the solve failed. The
                            message is a full diagnostic report and the
                            original exception is chained.
    """
    return _run_guarded("DC analysis", lambda: DCAnalyzer(circuit, config, cache).analyze())


def solve_thevenin(
    circuit: Circuit,
    port: TheveninPort,
    config: Optional[DCSolverConfig] = None,
    cache: Optional[SolutionCache] = None,
) -> TheveninResult:
    """Thevenin equivalent of `circuit` across `port`. Raises `SimulationRunError` like `solve_dc`."""
    return _run_guarded("Thevenin analysis", lambda: TheveninAnalyzer(circuit, port, config, cache).analyze())


def run_simulation(
    payload: Any,
    cache: Optional[SolutionCache] = None,
    transient_solver: Optional[TransientSolver] = None,
) -> Dict[str, Any]:
    """
    Parses and executes one simulation request.

    Args:
        payload: The raw request mapping.
        cache: Optional solution cache shared between requests.
        transient_solver: Callable handling 'transient' requests. Without it,
                          such requests are answered with an eligibility error.

    Returns:
        The response envelope.
    """
    try:
        request = RequestParser().parse(payload)
        method = request.method or _auto_method(request.circuit)
        logger.info(f"Running '{method}' analysis for circuit '{request.circuit.name}'.")

        if method in ("node_voltage", "branch_current"):
            solution = DCAnalyzer(request.circuit, request.solver_config, cache).analyze()
            data = solution.to_dict()
            if request.teaching_mode:
                data["steps"] = _teaching_steps(solution)
                data["matrix"] = _matrix_payload(solution)
        elif method == "thevenin":
            data = TheveninAnalyzer(
                request.circuit, request.thevenin_port, request.solver_config, cache
            ).analyze().to_dict()
        else:
            data = _run_transient(request, method, transient_solver)

        return {"status": "ok", "message": _SUCCESS_MESSAGE, "method": method, "data": data}

    except ValidationError as e:
        logger.error(f"Simulation request rejected: {e}")
        return {"status": "error", "message": str(e), "data": e.to_payload()}
    except SchemaValidationError as e:
        logger.error(f"Simulation request rejected: {e}")
        return {"status": "error", "message": str(e), "data": {"category": "schema", "errors": e.messages}}
    except ParsingError as e:
        logger.error(f"Simulation request rejected: {e}")
        return {"status": "error", "message": str(e), "data": {"category": "schema"}}
    except Exception:
        logger.exception("simulation failed")
        return {"status": "error", "message": "internal error", "data": {}}


def _auto_method(circuit: Circuit) -> str:
    method = "node_voltage" if is_dc_eligible(circuit) else "transient"
    logger.debug(f"No analysis method requested; classifier selected '{method}'.")
    return method


def _run_transient(request: ParsedRequest, method: str, transient_solver: Optional[TransientSolver]) -> Dict[str, Any]:
    if transient_solver is None:
        issues = IssueCollector()
        issues.error(IssueCode.DC_TRANSIENT_UNAVAILABLE, method=method)
        issues.raise_if_errors()
    return transient_solver(request)


def _teaching_steps(solution: DCSolution) -> List[str]:
    """Human-readable account of how the MNA system was set up and solved."""
    system = solution.system
    net_index = system.net_index
    steps = [
        f"Step 1: Take net '{net_index.ground_net}' as the reference node (0 V).",
        f"Step 2: Assign node-voltage unknowns to the {net_index.node_count} remaining net(s): "
        f"{', '.join(net_index.node_names) or 'none'}.",
    ]
    if system.branches:
        steps.append(
            f"Step 3: Add {len(system.branches)} branch-current unknown(s) for voltage-defining "
            f"elements: {', '.join(br.label for br in system.branches)}."
        )
    else:
        steps.append("Step 3: No voltage-defining elements; only KCL equations are needed.")
    steps.append(
        f"Step 4: Stamp every element into the {system.size}x{system.size} matrix A and vector b, "
        f"giving A x = b."
    )
    steps.append(f"Step 5: Solve A x = b (solver stage: {solution.solve_method.value}).")
    voltages = ", ".join(f"V({name}) = {solution.node_voltages[name]:.6g} V" for name in net_index.node_names)
    steps.append(f"Step 6: Read back the node voltages: {voltages or 'none'}.")
    currents = ", ".join(f"I({comp_id}) = {value:.6g} A" for comp_id, value in solution.branch_currents.items())
    steps.append(f"Step 7: Derive the branch currents: {currents or 'none'}.")
    return steps


def _matrix_payload(solution: DCSolution) -> Dict[str, Any]:
    system = solution.system
    return {
        "A": system.A.tolist(),
        "b": system.b.tolist(),
        "unknowns": system.unknown_labels(),
        "equations": system.equation_labels(),
    }
