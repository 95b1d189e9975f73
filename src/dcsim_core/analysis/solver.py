# src/dcsim_core/analysis/solver.py
import logging
import warnings
from dataclasses import dataclass
from typing import Optional

import numpy as np
from scipy.linalg import LinAlgError, LinAlgWarning, lstsq, solve

from ..constants import RIDGE_EPSILON
from .results import SolveMethod

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SolveOutcome:
    """Solution vector of `A x = b` and the fallback stage that produced it."""
    x: np.ndarray
    method: SolveMethod
    residual_norm: float


def _direct_solve(A: np.ndarray, b: np.ndarray) -> Optional[np.ndarray]:
    """
    LU solve. Returns None when the matrix is singular: an exact zero pivot
    or a non-finite result. An ill-conditioning warning alone does not count.
    """
    try:
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always", LinAlgWarning)
            x = solve(A, b)
    except LinAlgError as e:
        logger.debug(f"Direct solve rejected: {e}")
        return None
    for warning in caught:
        logger.debug(f"Direct solve: {warning.message}")
    if not np.all(np.isfinite(x)):
        logger.debug("Direct solve produced non-finite values.")
        return None
    return x


def solve_mna_system(A: np.ndarray, b: np.ndarray, ridge: float = RIDGE_EPSILON) -> SolveOutcome:
    """
    Solves the MNA system with a staged fallback for numerical singularity.

    1. Direct LU solve of `A x = b`.
    2. The same solve with `ridge` added to every diagonal entry.
    3. Least-squares (minimum-norm) solve of the original system.

    This function never raises for a singular matrix; a structurally singular
    network yields the least-norm answer of stage 3.

    Args:
        A: Square MNA matrix.
        b: Right-hand side of matching length.
        ridge: Diagonal shift used by the second stage.

    Returns:
        The solution together with the stage that produced it.
    """
    if A.ndim != 2 or A.shape[0] != A.shape[1]:
        raise ValueError(f"MNA matrix must be square, got shape {A.shape}.")
    if b.shape != (A.shape[0],):
        raise ValueError(f"Right-hand side has shape {b.shape}, expected ({A.shape[0]},).")

    size = A.shape[0]
    if size == 0:
        return SolveOutcome(x=np.zeros(0, dtype=float), method=SolveMethod.DIRECT, residual_norm=0.0)

    logger.debug(f"Solving MNA system of size {size}...")
    x = _direct_solve(A, b)
    method = SolveMethod.DIRECT

    if x is None:
        logger.warning(f"MNA matrix is singular; retrying with a diagonal ridge of {ridge:.1e}.")
        x = _direct_solve(A + ridge * np.eye(size), b)
        method = SolveMethod.RIDGE

    if x is None:
        logger.warning("MNA matrix is still singular after the ridge; using the least-squares solution.")
        x, _, rank, _ = lstsq(A, b)
        method = SolveMethod.PSEUDO_INVERSE
        logger.debug(f"Least-squares solve: matrix rank {rank} of {size}.")

    residual_norm = float(np.linalg.norm(A @ x - b))
    logger.debug(f"MNA solve finished with method '{method.value}', residual norm {residual_norm:.3e}.")
    return SolveOutcome(x=x, method=method, residual_norm=residual_norm)
