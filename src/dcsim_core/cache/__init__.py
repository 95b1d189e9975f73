"""
Exposes the public interface of the cache package.
"""
from .service import SolutionCache
from .keys import create_circuit_key, create_thevenin_key

__all__ = [
    "SolutionCache",
    "create_circuit_key",
    "create_thevenin_key",
]
