"""
Static (instantaneous) network solver based on Modified Nodal Analysis.
"""

from .circuit import StaticCircuit, StaticSolution, solve  # noqa: F401
from . import components  # noqa: F401

__all__ = [
    "StaticCircuit",
    "StaticSolution",
    "solve",
    "components",
]
