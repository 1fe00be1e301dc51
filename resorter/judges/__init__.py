"""
Judge implementations.
"""

from .sim_judge import SimulatedJudge
from .terminal_judge import TerminalJudge

__all__ = [
    "SimulatedJudge",
    "TerminalJudge",
]
