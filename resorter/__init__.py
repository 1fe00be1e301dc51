"""
Resorter - Pairwise Preference Ranking

A system for ranking named items by asking a human to compare two at a time,
using TrueSkill ratings with uncertainty-based pair selection and stopping
once every rating is confident.
"""

from .models import RatedItem, SkillEstimate, Outcome, MatchResult, ResortResult, ResortStatus
from .interfaces import Judge, Storage, Ranker, Selector
from .orchestrator import Orchestrator, ResortConfig

__version__ = "0.1.0"
__all__ = [
    "RatedItem",
    "SkillEstimate",
    "Outcome",
    "MatchResult",
    "ResortResult",
    "ResortStatus",
    "Judge",
    "Storage",
    "Ranker",
    "Selector",
    "Orchestrator",
    "ResortConfig",
]
