"""
Ranker implementations.

Provides implementations of the Ranker interface for updating item ratings
after a comparison and decaying them between runs.

Available implementations:
- TrueSkillRanker: Uses Microsoft TrueSkill for one-on-one updates and a
  Glicko-style deviation decay
"""

from .trueskill_ranker import TrueSkillRanker

__all__ = ["TrueSkillRanker"]
