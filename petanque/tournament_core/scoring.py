"""
Scoring rules for pétanque games.

This module defines the legal score range and how byes are scored.
"""

from typing import Optional, Tuple
from dataclasses import dataclass

from petanque.tournament_core.exceptions import InvalidScore, MissingScore, TiedScore


@dataclass(frozen=True)
class ScoringSystem:
    """Defines how games are scored in a tournament."""

    # Game scoring
    min_score: int = 0
    max_score: int = 13

    # Bye scoring (a bye counts as a win)
    bye_points_for: int = 13
    bye_points_against: int = 7

    def bye_points(self) -> Tuple[int, int]:
        """Return (points_for, points_against) credited for a bye."""
        return (self.bye_points_for, self.bye_points_against)

    def validate(self, score1: Optional[int], score2: Optional[int]) -> None:
        """
        Check a pair of scores for a played game.

        Raises:
            MissingScore: if either score is absent
            InvalidScore: if a score is outside [min_score, max_score]
            TiedScore: if both scores are equal
        """
        if score1 is None or score2 is None:
            raise MissingScore("Both scores are required")
        for score in (score1, score2):
            if isinstance(score, bool) or not isinstance(score, int):
                raise InvalidScore(f"Score {score!r} is not an integer")
            if not self.min_score <= score <= self.max_score:
                raise InvalidScore(
                    f"Score {score} is outside {self.min_score}-{self.max_score}"
                )
        if score1 == score2:
            raise TiedScore(f"Scores cannot be tied ({score1}-{score2})")


# Pre-defined scoring systems
PETANQUE_SCORING = ScoringSystem()