"""
Fluent assertion interface for testing tournament standings.

This module provides a clean, fluent way to assert standings for testing
purposes. It works with the pure Python tournament_core structures.
"""

from dataclasses import dataclass
from typing import Dict, Optional

from petanque.tournament_core.structure import Standing, Tournament


# Use the built-in AssertionError for proper test framework integration


@dataclass
class StandingsAssertion:
    """Fluent interface for asserting tournament standings."""

    tournament: Tournament
    _standings: Optional[Dict[int, Standing]] = None

    def __post_init__(self):
        """Calculate standings once on initialization."""
        if self._standings is None:
            self._standings = self.tournament.standings_by_team()

    def _get_team_id(self, name: str) -> int:
        for team in self.tournament.teams:
            if team.name == name:
                return team.team_id
        raise AssertionError(f"Team '{name}' not found in tournament")

    def team(self, name: str) -> "TeamAssertion":
        """Select a team by name for assertions."""
        team_id = self._get_team_id(name)
        if team_id not in self._standings:
            raise AssertionError(f"Team '{name}' has no standing")
        return TeamAssertion(
            tournament=self.tournament,
            _standings=self._standings,
            team_name=name,
            standing=self._standings[team_id],
        )

    def order(self, *names: str) -> "StandingsAssertion":
        """Assert the full ranking, best first."""
        by_rank = sorted(self._standings.values(), key=lambda s: s.rank)
        id_to_name = {t.team_id: t.name for t in self.tournament.teams}
        actual = [id_to_name[s.team_id] for s in by_rank]
        if actual != list(names):
            raise AssertionError(f"Expected ranking {list(names)}, got {actual}")
        return self


@dataclass
class TeamAssertion(StandingsAssertion):
    """Assertions for a specific team's standing."""

    team_name: str = ""
    standing: Optional[Standing] = None

    def _check(self, label: str, expected, actual) -> "TeamAssertion":
        if actual != expected:
            raise AssertionError(
                f"{self.team_name} expected {label} {expected}, got {actual}"
            )
        return self

    def wins(self, expected: int) -> "TeamAssertion":
        return self._check("wins", expected, self.standing.wins)

    def losses(self, expected: int) -> "TeamAssertion":
        return self._check("losses", expected, self.standing.losses)

    def points_for(self, expected: int) -> "TeamAssertion":
        return self._check("points for", expected, self.standing.points_for)

    def points_against(self, expected: int) -> "TeamAssertion":
        return self._check("points against", expected, self.standing.points_against)

    def differential(self, expected: int) -> "TeamAssertion":
        return self._check("differential", expected, self.standing.differential)

    def buchholz(self, expected: int) -> "TeamAssertion":
        return self._check("Buchholz", expected, self.standing.buchholz)

    def fine_buchholz(self, expected: int) -> "TeamAssertion":
        return self._check("fine-Buchholz", expected, self.standing.fine_buchholz)

    def point_quotient(self, expected: float, places: int = 3) -> "TeamAssertion":
        """Assert the point quotient, rounded to ``places`` decimals."""
        actual = self.standing.point_quotient
        if round(actual, places) != round(expected, places):
            raise AssertionError(
                f"{self.team_name} expected point quotient {expected}, got {actual}"
            )
        return self

    def position(self, expected: int) -> "TeamAssertion":
        """Assert the final rank."""
        return self._check("position", expected, self.standing.rank)

    def eliminated(self, expected: bool = True) -> "TeamAssertion":
        return self._check("eliminated", expected, self.standing.is_eliminated)


def assert_tournament(tournament: Tournament) -> StandingsAssertion:
    """Entry point for tournament assertions."""
    return StandingsAssertion(tournament)
