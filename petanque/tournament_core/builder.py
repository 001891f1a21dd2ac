"""
Builder for creating tournament structures with a fluent API.

This module provides a builder class for creating tournament_core structures
without database dependencies. Teams are referred to by name; IDs are
allocated in insertion order starting at 1.
"""

from dataclasses import replace
from typing import Dict, Optional

from petanque.tournament_core.scoring import ScoringSystem, PETANQUE_SCORING
from petanque.tournament_core.structure import (
    Game,
    PairingMethod,
    QualifyingRound,
    Team,
    Tournament,
    TournamentConfig,
)


class TournamentBuilder:
    """Builder for creating tournament structures easily."""

    def __init__(
        self,
        config: Optional[TournamentConfig] = None,
        scoring: ScoringSystem = PETANQUE_SCORING,
    ):
        self.tournament = Tournament(
            config=config or TournamentConfig(), scoring=scoring
        )
        self.current_round: Optional[QualifyingRound] = None
        self._name_to_id: Dict[str, int] = {}
        self._next_team_id = 1

    # Configuration

    def settings(self, **kwargs) -> "TournamentBuilder":
        """Replace configuration fields, e.g. ``settings(court_count=4)``."""
        self.tournament.config = replace(self.tournament.config, **kwargs)
        return self

    def method(self, pairing_method: PairingMethod) -> "TournamentBuilder":
        return self.settings(pairing_method=pairing_method)

    # Teams

    def team(
        self, name: str, region: Optional[str] = None, club: Optional[str] = None
    ) -> "TournamentBuilder":
        """Add a team."""
        if name in self._name_to_id:
            raise ValueError(f"Duplicate team: {name}")
        team_id = self._next_team_id
        self._next_team_id += 1
        self._name_to_id[name] = team_id
        self.tournament.teams.append(
            Team(team_id=team_id, name=name, region=region, club=club)
        )
        return self

    def teams(self, *names: str) -> "TournamentBuilder":
        for name in names:
            self.team(name)
        return self

    # Rounds and games

    def round(self, number: Optional[int] = None) -> "TournamentBuilder":
        """Start a round; numbers default to the next one."""
        if number is None:
            number = self.tournament.num_rounds + 1
        self.current_round = QualifyingRound(number=number)
        self.tournament.rounds.append(self.current_round)
        return self

    def game(
        self,
        team1: str,
        team2: str,
        score1: Optional[int] = None,
        score2: Optional[int] = None,
        court: Optional[int] = None,
    ) -> "TournamentBuilder":
        """Add a game between two named teams to the current round."""
        if self.current_round is None:
            raise ValueError("Must add a round before adding games")
        self.tournament.games.append(
            Game(
                round_number=self.current_round.number,
                team1_id=self.id_of(team1),
                team2_id=self.id_of(team2),
                court_number=court,
                team1_score=score1,
                team2_score=score2,
            )
        )
        return self

    def bye(self, team: str) -> "TournamentBuilder":
        """Give a named team the bye in the current round."""
        if self.current_round is None:
            raise ValueError("Must add a round before adding byes")
        self.tournament.games.append(
            Game(
                round_number=self.current_round.number,
                team1_id=self.id_of(team),
                is_bye=True,
            )
        )
        return self

    def auto_byes(self) -> "TournamentBuilder":
        """Give a bye to every team that has no game in the current round."""
        if self.current_round is None:
            raise ValueError("Must add a round before adding byes")
        played = set()
        for game in self.tournament.games_for_round(self.current_round.number):
            played.update(game.team_ids)
        for team in self.tournament.teams:
            if team.team_id not in played:
                self.bye(team.name)
        return self

    def complete(self) -> "TournamentBuilder":
        """Mark the current round complete."""
        if self.current_round is None:
            raise ValueError("No round to complete")
        completed = replace(self.current_round, is_complete=True)
        self.tournament.rounds[self.tournament.rounds.index(self.current_round)] = (
            completed
        )
        self.current_round = completed
        return self

    def build(self) -> Tournament:
        """Return the built tournament."""
        return self.tournament

    # Helper methods

    def id_of(self, name: str) -> int:
        try:
            return self._name_to_id[name]
        except KeyError:
            raise ValueError(f"Team not found: {name}")
