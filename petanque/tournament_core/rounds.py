"""
Score entry and the round-completion gate for qualifying rounds.

A round can only be completed once every non-bye game has two distinct
scores. Completing a round is what makes its games count in the standings.
"""

from dataclasses import dataclass, replace
from typing import List

from petanque.tournament_core.exceptions import (
    InvalidConfig,
    InvalidMatch,
    MissingTeam,
    RoundNotComplete,
)
from petanque.tournament_core.scoring import ScoringSystem, PETANQUE_SCORING
from petanque.tournament_core.standings import recompute_standings
from petanque.tournament_core.structure import (
    Game,
    QualifyingRound,
    Standing,
    Tournament,
)


@dataclass(frozen=True)
class RoundCompletion:
    """A completed round and the standings recomputed with it counted."""

    round: QualifyingRound
    standings: List[Standing]


def record_game_score(
    game: Game,
    team1_score: int,
    team2_score: int,
    scoring: ScoringSystem = PETANQUE_SCORING,
) -> Game:
    """Return the game with the scores recorded.

    Raises:
        InvalidMatch: the game is a bye
        MissingTeam: a team slot is empty
        MissingScore, InvalidScore, TiedScore: the scores are not acceptable
    """
    if game.is_bye:
        raise InvalidMatch("A bye does not take a score")
    if game.team1_id is None or game.team2_id is None:
        raise MissingTeam("Both teams must be set before scoring")
    scoring.validate(team1_score, team2_score)
    return game.with_scores(team1_score, team2_score)


def unscored_games(games: List[Game]) -> List[Game]:
    """Non-bye games that do not yet have a winner."""
    return [g for g in games if not g.is_bye and not g.is_scored]


def check_round_complete(round_number: int, games: List[Game]) -> None:
    """Raise RoundNotComplete if any non-bye game of the round is unscored."""
    missing = unscored_games(games)
    if missing:
        raise RoundNotComplete(
            f"Round {round_number} has {len(missing)} unscored game(s)",
            missing=missing,
        )


def complete_round(tournament: Tournament, round_number: int) -> RoundCompletion:
    """Close a round and recompute the standings with its games counted.

    Nothing is modified: the caller persists the returned round and
    standings, or neither.
    """
    matching = [r for r in tournament.rounds if r.number == round_number]
    if not matching:
        raise InvalidConfig(f"Round {round_number} does not exist")
    qualifying_round = matching[0]

    games = tournament.games_for_round(round_number)
    check_round_complete(round_number, games)

    completed = replace(qualifying_round, is_complete=True)
    counted = tournament.completed_games()
    if not qualifying_round.is_complete:
        counted = counted + games

    standings = recompute_standings(
        counted, tournament.teams, tournament.config.pairing_method, tournament.scoring
    )
    return RoundCompletion(round=completed, standings=standings)
