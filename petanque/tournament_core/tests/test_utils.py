"""
Test utilities for creating tournament structures easily.

These utilities create pure tournament_core structures without database
dependencies, making it easy to test pairing, standings and brackets.
"""

from dataclasses import replace
from typing import Callable, List, Optional, Tuple

from petanque.tournament_core.builder import TournamentBuilder
from petanque.tournament_core.pairing import RoundDraw, generate_next_round
from petanque.tournament_core.structure import (
    Game,
    PairingMethod,
    QualifyingRound,
    Standing,
    Tournament,
)


def team_names(num_teams: int) -> List[str]:
    return [f"Team {i}" for i in range(1, num_teams + 1)]


def create_tournament(
    num_teams: int = 4,
    method: PairingMethod = PairingMethod.SWISS,
    **settings,
) -> Tournament:
    """Create a tournament with numbered teams and no rounds."""
    builder = TournamentBuilder().method(method)
    if settings:
        builder.settings(**settings)
    builder.teams(*team_names(num_teams))
    return builder.build()


def first_team_wins(game: Game) -> Tuple[int, int]:
    return (13, 7)


def play_round(
    tournament: Tournament,
    score: Callable[[Game], Tuple[int, int]] = first_team_wins,
) -> RoundDraw:
    """Generate the next round, score every game and mark the round complete."""
    draw = generate_next_round(tournament)
    tournament.rounds.append(replace(draw.round, is_complete=True))
    for game in draw.games:
        if not game.is_bye:
            game = game.with_scores(*score(game))
        tournament.games.append(game)
    return draw


def play_rounds(
    tournament: Tournament,
    count: int,
    score: Callable[[Game], Tuple[int, int]] = first_team_wins,
) -> List[RoundDraw]:
    return [play_round(tournament, score) for _ in range(count)]


def ranked_standings(team_ids: List[int]) -> List[Standing]:
    """Standings ranked in the given order, as the bracket engine consumes them."""
    return [
        Standing(team_id=team_id, rank=rank)
        for rank, team_id in enumerate(team_ids, start=1)
    ]


def completed_rounds(count: int = 1) -> List[QualifyingRound]:
    return [QualifyingRound(number=n, is_complete=True) for n in range(1, count + 1)]


def pair_names(
    tournament: Tournament, draw: RoundDraw
) -> List[Tuple[str, Optional[str]]]:
    """The draw's games as (team1, team2) names; byes have None as team2."""
    names = {team.team_id: team.name for team in tournament.teams}
    return [
        (names[g.team1_id], names[g.team2_id] if g.team2_id is not None else None)
        for g in draw.games
    ]
