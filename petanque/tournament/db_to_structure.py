"""
Transform database models to tournament_core structure representation.

This module provides functions to convert Django ORM models from
petanque.tournament into the tournament_core structures the engine works on.
IDs in the structures are database primary keys.
"""

from petanque.tournament_core.bracket import Bracket, BracketMatch, KnockoutPhase
from petanque.tournament_core.structure import (
    Game,
    QualifyingRound,
    Team,
    Tournament,
)


def team_to_structure(team) -> Team:
    return Team(
        team_id=team.pk,
        name=team.name,
        region=team.region or None,
        club=team.club or None,
    )


def game_to_structure(game, round_number: int) -> Game:
    return Game(
        round_number=round_number,
        team1_id=game.team1_id,
        team2_id=game.team2_id,
        court_number=game.court_number,
        team1_score=game.team1_score,
        team2_score=game.team2_score,
        is_bye=game.is_bye,
        game_id=game.pk,
    )


def tournament_to_structure(tournament) -> Tournament:
    """Convert a tournament with its teams, rounds and games.

    Teams keep their registration order, which is the seed order and the
    final tiebreak.
    """
    from petanque.tournament.models import QualifyingGame

    teams = [team_to_structure(t) for t in tournament.team_set.order_by("id")]
    rounds = [
        QualifyingRound(
            number=round_.number,
            is_complete=round_.is_complete,
            round_id=round_.pk,
        )
        for round_ in tournament.qualifyinground_set.order_by("number")
    ]
    games = [
        game_to_structure(game, game.round.number)
        for game in QualifyingGame.objects.filter(round__tournament=tournament)
        .select_related("round")
        .order_by("round__number", "board_order", "id")
    ]

    return Tournament(
        config=tournament.config(),
        teams=teams,
        rounds=rounds,
        games=games,
    )


def bracket_match_to_structure(match, keys_by_pk) -> BracketMatch:
    return BracketMatch(
        round_number=match.round_number,
        match_number=match.match_number,
        team1_id=match.team1_id,
        team2_id=match.team2_id,
        team1_score=match.team1_score,
        team2_score=match.team2_score,
        winner_id=match.winner_id,
        court_number=match.court_number,
        next_match=keys_by_pk.get(match.next_match_id),
        loser_next_match=keys_by_pk.get(match.loser_next_match_id),
        is_bye=match.is_bye,
        match_id=match.pk,
    )


def knockout_phase_to_structure(tournament) -> KnockoutPhase:
    """Convert every bracket of a tournament, main brackets first."""
    from petanque.tournament.models import BracketMatch as BracketMatchModel

    brackets = list(
        tournament.bracket_set.select_related("loser_bracket").order_by(
            "is_consolante", "name"
        )
    )
    matches = list(
        BracketMatchModel.objects.filter(bracket__tournament=tournament).order_by(
            "bracket", "round_number", "match_number"
        )
    )
    keys_by_pk = {m.pk: (m.round_number, m.match_number) for m in matches}

    phase = KnockoutPhase()
    for bracket in brackets:
        structure = Bracket(
            name=bracket.name,
            size=bracket.size,
            is_consolante=bracket.is_consolante,
            is_complete=bracket.is_complete,
            loser_bracket=bracket.loser_bracket.name if bracket.loser_bracket else None,
            bracket_id=bracket.pk,
        )
        for match in matches:
            if match.bracket_id == bracket.pk:
                converted = bracket_match_to_structure(match, keys_by_pk)
                structure.matches[converted.key] = converted
        phase.brackets.append(structure)
    return phase
