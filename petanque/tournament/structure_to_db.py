"""
Convert tournament_core structures to database objects.

This module persists what the engine produces: generated rounds, recomputed
standings and brackets. It also turns a TournamentBuilder structure into a
full set of database rows, which the tests use to set up scenarios.
"""

import math
from typing import Dict, List, Optional

import reversion

from petanque.tournament_core.bracket import KnockoutPhase
from petanque.tournament_core.builder import TournamentBuilder
from petanque.tournament_core.pairing import RoundDraw
from petanque.tournament_core.structure import Standing


def save_round_draw(tournament, draw: RoundDraw):
    """Create the round and its games. Returns the QualifyingRound row."""
    from petanque.tournament.models import QualifyingGame, QualifyingRound

    with reversion.create_revision():
        reversion.set_comment("Generated pairings.")
        round_ = QualifyingRound.objects.create(
            tournament=tournament,
            number=draw.round.number,
            is_complete=draw.round.is_complete,
        )
        for order, game in enumerate(draw.games, start=1):
            QualifyingGame.objects.create(
                round=round_,
                court_number=game.court_number,
                team1_id=game.team1_id,
                team2_id=game.team2_id,
                team1_score=game.team1_score,
                team2_score=game.team2_score,
                is_bye=game.is_bye,
                board_order=order,
            )
    return round_


def save_standings(tournament, standings: List[Standing]) -> None:
    """Replace the cached standings rows with a fresh recomputation."""
    from petanque.tournament.models import TeamStanding

    TeamStanding.objects.filter(tournament=tournament).delete()
    TeamStanding.objects.bulk_create(
        [
            TeamStanding(
                tournament=tournament,
                team_id=s.team_id,
                wins=s.wins,
                losses=s.losses,
                points_for=s.points_for,
                points_against=s.points_against,
                differential=s.differential,
                buchholz=s.buchholz,
                fine_buchholz=s.fine_buchholz,
                point_quotient=None if math.isinf(s.point_quotient) else s.point_quotient,
                is_eliminated=s.is_eliminated,
                rank=s.rank,
            )
            for s in standings
        ]
    )


def save_knockout_phase(tournament, phase: KnockoutPhase) -> None:
    """Create bracket and match rows for a freshly generated phase.

    Links are written in a second pass once every match has a primary key.
    The structures get their ``bracket_id`` and ``match_id`` filled in.
    """
    from petanque.tournament.models import Bracket, BracketMatch

    with reversion.create_revision():
        reversion.set_comment("Generated brackets.")
        rows: Dict[str, Bracket] = {}
        match_rows = {}
        for bracket in phase.brackets:
            row = Bracket.objects.create(
                tournament=tournament,
                name=bracket.name,
                size=bracket.size,
                is_consolante=bracket.is_consolante,
                is_complete=bracket.is_complete,
            )
            rows[bracket.name] = row
            bracket.bracket_id = row.pk
            for match in bracket.ordered_matches():
                match_row = BracketMatch.objects.create(
                    bracket=row,
                    round_number=match.round_number,
                    match_number=match.match_number,
                    court_number=match.court_number,
                    team1_id=match.team1_id,
                    team2_id=match.team2_id,
                    team1_score=match.team1_score,
                    team2_score=match.team2_score,
                    winner_id=match.winner_id,
                    is_bye=match.is_bye,
                )
                match.match_id = match_row.pk
                match_rows[(bracket.name, match.key)] = match_row

        for bracket in phase.brackets:
            if bracket.loser_bracket:
                rows[bracket.name].loser_bracket = rows[bracket.loser_bracket]
                rows[bracket.name].save()
            for match in bracket.matches.values():
                match_row = match_rows[(bracket.name, match.key)]
                if match.next_match is not None:
                    match_row.next_match = match_rows[(bracket.name, match.next_match)]
                if match.loser_next_match is not None and bracket.loser_bracket:
                    match_row.loser_next_match = match_rows[
                        (bracket.loser_bracket, match.loser_next_match)
                    ]
                match_row.save()


def update_knockout_phase(phase: KnockoutPhase) -> None:
    """Write back the mutable state of every match after a result."""
    from petanque.tournament.models import Bracket, BracketMatch

    with reversion.create_revision():
        reversion.set_comment("Recorded bracket result.")
        for bracket in phase.brackets:
            Bracket.objects.filter(pk=bracket.bracket_id).update(
                is_complete=bracket.is_complete
            )
            for match in bracket.matches.values():
                row = BracketMatch.objects.get(pk=match.match_id)
                changed = (
                    row.team1_id != match.team1_id
                    or row.team2_id != match.team2_id
                    or row.team1_score != match.team1_score
                    or row.team2_score != match.team2_score
                    or row.winner_id != match.winner_id
                    or row.is_bye != match.is_bye
                )
                if not changed:
                    continue
                row.team1_id = match.team1_id
                row.team2_id = match.team2_id
                row.team1_score = match.team1_score
                row.team2_score = match.team2_score
                row.winner_id = match.winner_id
                row.is_bye = match.is_bye
                row.save()


def structure_to_db(builder: TournamentBuilder, name: Optional[str] = None, **fields):
    """Convert a TournamentBuilder's structure to database objects.

    Args:
        builder: A TournamentBuilder with teams, rounds and games
        name: Tournament name
        **fields: Extra Tournament model fields (director, dates, ...)

    Returns:
        dict: A dictionary containing the created database objects:
            - 'tournament': The Tournament instance
            - 'teams': Dict mapping team names to Team instances
            - 'rounds': List of QualifyingRound instances
    """
    from petanque.tournament.models import (
        QualifyingGame,
        QualifyingRound,
        Team,
        Tournament,
    )

    structure = builder.tournament
    config = structure.config

    tournament = Tournament.objects.create(
        name=name or "Test Tournament",
        pairing_method=config.pairing_method.value,
        qualifying_rounds=config.qualifying_rounds,
        court_count=config.court_count,
        bracket_size=config.bracket_size,
        advance_all=config.advance_all,
        advance_count=config.advance_count,
        has_consolante=config.has_consolante,
        region_avoidance=config.region_avoidance,
        **fields,
    )

    teams = {}
    team_rows = {}
    for team in structure.teams:
        row = Team.objects.create(
            tournament=tournament,
            captain=team.name,
            player2=f"{team.name} 2",
            region=team.region or "",
            club=team.club or "",
        )
        teams[team.name] = row
        team_rows[team.team_id] = row

    rounds = []
    for round_ in structure.rounds:
        round_row = QualifyingRound.objects.create(
            tournament=tournament, number=round_.number, is_complete=round_.is_complete
        )
        rounds.append(round_row)
        for order, game in enumerate(structure.games_for_round(round_.number), start=1):
            QualifyingGame.objects.create(
                round=round_row,
                court_number=game.court_number,
                team1=team_rows.get(game.team1_id),
                team2=team_rows.get(game.team2_id),
                team1_score=game.team1_score,
                team2_score=game.team2_score,
                is_bye=game.is_bye,
                board_order=order,
            )

    return {"tournament": tournament, "teams": teams, "rounds": rounds}
