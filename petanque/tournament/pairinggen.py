"""
Commands for the qualifying phase.

Every mutating command runs in one transaction and starts by locking the
tournament row, so commands on the same tournament never interleave. The
engine works on structures converted from the database; nothing is written
until all of its checks have passed.
"""

import logging

import reversion
from django.db import transaction

from petanque.tournament.db_to_structure import game_to_structure, tournament_to_structure
from petanque.tournament.models import (
    FROZEN_AFTER_ROUNDS,
    QualifyingGame,
    QualifyingRound,
    Tournament,
)
from petanque.tournament.structure_to_db import save_round_draw, save_standings
from petanque.tournament_core.exceptions import (
    DeleteBlocked,
    EditLocked,
    InvalidConfig,
    InvalidMatch,
)
from petanque.tournament_core.pairing import (
    RoundDraw,
    generate_next_round,
    schedule_tournament,
)
from petanque.tournament_core.rounds import complete_round as close_round
from petanque.tournament_core.rounds import record_game_score
from petanque.tournament_core.structure import PairingMethod, POOL_PLAY_ROUNDS

logger = logging.getLogger(__name__)

EDITABLE_SETTINGS = (
    "name",
    "team_composition",
    "tournament_type",
    "start_date",
    "end_date",
    "director",
    "head_umpire",
    "format",
    "day_type",
    "pairing_method",
    "qualifying_rounds",
    "court_count",
    "bracket_size",
    "advance_all",
    "advance_count",
    "has_consolante",
    "region_avoidance",
)


def lock_tournament(tournament_id):
    """Lock a tournament row for the rest of the current transaction."""
    try:
        return Tournament.objects.lock(tournament_id)
    except Tournament.DoesNotExist:
        raise InvalidConfig(f"Tournament {tournament_id} does not exist")


def lock_owner(queryset, field, missing):
    """Lock the tournament owning a row, found through ``field``.

    The row itself is not kept: callers read it again under the lock, since
    it may have been replaced while they waited.
    """
    tournament_id = queryset.values_list(field, flat=True).first()
    if tournament_id is None:
        raise missing
    return lock_tournament(tournament_id)


def _saved_draw(tournament, round_, draw: RoundDraw) -> RoundDraw:
    # Re-read so the returned structures carry database ids
    structure = tournament_to_structure(tournament)
    saved_round = next(r for r in structure.rounds if r.round_id == round_.pk)
    return RoundDraw(
        round=saved_round,
        games=structure.games_for_round(saved_round.number),
        warnings=draw.warnings,
    )


def generate_round(tournament_id) -> RoundDraw:
    with transaction.atomic():
        tournament = lock_tournament(tournament_id)
        if tournament.has_brackets():
            raise InvalidConfig("Brackets exist; the qualifying phase is over")
        draw = generate_next_round(tournament_to_structure(tournament))
        round_ = save_round_draw(tournament, draw)
        for warning in draw.warnings:
            logger.warning("%s round %d: %s", tournament, draw.round_number, warning)
        logger.info("%s: generated round %d", tournament, draw.round_number)
        return _saved_draw(tournament, round_, draw)


def generate_all_rounds(tournament_id):
    with transaction.atomic():
        tournament = lock_tournament(tournament_id)
        draws = schedule_tournament(tournament_to_structure(tournament))
        saved = []
        for draw in draws:
            round_ = save_round_draw(tournament, draw)
            saved.append(_saved_draw(tournament, round_, draw))
        logger.info("%s: scheduled %d rounds", tournament, len(saved))
        return saved


def complete_round(round_id):
    """Close a round once every game is scored and return the new standings."""
    with transaction.atomic():
        missing = InvalidConfig(f"Round {round_id} does not exist")
        tournament = lock_owner(
            QualifyingRound.objects.filter(pk=round_id), "tournament_id", missing
        )
        # Read the round only under the lock; it may have been deleted meanwhile
        try:
            round_ = tournament.qualifyinground_set.get(pk=round_id)
        except QualifyingRound.DoesNotExist:
            raise missing

        completion = close_round(tournament_to_structure(tournament), round_.number)

        round_.is_complete = True
        with reversion.create_revision():
            reversion.set_comment("Completed round.")
            round_.save()
        save_standings(tournament, completion.standings)
        logger.info("%s: completed round %d", tournament, round_.number)
        return completion.standings


def update_game_score(game_id, team1_score, team2_score):
    with transaction.atomic():
        missing = InvalidMatch(f"Game {game_id} does not exist")
        tournament = lock_owner(
            QualifyingGame.objects.filter(pk=game_id), "round__tournament_id", missing
        )
        try:
            game = QualifyingGame.objects.select_related("round").get(
                pk=game_id, round__tournament=tournament
            )
        except QualifyingGame.DoesNotExist:
            raise missing
        if tournament.has_brackets():
            raise EditLocked(
                "Brackets were generated from these results; delete the brackets "
                "before correcting the qualifying phase"
            )

        updated = record_game_score(
            game_to_structure(game, game.round.number), team1_score, team2_score
        )
        game.team1_score = updated.team1_score
        game.team2_score = updated.team2_score
        with reversion.create_revision():
            reversion.set_comment("Recorded score.")
            game.save()

        if game.round.is_complete:
            structure = tournament_to_structure(tournament)
            save_standings(tournament, structure.calculate_standings())
        return game_to_structure(game, game.round.number)


def delete_rounds(tournament_id):
    """Delete every qualifying round, allowed only while no score exists."""
    with transaction.atomic():
        tournament = lock_tournament(tournament_id)
        games = QualifyingGame.objects.filter(round__tournament=tournament)
        if (
            games.filter(team1_score__isnull=False).exists()
            or games.filter(team2_score__isnull=False).exists()
        ):
            raise DeleteBlocked("Rounds cannot be deleted once a score is recorded")
        if tournament.has_brackets():
            raise DeleteBlocked("Rounds cannot be deleted once brackets exist")
        count = tournament.qualifyinground_set.count()
        tournament.qualifyinground_set.all().delete()
        tournament.teamstanding_set.all().delete()
        logger.info("%s: deleted %d rounds", tournament, count)


def recompute_standings(tournament_id):
    with transaction.atomic():
        tournament = lock_tournament(tournament_id)
        standings = tournament_to_structure(tournament).calculate_standings()
        save_standings(tournament, standings)
        return standings


def fetch_standings(tournament_id):
    """Standings recomputed from the games; stored rows are never trusted.

    Takes the tournament lock so rounds and games are read from one state.
    """
    with transaction.atomic():
        tournament = lock_tournament(tournament_id)
        return tournament_to_structure(tournament).calculate_standings()


def update_tournament_settings(tournament_id, **changes):
    with transaction.atomic():
        tournament = lock_tournament(tournament_id)
        unknown = set(changes) - set(EDITABLE_SETTINGS)
        if unknown:
            raise InvalidConfig(f"Unknown settings: {', '.join(sorted(unknown))}")

        if tournament.has_rounds():
            frozen = [
                name
                for name in FROZEN_AFTER_ROUNDS
                if name in changes and changes[name] != getattr(tournament, name)
            ]
            if frozen:
                raise InvalidConfig(
                    f"Cannot change {', '.join(frozen)} after rounds have been generated"
                )

        for name, value in changes.items():
            setattr(tournament, name, value)
        try:
            method = PairingMethod(tournament.pairing_method)
        except ValueError:
            raise InvalidConfig(f"Unknown pairing method: {tournament.pairing_method}")
        if method == PairingMethod.POOL_PLAY:
            tournament.qualifying_rounds = POOL_PLAY_ROUNDS
        tournament.config().validate()

        with reversion.create_revision():
            reversion.set_comment("Updated settings.")
            tournament.save()
        return tournament
