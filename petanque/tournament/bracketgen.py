"""
Commands for the bracket phase.

Brackets are seeded once from the final qualifying standings. After that,
results only move teams through the brackets and never touch the
qualifying rounds. Correcting a qualifying result means deleting the
brackets first and generating them again afterwards.
"""

import logging

from django.db import transaction

from petanque.tournament.db_to_structure import (
    knockout_phase_to_structure,
    tournament_to_structure,
)
from petanque.tournament.models import BracketMatch
from petanque.tournament.pairinggen import lock_owner, lock_tournament
from petanque.tournament.structure_to_db import (
    save_knockout_phase,
    update_knockout_phase,
)
from petanque.tournament_core import bracket as engine
from petanque.tournament_core.exceptions import InvalidMatch

logger = logging.getLogger(__name__)


def _generate(tournament, has_existing):
    structure = tournament_to_structure(tournament)
    phase = engine.generate_brackets(
        structure.config,
        structure.calculate_standings(),
        structure.rounds,
        has_existing=has_existing,
    )
    save_knockout_phase(tournament, phase)
    logger.info(
        "%s: generated brackets %s",
        tournament,
        ", ".join(b.name for b in phase.brackets),
    )
    return phase


def generate_brackets(tournament_id):
    with transaction.atomic():
        tournament = lock_tournament(tournament_id)
        return _generate(tournament, tournament.has_brackets())


def regenerate_brackets(tournament_id):
    """Throw away every bracket and seed again from the current standings.

    Runs in one transaction: if generation fails the old brackets are kept.
    """
    with transaction.atomic():
        tournament = lock_tournament(tournament_id)
        _delete_brackets(tournament)
        return _generate(tournament, False)


def delete_brackets(tournament_id):
    """Delete every bracket, reopening the qualifying phase for corrections."""
    with transaction.atomic():
        _delete_brackets(lock_tournament(tournament_id))


def _delete_brackets(tournament):
    deleted = tournament.bracket_set.count()
    tournament.bracket_set.all().delete()
    logger.info("%s: deleted %d brackets", tournament, deleted)


def update_match_score(match_id, team1_score, team2_score):
    with transaction.atomic():
        missing = InvalidMatch(f"Match {match_id} does not exist")
        tournament = lock_owner(
            BracketMatch.objects.filter(pk=match_id), "bracket__tournament_id", missing
        )
        # Regeneration reuses the same keys, so the row must be read under the lock
        try:
            row = BracketMatch.objects.select_related("bracket").get(
                pk=match_id, bracket__tournament=tournament
            )
        except BracketMatch.DoesNotExist:
            raise missing

        phase = knockout_phase_to_structure(tournament)
        match = engine.update_match_score(
            phase,
            row.bracket.name,
            (row.round_number, row.match_number),
            team1_score,
            team2_score,
        )
        update_knockout_phase(phase)
        return match


def fetch_matches(tournament_id):
    with transaction.atomic():
        tournament = lock_tournament(tournament_id)
        return knockout_phase_to_structure(tournament)
