"""
Tests for the qualifying phase commands.
"""

from unittest.mock import patch

from django.test import TestCase
from reversion.models import Revision

from petanque.tournament import bracketgen, pairinggen
from petanque.tournament.models import (
    QualifyingGame,
    QualifyingRound,
    TeamStanding,
)
from petanque.tournament.tests.testutils import (
    change_before_lock,
    create_tournament,
    play_qualifying,
    play_round,
    score_round,
    team_names,
)
from petanque.tournament_core.exceptions import (
    DeleteBlocked,
    EditLocked,
    InvalidConfig,
    InvalidMatch,
    RoundNotComplete,
    TiedScore,
)


class GenerateRoundTests(TestCase):
    def setUp(self):
        self.tournament = create_tournament(num_teams=4, qualifying_rounds=2)

    def test_first_round_is_saved(self):
        draw = pairinggen.generate_round(self.tournament.pk)

        self.assertEqual(draw.round_number, 1)
        round_ = QualifyingRound.objects.get(tournament=self.tournament)
        self.assertFalse(round_.is_complete)
        games = QualifyingGame.objects.filter(round=round_)
        self.assertEqual(team_names(games), [("Team 1", "Team 2"), ("Team 3", "Team 4")])
        self.assertEqual([g.court_number for g in games], [1, 2])
        self.assertEqual([g.game_id for g in draw.games], [g.pk for g in games])
        self.assertEqual(draw.round.round_id, round_.pk)

    def test_odd_count_saves_a_bye(self):
        tournament = create_tournament(num_teams=5)
        pairinggen.generate_round(tournament.pk)
        bye = QualifyingGame.objects.get(round__tournament=tournament, is_bye=True)
        self.assertEqual(bye.team1.name, "Team 5")
        self.assertIsNone(bye.team2)
        self.assertIsNone(bye.court_number)

    def test_next_round_waits_for_completion(self):
        pairinggen.generate_round(self.tournament.pk)
        with self.assertRaises(RoundNotComplete):
            pairinggen.generate_round(self.tournament.pk)
        self.assertEqual(self.tournament.qualifyinground_set.count(), 1)

    def test_second_round_avoids_rematches(self):
        play_round(self.tournament)
        pairinggen.generate_round(self.tournament.pk)
        games = QualifyingGame.objects.filter(round__number=2)
        self.assertEqual(team_names(games), [("Team 1", "Team 3"), ("Team 2", "Team 4")])

    def test_no_round_after_the_last(self):
        play_qualifying(self.tournament)
        with self.assertRaises(InvalidConfig):
            pairinggen.generate_round(self.tournament.pk)

    def test_unknown_tournament(self):
        with self.assertRaises(InvalidConfig):
            pairinggen.generate_round(12345)

    def test_generation_is_audited(self):
        pairinggen.generate_round(self.tournament.pk)
        self.assertTrue(Revision.objects.filter(comment="Generated pairings.").exists())


class GenerateAllRoundsTests(TestCase):
    def test_round_robin_is_scheduled_upfront(self):
        tournament = create_tournament(num_teams=5, pairing_method="roundRobin")
        draws = pairinggen.generate_all_rounds(tournament.pk)
        self.assertEqual(len(draws), 5)
        self.assertEqual(tournament.qualifyinground_set.count(), 5)
        self.assertEqual(
            QualifyingGame.objects.filter(round__tournament=tournament, is_bye=True).count(),
            5,
        )

    def test_swiss_cannot_be_scheduled_upfront(self):
        tournament = create_tournament(num_teams=4)
        with self.assertRaises(InvalidConfig):
            pairinggen.generate_all_rounds(tournament.pk)
        self.assertFalse(tournament.has_rounds())


class CompleteRoundTests(TestCase):
    def setUp(self):
        self.tournament = create_tournament(num_teams=4, qualifying_rounds=2)
        pairinggen.generate_round(self.tournament.pk)
        self.round = QualifyingRound.objects.get(tournament=self.tournament, number=1)

    def test_unscored_games_block_completion(self):
        with self.assertRaises(RoundNotComplete):
            pairinggen.complete_round(self.round.pk)
        self.round.refresh_from_db()
        self.assertFalse(self.round.is_complete)
        self.assertFalse(TeamStanding.objects.exists())

    def test_completion_saves_standings(self):
        score_round(self.round)
        standings = pairinggen.complete_round(self.round.pk)

        self.round.refresh_from_db()
        self.assertTrue(self.round.is_complete)
        self.assertEqual(len(standings), 4)
        rows = TeamStanding.objects.filter(tournament=self.tournament).order_by("rank")
        self.assertEqual([r.team.name for r in rows], ["Team 1", "Team 3", "Team 2", "Team 4"])
        self.assertEqual(rows[0].wins, 1)
        self.assertEqual(rows[0].differential, 6)

    def test_unknown_round(self):
        with self.assertRaises(InvalidConfig):
            pairinggen.complete_round(12345)

    def test_round_deleted_while_waiting_for_the_lock(self):
        score_round(self.round)

        def delete_rounds(tournament_id):
            QualifyingRound.objects.filter(tournament_id=tournament_id).delete()

        with change_before_lock(delete_rounds):
            with self.assertRaises(InvalidConfig):
                pairinggen.complete_round(self.round.pk)
        self.assertFalse(TeamStanding.objects.exists())


class UpdateGameScoreTests(TestCase):
    def setUp(self):
        self.tournament = create_tournament(num_teams=5, qualifying_rounds=1)
        pairinggen.generate_round(self.tournament.pk)
        self.game = QualifyingGame.objects.filter(is_bye=False).first()

    def test_score_is_saved(self):
        game = pairinggen.update_game_score(self.game.pk, 13, 11)
        self.game.refresh_from_db()
        self.assertEqual((self.game.team1_score, self.game.team2_score), (13, 11))
        self.assertEqual(game.winner_id(), self.game.team1_id)

    def test_invalid_score_changes_nothing(self):
        with self.assertRaises(TiedScore):
            pairinggen.update_game_score(self.game.pk, 13, 13)
        self.game.refresh_from_db()
        self.assertIsNone(self.game.team1_score)

    def test_byes_and_unknown_games(self):
        bye = QualifyingGame.objects.get(is_bye=True)
        with self.assertRaises(InvalidMatch):
            pairinggen.update_game_score(bye.pk, 13, 7)
        with self.assertRaises(InvalidMatch):
            pairinggen.update_game_score(12345, 13, 7)

    def test_correction_after_completion_recomputes_standings(self):
        play_qualifying_round = QualifyingRound.objects.get(tournament=self.tournament)
        score_round(play_qualifying_round)
        pairinggen.complete_round(play_qualifying_round.pk)

        pairinggen.update_game_score(self.game.pk, 2, 13)
        row = TeamStanding.objects.get(team_id=self.game.team2_id)
        self.assertEqual(row.wins, 1)
        self.assertEqual(row.points_for, 13)

    def test_locked_once_brackets_exist(self):
        round_ = QualifyingRound.objects.get(tournament=self.tournament)
        score_round(round_)
        pairinggen.complete_round(round_.pk)
        bracketgen.generate_brackets(self.tournament.pk)

        with self.assertRaises(EditLocked):
            pairinggen.update_game_score(self.game.pk, 2, 13)

    def test_game_deleted_while_waiting_for_the_lock(self):
        def delete_rounds(tournament_id):
            QualifyingRound.objects.filter(tournament_id=tournament_id).delete()

        with change_before_lock(delete_rounds):
            with self.assertRaises(InvalidMatch):
                pairinggen.update_game_score(self.game.pk, 13, 7)

    def test_locked_message_points_at_deleting_the_brackets(self):
        round_ = QualifyingRound.objects.get(tournament=self.tournament)
        score_round(round_)
        pairinggen.complete_round(round_.pk)
        bracketgen.generate_brackets(self.tournament.pk)

        with self.assertRaisesMessage(EditLocked, "delete the brackets"):
            pairinggen.update_game_score(self.game.pk, 2, 13)


class DeleteRoundsTests(TestCase):
    def setUp(self):
        self.tournament = create_tournament(num_teams=4)
        pairinggen.generate_round(self.tournament.pk)

    def test_delete_before_any_score(self):
        pairinggen.delete_rounds(self.tournament.pk)
        self.assertFalse(self.tournament.has_rounds())
        self.assertFalse(QualifyingGame.objects.exists())

    def test_blocked_once_a_score_exists(self):
        game = QualifyingGame.objects.first()
        pairinggen.update_game_score(game.pk, 13, 0)
        with self.assertRaises(DeleteBlocked):
            pairinggen.delete_rounds(self.tournament.pk)
        self.assertTrue(self.tournament.has_rounds())


class StandingsTests(TestCase):
    def setUp(self):
        self.tournament = create_tournament(num_teams=4, qualifying_rounds=2)
        play_round(self.tournament)

    def test_fetch_ignores_stored_rows(self):
        TeamStanding.objects.all().update(wins=9)
        standings = pairinggen.fetch_standings(self.tournament.pk)
        self.assertEqual(sorted(s.wins for s in standings), [0, 0, 1, 1])

    def test_recompute_rewrites_stored_rows(self):
        TeamStanding.objects.all().delete()
        pairinggen.recompute_standings(self.tournament.pk)
        self.assertEqual(TeamStanding.objects.filter(tournament=self.tournament).count(), 4)

    def test_open_round_is_not_counted(self):
        pairinggen.generate_round(self.tournament.pk)
        score_round(QualifyingRound.objects.get(number=2))
        standings = pairinggen.fetch_standings(self.tournament.pk)
        self.assertEqual(sum(s.wins for s in standings), 2)

    def test_fetch_reads_under_the_tournament_lock(self):
        with patch(
            "petanque.tournament.pairinggen.lock_tournament",
            wraps=pairinggen.lock_tournament,
        ) as lock:
            pairinggen.fetch_standings(self.tournament.pk)
        lock.assert_called_once_with(self.tournament.pk)

    def test_fetch_unknown_tournament(self):
        with self.assertRaises(InvalidConfig):
            pairinggen.fetch_standings(12345)
