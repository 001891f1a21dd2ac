"""
Tests for the tournament data model and configuration.
"""

import math
import unittest

from petanque.tournament_core.builder import TournamentBuilder
from petanque.tournament_core.exceptions import InvalidConfig
from petanque.tournament_core.structure import (
    Game,
    PairingMethod,
    Standing,
    Team,
    TournamentConfig,
    tiebreak_order,
)


class TournamentConfigTests(unittest.TestCase):
    def test_defaults_are_valid(self):
        TournamentConfig().validate()

    def test_bracket_size_must_be_supported(self):
        for size in (2, 6, 12, 64):
            with self.assertRaises(InvalidConfig):
                TournamentConfig(bracket_size=size).validate()
        for size in (4, 8, 16, 32):
            TournamentConfig(bracket_size=size).validate()

    def test_invalid_config_is_a_value_error(self):
        with self.assertRaises(ValueError):
            TournamentConfig(court_count=0).validate()

    def test_rounds_must_be_positive(self):
        with self.assertRaises(InvalidConfig):
            TournamentConfig(qualifying_rounds=0).validate()

    def test_advancement_count_must_allow_a_match(self):
        with self.assertRaises(InvalidConfig):
            TournamentConfig(advance_all=False, advance_count=1).validate()
        TournamentConfig(advance_all=False, advance_count=2).validate()

    def test_pool_play_always_has_three_rounds(self):
        config = TournamentConfig(
            pairing_method=PairingMethod.POOL_PLAY, qualifying_rounds=7
        )
        self.assertEqual(config.qualifying_rounds, 3)
        self.assertEqual(config.rounds_for(12), 3)

    def test_round_robin_round_count(self):
        config = TournamentConfig(pairing_method=PairingMethod.ROUND_ROBIN)
        self.assertEqual(config.rounds_for(6), 5)
        self.assertEqual(config.rounds_for(5), 5)
        self.assertEqual(config.rounds_for(2), 1)

    def test_swiss_uses_configured_rounds(self):
        self.assertEqual(TournamentConfig(qualifying_rounds=4).rounds_for(20), 4)

    def test_advancing_limit(self):
        self.assertIsNone(TournamentConfig().advancing_limit)
        self.assertEqual(
            TournamentConfig(advance_all=False, bracket_size=8).advancing_limit, 8
        )
        self.assertEqual(
            TournamentConfig(advance_all=False, advance_count=6).advancing_limit, 6
        )

    def test_tiebreak_chains(self):
        self.assertEqual(
            tiebreak_order(PairingMethod.SWISS),
            ["wins", "differential", "buchholz", "fine_buchholz", "points_for"],
        )
        for method in (
            PairingMethod.SEEDED_SWISS,
            PairingMethod.ROUND_ROBIN,
            PairingMethod.POOL_PLAY,
        ):
            self.assertEqual(
                tiebreak_order(method),
                ["wins", "point_quotient", "differential", "points_for"],
            )

    def test_method_values_match_storage(self):
        self.assertEqual(PairingMethod("swissHotel"), PairingMethod.SEEDED_SWISS)
        self.assertEqual(PairingMethod("roundRobin"), PairingMethod.ROUND_ROBIN)
        self.assertEqual(PairingMethod("poolPlay"), PairingMethod.POOL_PLAY)


class GameTests(unittest.TestCase):
    def test_scored_game_has_a_strict_winner(self):
        game = Game(round_number=1, team1_id=1, team2_id=2, team1_score=13, team2_score=9)
        self.assertTrue(game.is_scored)
        self.assertTrue(game.is_complete)
        self.assertEqual(game.winner_id(), 1)
        self.assertEqual(game.loser_id(), 2)
        self.assertEqual(game.points(2), (9, 13))

    def test_partial_or_tied_scores_are_not_scored(self):
        partial = Game(round_number=1, team1_id=1, team2_id=2, team1_score=13)
        tied = Game(round_number=1, team1_id=1, team2_id=2, team1_score=8, team2_score=8)
        for game in (partial, tied):
            self.assertFalse(game.is_scored)
            self.assertFalse(game.is_complete)
            self.assertIsNone(game.winner_id())
        self.assertTrue(partial.has_score)

    def test_bye_is_a_13_7_win(self):
        bye = Game(round_number=2, team1_id=5, is_bye=True)
        self.assertTrue(bye.is_complete)
        self.assertFalse(bye.is_scored)
        self.assertEqual(bye.winner_id(), 5)
        self.assertIsNone(bye.loser_id())
        self.assertEqual(bye.points(5), (13, 7))
        self.assertIsNone(bye.opponent_of(5))

    def test_opponent_of_unknown_team(self):
        game = Game(round_number=1, team1_id=1, team2_id=2)
        self.assertEqual(game.opponent_of(1), 2)
        with self.assertRaises(ValueError):
            game.opponent_of(3)

    def test_with_scores_returns_a_new_game(self):
        game = Game(round_number=1, team1_id=1, team2_id=2, court_number=3)
        scored = game.with_scores(4, 13)
        self.assertIsNone(game.team1_score)
        self.assertEqual(scored.winner_id(), 2)
        self.assertEqual(scored.court_number, 3)


class StandingTests(unittest.TestCase):
    def test_point_quotient(self):
        standing = Standing(team_id=1, points_for=26, points_against=20)
        self.assertAlmostEqual(standing.point_quotient, 1.3)
        self.assertEqual(standing.differential, 6)

    def test_point_quotient_is_infinite_without_points_against(self):
        self.assertTrue(math.isinf(Standing(team_id=1, points_for=13).point_quotient))


class TeamTests(unittest.TestCase):
    def test_same_region_ignores_case_and_blanks(self):
        self.assertTrue(Team(1, region="Nord").same_region(Team(2, region=" nord ")))
        self.assertFalse(Team(1, region="Nord").same_region(Team(2, region="Sud")))
        self.assertFalse(Team(1).same_region(Team(2)))


class TournamentTests(unittest.TestCase):
    def setUp(self):
        self.builder = TournamentBuilder().teams("A", "B", "C", "D")
        self.builder.round().game("A", "B", 13, 4, court=1).game("C", "D", 7, 13, court=2)
        self.builder.complete()
        self.builder.round().game("A", "D", court=1).game("B", "C", 13, 12, court=2)
        self.tournament = self.builder.build()

    def test_only_completed_rounds_count(self):
        self.assertEqual(len(self.tournament.completed_games()), 2)
        standings = self.tournament.standings_by_team()
        self.assertEqual(standings[self.builder.id_of("B")].losses, 1)
        self.assertEqual(standings[self.builder.id_of("B")].wins, 0)

    def test_ledger_covers_every_generated_game(self):
        ledger = self.tournament.ledger()
        self.assertTrue(ledger.has_played(self.builder.id_of("A"), self.builder.id_of("D")))
        self.assertEqual(ledger.court_uses(self.builder.id_of("A"), 1), 2)

    def test_round_views(self):
        self.assertEqual(self.tournament.num_rounds, 2)
        self.assertEqual(self.tournament.current_round.number, 2)
        self.assertEqual(len(self.tournament.games_for_round(2)), 2)
        self.assertFalse(self.tournament.is_qualifying_complete())

    def test_team_lookup(self):
        self.assertEqual(self.tournament.team(self.builder.id_of("C")).name, "C")
        with self.assertRaises(KeyError):
            self.tournament.team(99)


if __name__ == "__main__":
    unittest.main()
