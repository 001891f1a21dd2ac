"""
Tests for round robin scheduling with the circle method.
"""

import itertools
import unittest
from collections import Counter

from petanque.tournament_core.exceptions import InvalidConfig
from petanque.tournament_core.history import HistoryLedger
from petanque.tournament_core.pairing import (
    generate_all_rounds,
    generate_next_round,
    schedule_tournament,
)
from petanque.tournament_core.structure import PairingMethod
from petanque.tournament_core.tests.test_utils import create_tournament, pair_names


def meetings(draws):
    counts = Counter()
    for draw in draws:
        for game in draw.games:
            if not game.is_bye:
                counts[frozenset((game.team1_id, game.team2_id))] += 1
    return counts


class RoundRobinTests(unittest.TestCase):
    def test_four_teams_play_three_rounds(self):
        tournament = create_tournament(4, PairingMethod.ROUND_ROBIN)
        draws = schedule_tournament(tournament)
        self.assertEqual([d.round_number for d in draws], [1, 2, 3])
        self.assertEqual(
            [pair_names(tournament, d) for d in draws],
            [
                [("Team 1", "Team 4"), ("Team 2", "Team 3")],
                [("Team 1", "Team 3"), ("Team 4", "Team 2")],
                [("Team 1", "Team 2"), ("Team 3", "Team 4")],
            ],
        )

    def test_every_pair_meets_exactly_once(self):
        for num_teams in (2, 4, 6, 7, 8):
            tournament = create_tournament(num_teams, PairingMethod.ROUND_ROBIN)
            draws = schedule_tournament(tournament)
            counts = meetings(draws)
            for a, b in itertools.combinations(tournament.team_ids, 2):
                self.assertEqual(counts[frozenset((a, b))], 1, (num_teams, a, b))

    def test_odd_count_rotates_one_bye_per_round(self):
        tournament = create_tournament(5, PairingMethod.ROUND_ROBIN)
        draws = schedule_tournament(tournament)
        self.assertEqual(len(draws), 5)
        byes = [d.byes[0].team1_id for d in draws]
        self.assertTrue(all(len(d.byes) == 1 for d in draws))
        self.assertEqual(sorted(byes), tournament.team_ids)

    def test_courts_rotate_over_the_schedule(self):
        tournament = create_tournament(4, PairingMethod.ROUND_ROBIN, court_count=6)
        draws = schedule_tournament(tournament)
        ledger = HistoryLedger()
        for draw in draws:
            ledger.record_games(draw.games)
        for team_id in tournament.team_ids:
            self.assertEqual(len(ledger.courts_used(team_id)), 3)

    def test_round_by_round_matches_the_schedule(self):
        tournament = create_tournament(6, PairingMethod.ROUND_ROBIN)
        upfront = schedule_tournament(tournament)
        first = generate_next_round(tournament)
        self.assertEqual(first.games, upfront[0].games)

    def test_next_round_does_not_wait_for_results(self):
        tournament = create_tournament(4, PairingMethod.ROUND_ROBIN)
        first = generate_next_round(tournament)
        tournament.rounds.append(first.round)
        tournament.games.extend(first.games)
        second = generate_next_round(tournament)
        self.assertEqual(second.round_number, 2)

    def test_schedule_requires_an_empty_tournament(self):
        tournament = create_tournament(4, PairingMethod.ROUND_ROBIN)
        first = generate_next_round(tournament)
        tournament.rounds.append(first.round)
        with self.assertRaises(InvalidConfig):
            schedule_tournament(tournament)

    def test_no_round_after_the_last(self):
        tournament = create_tournament(3, PairingMethod.ROUND_ROBIN)
        for draw in schedule_tournament(tournament):
            tournament.rounds.append(draw.round)
            tournament.games.extend(draw.games)
        with self.assertRaises(InvalidConfig):
            generate_next_round(tournament)

    def test_needs_two_teams(self):
        tournament = create_tournament(1, PairingMethod.ROUND_ROBIN)
        with self.assertRaises(InvalidConfig):
            generate_all_rounds(tournament.teams, HistoryLedger(), tournament.config)


if __name__ == "__main__":
    unittest.main()
