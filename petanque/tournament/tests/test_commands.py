"""
Tests for the seeding and simulation management commands.
"""

from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase

from petanque.tournament.models import Bracket, QualifyingRound, Team, Tournament


class SeedTournamentTests(TestCase):
    def test_seed_creates_teams(self):
        out = StringIO()
        call_command("seed_tournament", "--teams", "6", "--seed", "4", stdout=out)
        tournament = Tournament.objects.get()
        self.assertEqual(Team.objects.filter(tournament=tournament).count(), 6)
        self.assertIn("Created tournament", out.getvalue())
        self.assertFalse(tournament.has_rounds())

    def test_seed_with_first_round(self):
        call_command(
            "seed_tournament",
            "--teams",
            "5",
            "--method",
            "swissHotel",
            "--generate-round",
            stdout=StringIO(),
        )
        self.assertEqual(QualifyingRound.objects.count(), 1)

    def test_round_robin_is_scheduled_upfront(self):
        call_command(
            "seed_tournament",
            "--teams",
            "4",
            "--method",
            "roundRobin",
            "--generate-round",
            stdout=StringIO(),
        )
        self.assertEqual(QualifyingRound.objects.count(), 3)

    def test_needs_two_teams(self):
        with self.assertRaises(CommandError):
            call_command("seed_tournament", "--teams", "1", stdout=StringIO())


class GenerateRandomResultsTests(TestCase):
    def setUp(self):
        call_command(
            "seed_tournament",
            "--teams",
            "8",
            "--rounds",
            "3",
            "--bracket-size",
            "8",
            "--consolante",
            stdout=StringIO(),
        )
        self.tournament = Tournament.objects.get()

    def test_all_rounds_and_brackets(self):
        out = StringIO()
        call_command(
            "generate_random_results",
            "--latest",
            "--all-rounds",
            "--brackets",
            stdout=out,
        )
        rounds = QualifyingRound.objects.filter(tournament=self.tournament)
        self.assertEqual(rounds.count(), 3)
        self.assertTrue(all(r.is_complete for r in rounds))
        main = Bracket.objects.get(tournament=self.tournament, name="A")
        self.assertTrue(main.is_complete)
        self.assertIn("Qualifying phase complete", out.getvalue())

    def test_single_round(self):
        call_command("seed_tournament", "--teams", "4", "--generate-round", stdout=StringIO())
        latest = Tournament.objects.order_by("-id").first()
        call_command("generate_random_results", str(latest.pk), stdout=StringIO())
        self.assertTrue(QualifyingRound.objects.get(tournament=latest).is_complete)

    def test_needs_rounds(self):
        with self.assertRaises(CommandError):
            call_command("generate_random_results", str(self.tournament.pk), stdout=StringIO())

    def test_unknown_tournament(self):
        with self.assertRaises(CommandError):
            call_command("generate_random_results", "12345", stdout=StringIO())
