"""
Management command to generate random results for a tournament.

This command scores every unscored game of a qualifying round with a random
13-x result and closes the round. With --all-rounds it keeps generating and
closing rounds until the qualifying phase is over; with --brackets it then
seeds the brackets and plays them out.
"""

import random

from django.core.management.base import BaseCommand, CommandError

from petanque.tournament import bracketgen, pairinggen
from petanque.tournament.db_to_structure import tournament_to_structure
from petanque.tournament.models import QualifyingGame, QualifyingRound, Tournament
from petanque.tournament_core.bracket import MatchState
from petanque.tournament_core.exceptions import TournamentError
from petanque.tournament_core.structure import PairingMethod


def random_score(scoring_max=13):
    """Return a decisive (team1, team2) score with one side on scoring_max."""
    loser = random.randint(0, scoring_max - 1)
    if random.random() < 0.5:
        return scoring_max, loser
    return loser, scoring_max


class Command(BaseCommand):
    help = "Generate random results for the qualifying rounds of a tournament"

    def add_arguments(self, parser):
        parser.add_argument(
            "tournament_id",
            type=int,
            nargs="?",
            help="Tournament ID to generate results for",
        )
        parser.add_argument(
            "--latest",
            action="store_true",
            help="Use the most recently created tournament",
        )
        parser.add_argument(
            "--round-number",
            type=int,
            help="Specific round number (default: current/latest round)",
        )
        parser.add_argument(
            "--all-rounds",
            action="store_true",
            help="Generate, score and complete rounds until qualifying is over",
        )
        parser.add_argument(
            "--brackets",
            action="store_true",
            help="After qualifying, generate the brackets and play every match",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show what would be done without making changes",
        )
        parser.add_argument(
            "--overwrite",
            action="store_true",
            help="Overwrite existing results (default: skip games with results)",
        )

    def handle(self, *args, **options):
        tournament = self._find_tournament(options)
        self.stdout.write(f"Processing tournament: {tournament.name}")

        try:
            if options["all_rounds"]:
                if options["dry_run"]:
                    raise CommandError("--dry-run cannot be combined with --all-rounds")
                self._play_qualifying(tournament, options["overwrite"])
            else:
                target_round = self._find_round(tournament, options["round_number"])
                self.stdout.write(f"Target round: {target_round.number}")
                generated = self._score_round(
                    target_round, options["dry_run"], options["overwrite"]
                )
                if options["dry_run"]:
                    self.stdout.write(
                        self.style.WARNING(f"DRY RUN: Would generate {generated} results")
                    )
                    return
                self._report(generated)
                if not target_round.is_complete:
                    pairinggen.complete_round(target_round.id)
                    self.stdout.write(f"✓ Round {target_round.number} completed")

            if options["brackets"]:
                self._play_brackets(tournament)
        except TournamentError as e:
            raise CommandError(str(e))

    def _find_tournament(self, options):
        if options["tournament_id"] is not None:
            try:
                return Tournament.objects.get(id=options["tournament_id"])
            except Tournament.DoesNotExist:
                raise CommandError(
                    f"Tournament with ID {options['tournament_id']} does not exist"
                )
        if options["latest"]:
            tournament = Tournament.objects.order_by("-id").first()
            if tournament is None:
                raise CommandError("No tournaments found")
            return tournament
        raise CommandError("Give a tournament ID or --latest")

    def _find_round(self, tournament, round_number):
        rounds = QualifyingRound.objects.filter(tournament=tournament)
        if round_number:
            try:
                return rounds.get(number=round_number)
            except QualifyingRound.DoesNotExist:
                raise CommandError(
                    f"Round {round_number} does not exist for tournament {tournament.id}"
                )
        target_round = rounds.order_by("-number").first()
        if not target_round:
            raise CommandError(f"No rounds found for tournament {tournament.id}")
        return target_round

    def _score_round(self, round_obj, dry_run, overwrite):
        games = QualifyingGame.objects.filter(round=round_obj, is_bye=False).order_by(
            "board_order"
        )
        generated = 0
        for game in games:
            if game.has_score() and not overwrite:
                continue
            team1_score, team2_score = random_score()
            if not dry_run:
                pairinggen.update_game_score(game.id, team1_score, team2_score)
            generated += 1
        return generated

    def _report(self, generated):
        if generated > 0:
            self.stdout.write(self.style.SUCCESS(f"✓ Generated {generated} random results"))
        else:
            self.stdout.write("No results generated (all games already have results)")

    def _play_qualifying(self, tournament, overwrite):
        while True:
            structure = tournament_to_structure(tournament)
            if structure.is_qualifying_complete():
                break
            current = structure.current_round
            if current is None or current.is_complete:
                if (
                    structure.config.pairing_method == PairingMethod.ROUND_ROBIN
                    and current is None
                ):
                    draws = pairinggen.generate_all_rounds(tournament.id)
                    self.stdout.write(f"✓ Scheduled {len(draws)} rounds")
                    continue
                draw = pairinggen.generate_round(tournament.id)
                self.stdout.write(f"✓ Generated round {draw.round_number}")
                for warning in draw.warnings:
                    self.stdout.write(self.style.WARNING(f"  ! {warning}"))
                continue

            # Rounds are closed in order; the first open one is next
            open_round = next(r for r in structure.rounds if not r.is_complete)
            round_obj = QualifyingRound.objects.get(pk=open_round.round_id)
            self._report(self._score_round(round_obj, False, overwrite))
            pairinggen.complete_round(round_obj.id)
            self.stdout.write(f"✓ Round {round_obj.number} completed")

        self.stdout.write(self.style.SUCCESS("✓ Qualifying phase complete"))
        for standing in pairinggen.fetch_standings(tournament.id)[:8]:
            team = tournament.team_set.get(pk=standing.team_id)
            self.stdout.write(
                f"  {standing.rank:2d}. {team.name} "
                f"({standing.wins}-{standing.losses}, {standing.differential:+d})"
            )

    def _play_brackets(self, tournament):
        if not tournament.has_brackets():
            phase = bracketgen.generate_brackets(tournament.id)
            self.stdout.write(
                self.style.SUCCESS(
                    f"✓ Generated brackets {', '.join(b.name for b in phase.brackets)}"
                )
            )

        played = 0
        while True:
            phase = bracketgen.fetch_matches(tournament.id)
            ready = [
                match
                for bracket in phase.brackets
                for match in bracket.ordered_matches()
                if not match.is_bye and match.state == MatchState.TEAMS_ASSIGNED
            ]
            if not ready:
                break
            for match in ready:
                team1_score, team2_score = random_score()
                bracket_match = bracketgen.update_match_score(
                    match.match_id, team1_score, team2_score
                )
                played += 1
                self.stdout.write(
                    f"  Round {bracket_match.round_number} match "
                    f"{bracket_match.match_number}: {team1_score}-{team2_score}"
                )

        self.stdout.write(self.style.SUCCESS(f"✓ Played {played} bracket matches"))
        for bracket in bracketgen.fetch_matches(tournament.id).brackets:
            champion = bracket.champion_id
            if champion is not None:
                team = tournament.team_set.get(pk=champion)
                self.stdout.write(f"  {bracket.name}: {team.name}")
