"""
Management command to seed a demo pétanque tournament:
- Configurable number of teams with Faker-generated players
- Any qualifying discipline (swiss, swissHotel, roundRobin, poolPlay)
- Optional region tags for region avoidance
- Optional generation of the first round (or the full round robin schedule)
"""

import random

import reversion
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from django.utils import timezone
from faker import Faker

from petanque.tournament import pairinggen
from petanque.tournament.models import Team, Tournament
from petanque.tournament_core.exceptions import TournamentError
from petanque.tournament_core.structure import (
    PairingMethod,
    POOL_PLAY_ROUNDS,
    VALID_BRACKET_SIZES,
)

REGIONS = ["Nord", "Sud", "Est", "Ouest", "Centre"]


class Command(BaseCommand):
    help = "Seed a pétanque tournament with generated teams"

    def add_arguments(self, parser):
        parser.add_argument(
            "--teams",
            type=int,
            default=16,
            help="Number of teams (default: 16)",
        )
        parser.add_argument(
            "--method",
            choices=[m.value for m in PairingMethod],
            default=PairingMethod.SWISS.value,
            help="Qualifying discipline (default: swiss)",
        )
        parser.add_argument(
            "--rounds",
            type=int,
            default=5,
            help="Number of qualifying rounds (ignored for roundRobin and poolPlay)",
        )
        parser.add_argument(
            "--courts",
            type=int,
            default=8,
            help="Number of courts (default: 8)",
        )
        parser.add_argument(
            "--bracket-size",
            type=int,
            choices=VALID_BRACKET_SIZES,
            default=8,
            help="Teams per bracket (default: 8)",
        )
        parser.add_argument(
            "--consolante",
            action="store_true",
            help="Attach a consolante bracket to every main bracket",
        )
        parser.add_argument(
            "--region-avoidance",
            action="store_true",
            help="Tag teams with regions and avoid same-region pairings",
        )
        parser.add_argument(
            "--name",
            type=str,
            default="",
            help="Tournament name (default: generated)",
        )
        parser.add_argument(
            "--generate-round",
            action="store_true",
            help="Generate the first round (or every round for roundRobin)",
        )
        parser.add_argument(
            "--seed",
            type=int,
            help="Random seed for reproducible team names",
        )

    def handle(self, *args, **options):
        fake = Faker("fr_FR")
        if options["seed"] is not None:
            Faker.seed(options["seed"])
            random.seed(options["seed"])

        teams_count = options["teams"]
        method = options["method"]
        if teams_count < 2:
            raise CommandError("At least two teams are required")

        rounds = options["rounds"]
        if method == PairingMethod.POOL_PLAY.value:
            rounds = POOL_PLAY_ROUNDS

        name = options["name"] or f"Concours de {fake.city()}"
        today = timezone.now().date()

        try:
            with transaction.atomic():
                with reversion.create_revision():
                    reversion.set_comment("Seeded tournament.")
                    tournament = Tournament.objects.create(
                        name=name,
                        start_date=today,
                        end_date=today,
                        director=fake.name(),
                        head_umpire=fake.name(),
                        pairing_method=method,
                        qualifying_rounds=rounds,
                        court_count=options["courts"],
                        bracket_size=options["bracket_size"],
                        has_consolante=options["consolante"],
                        region_avoidance=options["region_avoidance"],
                    )
                    tournament.config().validate()
                    for _ in range(teams_count):
                        Team.objects.create(
                            tournament=tournament,
                            captain=fake.name(),
                            player2=fake.name(),
                            player3=fake.name(),
                            region=(
                                random.choice(REGIONS)
                                if options["region_avoidance"]
                                else ""
                            ),
                            club=f"Boule de {fake.city()}",
                        )
        except TournamentError as e:
            raise CommandError(str(e))

        self.stdout.write(self.style.SUCCESS(f"✓ Created tournament: {tournament.name}"))
        self.stdout.write(f"  - Tournament ID: {tournament.id}")
        self.stdout.write(f"  - Teams: {teams_count}")
        self.stdout.write(f"  - Discipline: {method}")
        self.stdout.write(
            f"  - Qualifying rounds: {tournament.config().rounds_for(teams_count)}"
        )

        if options["generate_round"]:
            try:
                if method == PairingMethod.ROUND_ROBIN.value:
                    draws = pairinggen.generate_all_rounds(tournament.id)
                    self.stdout.write(
                        self.style.SUCCESS(f"✓ Scheduled {len(draws)} rounds")
                    )
                else:
                    draw = pairinggen.generate_round(tournament.id)
                    self.stdout.write(
                        self.style.SUCCESS(
                            f"✓ Round {draw.round_number}: {len(draw.games)} games"
                        )
                    )
                    for warning in draw.warnings:
                        self.stdout.write(self.style.WARNING(f"  ! {warning}"))
            except TournamentError as e:
                raise CommandError(f"Failed to generate pairings: {e}")
        else:
            self.stdout.write("\nUse '--generate-round' to create the first round")

        self.stdout.write(
            f"Use 'generate_random_results {tournament.id}' to simulate results"
        )
