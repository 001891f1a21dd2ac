import reversion
from django.core.exceptions import ValidationError
from django.db import models

from petanque.tournament_core.structure import (
    PairingMethod,
    TournamentConfig,
    VALID_BRACKET_SIZES,
)


class _BaseModel(models.Model):
    date_created = models.DateTimeField(auto_now_add=True)
    date_modified = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


PAIRING_METHOD_OPTIONS = (
    (PairingMethod.SWISS.value, "Swiss"),
    (PairingMethod.SEEDED_SWISS.value, "Seeded Swiss (hotel)"),
    (PairingMethod.ROUND_ROBIN.value, "Round robin"),
    (PairingMethod.POOL_PLAY.value, "Pool play"),
)

TEAM_COMPOSITION_OPTIONS = (
    ("men", "Men"),
    ("women", "Women"),
    ("mixed", "Mixed"),
    ("select", "Select"),
)

TOURNAMENT_TYPE_OPTIONS = (
    ("regional", "Regional"),
    ("national", "National"),
    ("open", "Open"),
    ("club", "Club"),
)

FORMAT_OPTIONS = (
    ("single", "Singles"),
    ("double", "Doubles"),
    ("triple", "Triples"),
)

DAY_TYPE_OPTIONS = (
    ("single", "Single day"),
    ("two", "Two days"),
)

BRACKET_SIZE_OPTIONS = tuple((size, str(size)) for size in VALID_BRACKET_SIZES)

# Settings that shape the draw; they cannot change once rounds exist
FROZEN_AFTER_ROUNDS = ("pairing_method", "qualifying_rounds", "court_count")


# -------------------------------------------------------------------------------
class TournamentQuerySet(models.QuerySet):
    def lock(self, pk):
        """Fetch a tournament and hold its row lock until the transaction ends."""
        return self.select_for_update().get(pk=pk)


@reversion.register()
class Tournament(_BaseModel):
    name = models.CharField(max_length=255)
    team_composition = models.CharField(
        max_length=32, choices=TEAM_COMPOSITION_OPTIONS, default="mixed"
    )
    tournament_type = models.CharField(
        max_length=32, choices=TOURNAMENT_TYPE_OPTIONS, default="open"
    )
    start_date = models.DateField(blank=True, null=True)
    end_date = models.DateField(blank=True, null=True)
    director = models.CharField(max_length=255, blank=True)
    head_umpire = models.CharField(max_length=255, blank=True)
    format = models.CharField(max_length=32, choices=FORMAT_OPTIONS, default="triple")
    day_type = models.CharField(max_length=32, choices=DAY_TYPE_OPTIONS, default="single")

    pairing_method = models.CharField(
        max_length=32,
        choices=PAIRING_METHOD_OPTIONS,
        default=PairingMethod.SWISS.value,
    )
    qualifying_rounds = models.PositiveIntegerField(default=5)
    court_count = models.PositiveIntegerField(default=8)
    bracket_size = models.PositiveIntegerField(choices=BRACKET_SIZE_OPTIONS, default=16)
    advance_all = models.BooleanField(default=True)
    advance_count = models.PositiveIntegerField(blank=True, null=True)
    has_consolante = models.BooleanField(default=False)
    region_avoidance = models.BooleanField(default=False)

    objects = TournamentQuerySet.as_manager()

    def __str__(self):
        return self.name

    def clean(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValidationError("End date cannot be before the start date")

    def config(self):
        return TournamentConfig(
            pairing_method=PairingMethod(self.pairing_method),
            qualifying_rounds=self.qualifying_rounds,
            court_count=self.court_count,
            bracket_size=self.bracket_size,
            advance_all=self.advance_all,
            advance_count=self.advance_count,
            has_consolante=self.has_consolante,
            region_avoidance=self.region_avoidance,
        )

    def has_rounds(self):
        return self.qualifyinground_set.exists()

    def has_brackets(self):
        return self.bracket_set.exists()


# -------------------------------------------------------------------------------
@reversion.register()
class Team(_BaseModel):
    tournament = models.ForeignKey(Tournament, on_delete=models.CASCADE)
    captain = models.CharField(max_length=255)
    player2 = models.CharField(max_length=255)
    player3 = models.CharField(max_length=255, blank=True)
    region = models.CharField(max_length=255, blank=True)
    club = models.CharField(max_length=255, blank=True)

    class Meta:
        ordering = ("tournament", "id")

    def __str__(self):
        return self.name

    @property
    def name(self):
        return self.captain

    def players(self):
        return [p for p in (self.captain, self.player2, self.player3) if p]


# -------------------------------------------------------------------------------
@reversion.register()
class QualifyingRound(_BaseModel):
    tournament = models.ForeignKey(Tournament, on_delete=models.CASCADE)
    number = models.PositiveIntegerField()
    is_complete = models.BooleanField(default=False)

    class Meta:
        unique_together = ("tournament", "number")
        ordering = ("tournament", "number")

    def __str__(self):
        return "%s - Round %d" % (self.tournament, self.number)


# -------------------------------------------------------------------------------
@reversion.register()
class QualifyingGame(_BaseModel):
    round = models.ForeignKey(QualifyingRound, on_delete=models.CASCADE)
    court_number = models.PositiveIntegerField(blank=True, null=True)
    team1 = models.ForeignKey(
        Team, blank=True, null=True, on_delete=models.SET_NULL, related_name="+"
    )
    team2 = models.ForeignKey(
        Team, blank=True, null=True, on_delete=models.SET_NULL, related_name="+"
    )
    team1_score = models.PositiveIntegerField(blank=True, null=True)
    team2_score = models.PositiveIntegerField(blank=True, null=True)
    is_bye = models.BooleanField(default=False)
    board_order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ("round", "board_order", "id")

    def __str__(self):
        if self.is_bye:
            return "%s - %s (bye)" % (self.round, self.team1)
        return "%s - %s vs %s" % (self.round, self.team1, self.team2)

    def has_score(self):
        return self.team1_score is not None or self.team2_score is not None


# -------------------------------------------------------------------------------
class TeamStanding(_BaseModel):
    """Cached standings row. Always rewritten from a full recomputation."""

    tournament = models.ForeignKey(Tournament, on_delete=models.CASCADE)
    team = models.ForeignKey(Team, on_delete=models.CASCADE)
    wins = models.PositiveIntegerField(default=0)
    losses = models.PositiveIntegerField(default=0)
    points_for = models.PositiveIntegerField(default=0)
    points_against = models.PositiveIntegerField(default=0)
    differential = models.IntegerField(default=0)
    buchholz = models.IntegerField(default=0)
    fine_buchholz = models.IntegerField(default=0)
    point_quotient = models.FloatField(blank=True, null=True)
    is_eliminated = models.BooleanField(default=False)
    rank = models.PositiveIntegerField(default=0)

    class Meta:
        unique_together = ("tournament", "team")
        ordering = ("tournament", "rank")

    def __str__(self):
        return "%s - #%d %s" % (self.tournament, self.rank, self.team)


# -------------------------------------------------------------------------------
@reversion.register()
class Bracket(_BaseModel):
    tournament = models.ForeignKey(Tournament, on_delete=models.CASCADE)
    name = models.CharField(max_length=255)
    size = models.PositiveIntegerField()
    is_consolante = models.BooleanField(default=False)
    is_complete = models.BooleanField(default=False)
    loser_bracket = models.ForeignKey(
        "self",
        blank=True,
        null=True,
        on_delete=models.SET_NULL,
        related_name="+",
    )

    class Meta:
        unique_together = ("tournament", "name")
        ordering = ("tournament", "is_consolante", "name")

    def __str__(self):
        return "%s - Bracket %s" % (self.tournament, self.name)


# -------------------------------------------------------------------------------
@reversion.register()
class BracketMatch(_BaseModel):
    bracket = models.ForeignKey(Bracket, on_delete=models.CASCADE)
    round_number = models.PositiveIntegerField()
    match_number = models.PositiveIntegerField()
    court_number = models.PositiveIntegerField(blank=True, null=True)
    team1 = models.ForeignKey(
        Team, blank=True, null=True, on_delete=models.SET_NULL, related_name="+"
    )
    team2 = models.ForeignKey(
        Team, blank=True, null=True, on_delete=models.SET_NULL, related_name="+"
    )
    team1_score = models.PositiveIntegerField(blank=True, null=True)
    team2_score = models.PositiveIntegerField(blank=True, null=True)
    winner = models.ForeignKey(
        Team, blank=True, null=True, on_delete=models.SET_NULL, related_name="+"
    )
    next_match = models.ForeignKey(
        "self", blank=True, null=True, on_delete=models.SET_NULL, related_name="+"
    )
    loser_next_match = models.ForeignKey(
        "self", blank=True, null=True, on_delete=models.SET_NULL, related_name="+"
    )
    is_bye = models.BooleanField(default=False)

    class Meta:
        unique_together = ("bracket", "round_number", "match_number")
        ordering = ("bracket", "round_number", "match_number")

    def __str__(self):
        return "%s - R%d M%d" % (self.bracket, self.round_number, self.match_number)
