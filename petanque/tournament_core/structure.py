"""
Tournament structures for the qualifying phase.

This module provides a simple, clean way to represent a pétanque tournament:
- The tournament configuration (pairing method, courts, bracket settings)
- Teams
- Qualifying rounds and the games played in them
- Derived standings

Everything here is plain data; the algorithms live in pairing, standings,
rounds and bracket.
"""

import math
from typing import Dict, List, Tuple, Optional
from dataclasses import dataclass, field, replace
from enum import Enum

from petanque.tournament_core.exceptions import InvalidConfig
from petanque.tournament_core.scoring import ScoringSystem, PETANQUE_SCORING


class PairingMethod(Enum):
    """Pairing discipline used for the qualifying rounds."""

    SWISS = "swiss"
    SEEDED_SWISS = "swissHotel"
    ROUND_ROBIN = "roundRobin"
    POOL_PLAY = "poolPlay"


VALID_BRACKET_SIZES = (4, 8, 16, 32)
POOL_PLAY_ROUNDS = 3
POOL_PLAY_ELIMINATION_LOSSES = 2

SWISS_TIEBREAK_ORDER = [
    "wins",
    "differential",
    "buchholz",
    "fine_buchholz",
    "points_for",
]
QUOTIENT_TIEBREAK_ORDER = ["wins", "point_quotient", "differential", "points_for"]


def tiebreak_order(method: PairingMethod) -> List[str]:
    """Return the ranking chain (left to right) for a pairing method."""
    if method == PairingMethod.SWISS:
        return list(SWISS_TIEBREAK_ORDER)
    return list(QUOTIENT_TIEBREAK_ORDER)


@dataclass(frozen=True)
class TournamentConfig:
    """Settings that drive pairing, standings and bracket generation."""

    pairing_method: PairingMethod = PairingMethod.SWISS
    qualifying_rounds: int = 5
    court_count: int = 8
    bracket_size: int = 16
    advance_all: bool = True
    advance_count: Optional[int] = None
    has_consolante: bool = False
    region_avoidance: bool = False

    def __post_init__(self):
        # Pool play always runs exactly three rounds
        if self.pairing_method == PairingMethod.POOL_PLAY:
            object.__setattr__(self, "qualifying_rounds", POOL_PLAY_ROUNDS)

    def validate(self) -> None:
        """Raise InvalidConfig if the settings are inconsistent."""
        if self.bracket_size not in VALID_BRACKET_SIZES:
            raise InvalidConfig(
                f"Bracket size {self.bracket_size} must be one of {VALID_BRACKET_SIZES}"
            )
        if self.court_count < 1:
            raise InvalidConfig("At least one court is required")
        if self.qualifying_rounds < 1:
            raise InvalidConfig("At least one qualifying round is required")
        if not self.advance_all and self.advance_count is not None:
            if self.advance_count < 2:
                raise InvalidConfig(
                    f"Advancement count {self.advance_count} must be at least 2"
                )

    def rounds_for(self, team_count: int) -> int:
        """Number of qualifying rounds played with this many teams."""
        if self.pairing_method == PairingMethod.ROUND_ROBIN:
            return team_count - 1 if team_count % 2 == 0 else team_count
        return self.qualifying_rounds

    @property
    def advancing_limit(self) -> Optional[int]:
        """How many teams advance to the brackets (None = all)."""
        if self.advance_all:
            return None
        return self.advance_count or self.bracket_size

    @property
    def tiebreak_order(self) -> List[str]:
        return tiebreak_order(self.pairing_method)


@dataclass(frozen=True)
class Team:
    """A registered team. The region is only used for region avoidance."""

    team_id: int
    name: str = ""
    region: Optional[str] = None
    club: Optional[str] = None

    def same_region(self, other: "Team") -> bool:
        """True if both teams carry the same non-empty region tag."""
        if not self.region or not other.region:
            return False
        return self.region.strip().lower() == other.region.strip().lower()


@dataclass(frozen=True)
class QualifyingRound:
    """A qualifying round. Numbers start at 1 and have no gaps."""

    number: int
    is_complete: bool = False
    round_id: Optional[int] = None


@dataclass(frozen=True)
class Game:
    """A single qualifying game, or a bye when team2_id is None."""

    round_number: int
    team1_id: Optional[int]
    team2_id: Optional[int] = None
    court_number: Optional[int] = None
    team1_score: Optional[int] = None
    team2_score: Optional[int] = None
    is_bye: bool = False
    game_id: Optional[int] = None

    @property
    def has_score(self) -> bool:
        """True if any score has been entered."""
        return self.team1_score is not None or self.team2_score is not None

    @property
    def is_scored(self) -> bool:
        """A non-bye game is scored iff both scores are present and unequal."""
        return (
            not self.is_bye
            and self.team1_score is not None
            and self.team2_score is not None
            and self.team1_score != self.team2_score
        )

    @property
    def is_complete(self) -> bool:
        """Byes are complete as soon as they exist."""
        return self.is_bye or self.is_scored

    @property
    def team_ids(self) -> List[int]:
        return [t for t in (self.team1_id, self.team2_id) if t is not None]

    def involves(self, team_id: int) -> bool:
        return team_id in (self.team1_id, self.team2_id)

    def opponent_of(self, team_id: int) -> Optional[int]:
        """Return the opponent's ID, or None for a bye."""
        if team_id == self.team1_id:
            return self.team2_id
        if team_id == self.team2_id:
            return self.team1_id
        raise ValueError(f"Team {team_id} did not play in this game")

    def winner_id(self) -> Optional[int]:
        """Return the ID of the winner, or None if the game is not complete."""
        if self.is_bye:
            return self.team1_id
        if not self.is_scored:
            return None
        return self.team1_id if self.team1_score > self.team2_score else self.team2_id

    def loser_id(self) -> Optional[int]:
        if self.is_bye or not self.is_scored:
            return None
        return self.team2_id if self.team1_score > self.team2_score else self.team1_id

    def points(
        self, team_id: int, scoring: ScoringSystem = PETANQUE_SCORING
    ) -> Tuple[int, int]:
        """Return (points_for, points_against) for one side of a complete game."""
        if self.is_bye:
            return scoring.bye_points()
        if team_id == self.team1_id:
            return (self.team1_score, self.team2_score)
        return (self.team2_score, self.team1_score)

    def with_scores(self, team1_score: int, team2_score: int) -> "Game":
        """Return a new Game with the scores set (immutable pattern)."""
        return replace(self, team1_score=team1_score, team2_score=team2_score)


@dataclass(frozen=True)
class Standing:
    """A team's derived record. Only ever produced by recomputation."""

    team_id: int
    wins: int = 0
    losses: int = 0
    points_for: int = 0
    points_against: int = 0
    buchholz: int = 0
    fine_buchholz: int = 0
    rank: int = 0
    is_eliminated: bool = False

    @property
    def differential(self) -> int:
        return self.points_for - self.points_against

    @property
    def point_quotient(self) -> float:
        """PF/PA, treated as +infinity when nothing was conceded."""
        if self.points_against == 0:
            return math.inf
        return self.points_for / self.points_against

    @property
    def games_played(self) -> int:
        return self.wins + self.losses


@dataclass
class Tournament:
    """Represents the qualifying phase of a tournament organized by rounds."""

    config: TournamentConfig = field(default_factory=TournamentConfig)
    teams: List[Team] = field(default_factory=list)
    rounds: List[QualifyingRound] = field(default_factory=list)
    games: List[Game] = field(default_factory=list)
    scoring: ScoringSystem = field(default_factory=lambda: PETANQUE_SCORING)

    @property
    def num_rounds(self) -> int:
        return len(self.rounds)

    @property
    def current_round(self) -> Optional[QualifyingRound]:
        return self.rounds[-1] if self.rounds else None

    @property
    def team_ids(self) -> List[int]:
        return [team.team_id for team in self.teams]

    def team(self, team_id: int) -> Team:
        for team in self.teams:
            if team.team_id == team_id:
                return team
        raise KeyError(team_id)

    def games_for_round(self, number: int) -> List[Game]:
        return [g for g in self.games if g.round_number == number]

    def completed_games(self) -> List[Game]:
        """Games from completed rounds only; these are the ones standings count."""
        complete = {r.number for r in self.rounds if r.is_complete}
        return [g for g in self.games if g.round_number in complete]

    def ledger(self):
        """Build the pairing/court/bye history from every generated game."""
        # Import here to avoid circular imports
        from petanque.tournament_core.history import HistoryLedger

        return HistoryLedger.from_games(self.games)

    def calculate_standings(self) -> List[Standing]:
        """Recompute standings from the completed rounds."""
        # Import here to avoid circular imports
        from petanque.tournament_core.standings import recompute_standings

        return recompute_standings(
            self.completed_games(), self.teams, self.config.pairing_method, self.scoring
        )

    def standings_by_team(self) -> Dict[int, Standing]:
        return {s.team_id: s for s in self.calculate_standings()}

    def is_qualifying_complete(self) -> bool:
        """True once every qualifying round exists and is complete."""
        expected = self.config.rounds_for(len(self.teams))
        return len(self.rounds) >= expected and all(r.is_complete for r in self.rounds)
