"""
Standings and tiebreak calculation for the qualifying phase.

Standings are never updated incrementally: they are recomputed from the full
list of completed games every time. The functions here are pure, so the same
games always give the same ranking.
"""

from typing import Dict, Iterable, List, Optional, Tuple
from dataclasses import dataclass, field

from petanque.tournament_core.scoring import ScoringSystem, PETANQUE_SCORING
from petanque.tournament_core.structure import (
    Game,
    PairingMethod,
    POOL_PLAY_ELIMINATION_LOSSES,
    Standing,
    Team,
    tiebreak_order,
)


@dataclass(frozen=True)
class GameRecord:
    """The result of a single game from one team's point of view."""

    opponent_id: Optional[int]  # None for byes
    points_for: int
    points_against: int
    won: bool
    is_bye: bool = False


@dataclass(frozen=True)
class TeamRecord:
    """Totals and game history for a team."""

    team_id: int
    games: List[GameRecord] = field(default_factory=list)

    @property
    def wins(self) -> int:
        return sum(1 for g in self.games if g.won)

    @property
    def losses(self) -> int:
        return sum(1 for g in self.games if not g.won)

    @property
    def points_for(self) -> int:
        return sum(g.points_for for g in self.games)

    @property
    def points_against(self) -> int:
        return sum(g.points_against for g in self.games)

    @property
    def differential(self) -> int:
        return self.points_for - self.points_against


def build_team_records(
    games: Iterable[Game],
    team_ids: List[int],
    scoring: ScoringSystem = PETANQUE_SCORING,
) -> Dict[int, TeamRecord]:
    """
    Collect per-team game records from complete games.

    Incomplete games are skipped. A bye is recorded as a win with the
    scoring system's bye points and no opponent.
    """
    records: Dict[int, List[GameRecord]] = {team_id: [] for team_id in team_ids}

    for game in games:
        if not game.is_complete:
            continue

        if game.is_bye:
            if game.team1_id in records:
                pf, pa = game.points(game.team1_id, scoring)
                records[game.team1_id].append(
                    GameRecord(
                        opponent_id=None,
                        points_for=pf,
                        points_against=pa,
                        won=True,
                        is_bye=True,
                    )
                )
            continue

        winner = game.winner_id()
        for team_id in game.team_ids:
            if team_id not in records:
                continue
            pf, pa = game.points(team_id, scoring)
            records[team_id].append(
                GameRecord(
                    opponent_id=game.opponent_of(team_id),
                    points_for=pf,
                    points_against=pa,
                    won=team_id == winner,
                )
            )

    return {
        team_id: TeamRecord(team_id=team_id, games=game_records)
        for team_id, game_records in records.items()
    }


def calculate_buchholz(record: TeamRecord, all_records: Dict[int, TeamRecord]) -> int:
    """
    Calculate Buchholz score.

    The Buchholz score is the sum of the win counts of all opponents faced.
    A bye opponent is a ghost team with zero wins.

    Args:
        record: The team's game records
        all_records: Dictionary mapping team IDs to their records

    Returns:
        The Buchholz score
    """
    buchholz = 0

    for game in record.games:
        if game.is_bye or game.opponent_id is None:
            continue

        opponent = all_records.get(game.opponent_id)
        if opponent is None:
            continue

        buchholz += opponent.wins

    return buchholz


def calculate_fine_buchholz(
    record: TeamRecord, all_records: Dict[int, TeamRecord]
) -> int:
    """
    Calculate fine-Buchholz score.

    Sum of the point differentials of all opponents faced; it only
    separates teams whose Buchholz is equal. Bye ghosts contribute zero.
    """
    fine = 0

    for game in record.games:
        if game.is_bye or game.opponent_id is None:
            continue

        opponent = all_records.get(game.opponent_id)
        if opponent is None:
            continue

        fine += opponent.differential

    return fine


def ranking_key(standing: Standing, order: List[str]) -> Tuple:
    """Sort key for a standing (ascending sort = best first)."""
    values = []
    for name in order:
        if name == "wins":
            values.append(-standing.wins)
        elif name == "differential":
            values.append(-standing.differential)
        elif name == "buchholz":
            values.append(-standing.buchholz)
        elif name == "fine_buchholz":
            values.append(-standing.fine_buchholz)
        elif name == "point_quotient":
            values.append(-standing.point_quotient)
        elif name == "points_for":
            values.append(-standing.points_for)
        else:
            raise ValueError(f"Unknown tiebreak: {name}")
    return tuple(values)


def rank_standings(standings: List[Standing], method: PairingMethod) -> List[Standing]:
    """
    Assign ranks 1..N using the method's tiebreak chain.

    Residual ties keep input order (team insertion order), so the result is
    a strict total order.
    """
    order = tiebreak_order(method)
    indexed = sorted(
        enumerate(standings), key=lambda item: (ranking_key(item[1], order), item[0])
    )
    return [
        Standing(
            team_id=s.team_id,
            wins=s.wins,
            losses=s.losses,
            points_for=s.points_for,
            points_against=s.points_against,
            buchholz=s.buchholz,
            fine_buchholz=s.fine_buchholz,
            rank=position,
            is_eliminated=s.is_eliminated,
        )
        for position, (_, s) in enumerate(indexed, start=1)
    ]


def recompute_standings(
    games: Iterable[Game],
    teams: List[Team],
    method: PairingMethod,
    scoring: ScoringSystem = PETANQUE_SCORING,
) -> List[Standing]:
    """
    Recompute every team's standing from scratch.

    Args:
        games: All completed games (incomplete ones are ignored)
        teams: Teams in insertion order, used as the final tiebreak
        method: Pairing method, which selects the tiebreak chain
        scoring: Scoring system (bye points)

    Returns:
        Standings sorted by rank
    """
    team_ids = [team.team_id for team in teams]
    records = build_team_records(games, team_ids, scoring)

    standings = []
    for team_id in team_ids:
        record = records[team_id]
        losses = record.losses
        standings.append(
            Standing(
                team_id=team_id,
                wins=record.wins,
                losses=losses,
                points_for=record.points_for,
                points_against=record.points_against,
                buchholz=calculate_buchholz(record, records),
                fine_buchholz=calculate_fine_buchholz(record, records),
                is_eliminated=(
                    method == PairingMethod.POOL_PLAY
                    and losses >= POOL_PLAY_ELIMINATION_LOSSES
                ),
            )
        )

    return rank_standings(standings, method)
