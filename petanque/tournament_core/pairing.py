"""
Pairing engine for the qualifying rounds.

Each pairing discipline is a ``PairingSystem`` record holding the functions it
supports: every discipline can pair a single round, and disciplines whose
schedule does not depend on results can also schedule every round upfront.

The engine is deterministic. Given the same teams, standings and history it
always produces the same draw, including when constraints must be relaxed.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from petanque.tournament_core.exceptions import (
    InvalidConfig,
    PairingExhausted,
    RoundNotComplete,
)
from petanque.tournament_core.history import HistoryLedger
from petanque.tournament_core.structure import (
    Game,
    PairingMethod,
    QualifyingRound,
    Standing,
    Team,
    Tournament,
    TournamentConfig,
)

logger = logging.getLogger(__name__)

# Upper bound on backtracking steps for one relaxation level and bye candidate
MAX_PAIRING_STEPS = 20000

MIN_POOL_PLAY_TEAMS = 3

Pair = Tuple[int, int]


@dataclass(frozen=True)
class RoundDraw:
    """A freshly generated round, its games and any pairing warnings."""

    round: QualifyingRound
    games: List[Game]
    warnings: List[PairingExhausted] = field(default_factory=list)

    @property
    def round_number(self) -> int:
        return self.round.number

    @property
    def byes(self) -> List[Game]:
        return [g for g in self.games if g.is_bye]


@dataclass
class Pairing:
    """Raw output of a discipline: pairs in board order plus an optional bye."""

    pairs: List[Pair]
    bye_team_id: Optional[int] = None
    warnings: List[PairingExhausted] = field(default_factory=list)


@dataclass(frozen=True)
class PairingSystem:
    """Capabilities of one pairing discipline."""

    pair_round: Callable[
        [List[Team], Dict[int, Standing], HistoryLedger, TournamentConfig, int], Pairing
    ]
    schedule_all: Optional[Callable[[List[Team], TournamentConfig], List[Pairing]]] = None
    depends_on_results: bool = True


class _StepBudget:
    """Step counter for one search, plus the sub-pools known to be unpairable."""

    def __init__(self, limit: int):
        self.limit = limit
        self.steps = 0
        self.dead_ends = set()

    def spend(self) -> bool:
        self.steps += 1
        return self.steps <= self.limit

    @property
    def exhausted(self) -> bool:
        return self.steps > self.limit


def _order_for_pairing(
    teams: List[Team], standings: Dict[int, Standing]
) -> List[Team]:
    """Order teams by score group (wins) and then by rank.

    Teams without a standing keep their insertion order.
    """
    positions = {team.team_id: i for i, team in enumerate(teams)}

    def key(team: Team):
        standing = standings.get(team.team_id)
        if standing is None:
            return (0, 0, positions[team.team_id])
        return (-standing.wins, standing.rank, positions[team.team_id])

    return sorted(teams, key=key)


def _pair_pool(
    pool: List[Team],
    allowed: Callable[[Team, Team], bool],
    budget: _StepBudget,
) -> Optional[List[Pair]]:
    """Pair the pool top-down, each team with the nearest allowed team below it.

    Backtracks when a choice leaves the rest of the pool unpairable. A team
    that finds no partner in its score group floats to the next one down.
    """
    if not pool:
        return []
    key = tuple(team.team_id for team in pool)
    if key in budget.dead_ends:
        return None

    first, rest = pool[0], pool[1:]
    for i, other in enumerate(rest):
        if not allowed(first, other):
            continue
        if not budget.spend():
            return None
        remainder = _pair_pool(rest[:i] + rest[i + 1 :], allowed, budget)
        if remainder is not None:
            return [(first.team_id, other.team_id)] + remainder
    # Only a finished search proves the pool unpairable
    if not budget.exhausted:
        budget.dead_ends.add(key)
    return None


def _pair_least_repeated(pool: List[Team], ledger: HistoryLedger) -> List[Pair]:
    """Last resort: greedily pair each team with the opponent it met least."""
    remaining = list(pool)
    pairs = []
    while remaining:
        first = remaining.pop(0)
        best = min(
            range(len(remaining)),
            key=lambda i: (ledger.times_played(first.team_id, remaining[i].team_id), i),
        )
        other = remaining.pop(best)
        pairs.append((first.team_id, other.team_id))
    return pairs


def _bye_candidates(ordered: List[Team], ledger: HistoryLedger) -> List[Team]:
    """Teams eligible for the bye, lowest-ranked first.

    A team that already had a bye is only eligible once every team has had
    as many byes as it has.
    """
    fewest = min(ledger.bye_count(team.team_id) for team in ordered)
    return [
        team for team in reversed(ordered) if ledger.bye_count(team.team_id) == fewest
    ]


def _swiss_pairing(
    ordered: List[Team], ledger: HistoryLedger, config: TournamentConfig
) -> Pairing:
    """Pair an ordered pool using the relaxation ladder.

    Constraints are dropped one at a time: first region avoidance, then
    rematch avoidance. If both are gone the least-repeated pairing is forced,
    with a ``PairingExhausted`` warning when it repeats a game.
    """

    def no_rematch(a: Team, b: Team) -> bool:
        return not ledger.has_played(a.team_id, b.team_id)

    def no_rematch_no_region(a: Team, b: Team) -> bool:
        return no_rematch(a, b) and not a.same_region(b)

    levels = []
    if config.region_avoidance:
        levels.append(("rematch and region avoidance", no_rematch_no_region))
    levels.append(("rematch avoidance", no_rematch))

    bye_candidates = _bye_candidates(ordered, ledger) if len(ordered) % 2 else [None]

    cut_short = False
    for level, (label, allowed) in enumerate(levels):
        for bye_team in bye_candidates:
            pool = [t for t in ordered if t is not bye_team]
            budget = _StepBudget(MAX_PAIRING_STEPS)
            pairs = _pair_pool(pool, allowed, budget)
            if pairs is None:
                if budget.exhausted:
                    cut_short = True
                    logger.warning(
                        "Pairing search with %s stopped after %d steps",
                        label,
                        MAX_PAIRING_STEPS,
                    )
                continue
            if level > 0:
                logger.info("Relaxed region avoidance to pair the round")
            return Pairing(
                pairs=pairs,
                bye_team_id=bye_team.team_id if bye_team is not None else None,
            )
        logger.debug("No pairing satisfies %s", label)

    # Every constraint has been relaxed; force the least repeated pairing
    bye_team = bye_candidates[0]
    bye_team_id = bye_team.team_id if bye_team is not None else None
    pool = [t for t in ordered if t is not bye_team]
    pairs = _pair_least_repeated(pool, ledger)
    repeats = [(a, b) for a, b in pairs if ledger.has_played(a, b)]
    if not repeats:
        return Pairing(pairs=pairs, bye_team_id=bye_team_id)

    reason = (
        "Pairing search stopped before finding a draw without rematches"
        if cut_short
        else "Rematches could not be avoided"
    )
    warning = PairingExhausted(
        f"{reason}: " + ", ".join(f"{a} vs {b}" for a, b in repeats)
    )
    logger.warning("%s", warning)
    return Pairing(pairs=pairs, bye_team_id=bye_team_id, warnings=[warning])


def pair_swiss(
    teams: List[Team],
    standings: Dict[int, Standing],
    ledger: HistoryLedger,
    config: TournamentConfig,
    round_number: int,
) -> Pairing:
    """Swiss: score groups by wins, nearest allowed opponent, floats downward."""
    return _swiss_pairing(_order_for_pairing(teams, standings), ledger, config)


def pair_seeded_swiss(
    teams: List[Team],
    standings: Dict[int, Standing],
    ledger: HistoryLedger,
    config: TournamentConfig,
    round_number: int,
) -> Pairing:
    """Seeded (hotel) Swiss.

    Round 1 splits the seed list in half: seed i meets seed i + ceil(N/2).
    With an odd count the middle seed ceil(N/2) sits out. Later rounds use the
    Swiss grouping; the standings are already ranked by point quotient.
    """
    if round_number > 1:
        return _swiss_pairing(_order_for_pairing(teams, standings), ledger, config)

    n = len(teams)
    half = (n + 1) // 2
    if n % 2 == 0:
        pairs = [(teams[i].team_id, teams[i + half].team_id) for i in range(half)]
        return Pairing(pairs=pairs)

    pairs = [(teams[i].team_id, teams[i + half].team_id) for i in range(half - 1)]
    return Pairing(pairs=pairs, bye_team_id=teams[half - 1].team_id)


def _circle_round(team_ids: List[Optional[int]], round_number: int) -> Pairing:
    """One round of the circle method; ``None`` is the phantom bye slot."""
    total = len(team_ids)
    shift = (round_number - 1) % (total - 1)
    fixed, rotating = team_ids[0], team_ids[1:]
    if shift:
        rotating = rotating[-shift:] + rotating[:-shift]
    lineup = [fixed] + rotating

    pairs = []
    bye_team_id = None
    for i in range(total // 2):
        a, b = lineup[i], lineup[total - 1 - i]
        if a is None:
            bye_team_id = b
        elif b is None:
            bye_team_id = a
        else:
            pairs.append((a, b))
    return Pairing(pairs=pairs, bye_team_id=bye_team_id)


def _circle_ids(teams: List[Team]) -> List[Optional[int]]:
    team_ids: List[Optional[int]] = [team.team_id for team in teams]
    if len(team_ids) % 2:
        team_ids.append(None)
    return team_ids


def pair_round_robin(
    teams: List[Team],
    standings: Dict[int, Standing],
    ledger: HistoryLedger,
    config: TournamentConfig,
    round_number: int,
) -> Pairing:
    """Round robin: fix the first team and rotate the others one step per round."""
    return _circle_round(_circle_ids(teams), round_number)


def schedule_round_robin(teams: List[Team], config: TournamentConfig) -> List[Pairing]:
    team_ids = _circle_ids(teams)
    return [
        _circle_round(team_ids, number)
        for number in range(1, config.rounds_for(len(teams)) + 1)
    ]


PAIRING_SYSTEMS: Dict[PairingMethod, PairingSystem] = {
    PairingMethod.SWISS: PairingSystem(pair_round=pair_swiss),
    PairingMethod.SEEDED_SWISS: PairingSystem(pair_round=pair_seeded_swiss),
    PairingMethod.ROUND_ROBIN: PairingSystem(
        pair_round=pair_round_robin,
        schedule_all=schedule_round_robin,
        depends_on_results=False,
    ),
    # Pool play pairs like Swiss; eliminated teams are dropped before pairing
    PairingMethod.POOL_PLAY: PairingSystem(pair_round=pair_swiss),
}


def assign_courts(
    pairs: List[Pair], court_count: int, ledger: HistoryLedger
) -> List[int]:
    """Give each pair a court, in board order.

    Each pair takes the free court its two teams have used least (ties go to
    the lowest number). When games outnumber courts the courts are reused.
    """
    courts = []
    free: List[int] = []
    for team1_id, team2_id in pairs:
        if not free:
            free = list(range(1, court_count + 1))
        court = min(
            free,
            key=lambda c: (
                ledger.court_uses(team1_id, c) + ledger.court_uses(team2_id, c),
                c,
            ),
        )
        free.remove(court)
        courts.append(court)
    return courts


def _build_draw(
    pairing: Pairing, round_number: int, config: TournamentConfig, ledger: HistoryLedger
) -> RoundDraw:
    courts = assign_courts(pairing.pairs, config.court_count, ledger)
    games = [
        Game(round_number=round_number, team1_id=a, team2_id=b, court_number=court)
        for (a, b), court in zip(pairing.pairs, courts)
    ]
    if pairing.bye_team_id is not None:
        logger.info("Round %s: team %s receives the bye", round_number, pairing.bye_team_id)
        games.append(
            Game(round_number=round_number, team1_id=pairing.bye_team_id, is_bye=True)
        )
    return RoundDraw(
        round=QualifyingRound(number=round_number),
        games=games,
        warnings=list(pairing.warnings),
    )


def _active_teams(
    teams: List[Team], standings: Dict[int, Standing], config: TournamentConfig
) -> List[Team]:
    if config.pairing_method != PairingMethod.POOL_PLAY:
        return list(teams)
    return [
        team
        for team in teams
        if not (team.team_id in standings and standings[team.team_id].is_eliminated)
    ]


def generate_round(
    teams: List[Team],
    standings: List[Standing],
    ledger: HistoryLedger,
    config: TournamentConfig,
    round_number: int,
) -> RoundDraw:
    """Generate the games of one qualifying round.

    Args:
        teams: Registered teams in insertion (seed) order
        standings: Current standings, as returned by recompute_standings
        ledger: Pairing, court and bye history of every earlier round
        config: Tournament configuration
        round_number: Number of the round to generate (1-based)

    Returns:
        A RoundDraw with the new round and its games

    Raises:
        InvalidConfig: Too few active teams, too few teams for pool play,
            or no rounds left to play
    """
    config.validate()
    if round_number > config.rounds_for(len(teams)):
        raise InvalidConfig(
            f"{config.pairing_method.value} plays "
            f"{config.rounds_for(len(teams))} rounds; cannot generate round {round_number}"
        )

    if (
        config.pairing_method == PairingMethod.POOL_PLAY
        and len(teams) < MIN_POOL_PLAY_TEAMS
    ):
        raise InvalidConfig(
            f"Pool play needs at least {MIN_POOL_PLAY_TEAMS} teams, found {len(teams)}"
        )

    by_team = {s.team_id: s for s in standings}
    active = _active_teams(teams, by_team, config)
    if len(active) < 2:
        raise InvalidConfig(f"At least 2 teams are needed to pair, found {len(active)}")

    system = PAIRING_SYSTEMS[config.pairing_method]
    pairing = system.pair_round(active, by_team, ledger, config, round_number)
    draw = _build_draw(pairing, round_number, config, ledger)
    logger.info(
        "Generated round %s (%s) with %s games",
        round_number,
        config.pairing_method.value,
        len(draw.games),
    )
    return draw


def generate_all_rounds(
    teams: List[Team], ledger: HistoryLedger, config: TournamentConfig
) -> List[RoundDraw]:
    """Schedule every qualifying round upfront.

    Only disciplines whose schedule does not depend on results support this,
    and only before any round exists.
    """
    config.validate()
    system = PAIRING_SYSTEMS[config.pairing_method]
    if system.schedule_all is None:
        raise InvalidConfig(
            f"{config.pairing_method.value} rounds must be generated one at a time"
        )
    if len(teams) < 2:
        raise InvalidConfig(f"At least 2 teams are needed to pair, found {len(teams)}")

    # Courts rotate across the whole schedule, so record each round as we go
    running = ledger.copy()
    draws = []
    for number, pairing in enumerate(system.schedule_all(teams, config), start=1):
        draw = _build_draw(pairing, number, config, running)
        running.record_games(draw.games)
        draws.append(draw)
    logger.info("Scheduled %s rounds upfront", len(draws))
    return draws


def generate_next_round(tournament: Tournament) -> RoundDraw:
    """Generate the round after the tournament's latest one.

    For disciplines that pair on results, the latest round must be complete.
    """
    current = tournament.current_round
    system = PAIRING_SYSTEMS[tournament.config.pairing_method]
    if current is not None and not current.is_complete and system.depends_on_results:
        raise RoundNotComplete(
            f"Round {current.number} must be completed before pairing the next one"
        )
    return generate_round(
        tournament.teams,
        tournament.calculate_standings(),
        tournament.ledger(),
        tournament.config,
        tournament.num_rounds + 1,
    )


def schedule_tournament(tournament: Tournament) -> List[RoundDraw]:
    """Schedule every round of a tournament that has no rounds yet."""
    if tournament.rounds:
        raise InvalidConfig("Rounds already exist; delete them before scheduling")
    return generate_all_rounds(tournament.teams, tournament.ledger(), tournament.config)
