"""
Single-elimination brackets for the final phase.

This module provides functionality for:
- Seeding the advancing teams with the standard bracket order
- Building the match tree, including byes and the optional consolante
- Recording match results and moving winners (and first-round losers) on

A bracket is an arena of matches keyed by ``(round_number, match_number)``.
Forward links are keys into the same arena, so the tree is never a graph of
objects pointing at each other.
"""

import logging
import math
import string
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from petanque.tournament_core.exceptions import (
    BracketAlreadyExists,
    EditLocked,
    InvalidConfig,
    InvalidMatch,
    MissingTeam,
)
from petanque.tournament_core.scoring import ScoringSystem, PETANQUE_SCORING
from petanque.tournament_core.structure import (
    QualifyingRound,
    Standing,
    TournamentConfig,
    VALID_BRACKET_SIZES,
)

logger = logging.getLogger(__name__)

MatchKey = Tuple[int, int]

CONSOLANTE_SUFFIX = " Consolante"


class MatchState(Enum):
    EMPTY = "empty"
    TEAMS_ASSIGNED = "teams_assigned"
    SCORED = "scored"


@dataclass
class BracketMatch:
    """A match in a bracket. Slots fill up as earlier matches are decided."""

    round_number: int
    match_number: int
    team1_id: Optional[int] = None
    team2_id: Optional[int] = None
    team1_score: Optional[int] = None
    team2_score: Optional[int] = None
    winner_id: Optional[int] = None
    court_number: Optional[int] = None
    next_match: Optional[MatchKey] = None
    loser_next_match: Optional[MatchKey] = None
    is_bye: bool = False
    match_id: Optional[int] = None

    @property
    def key(self) -> MatchKey:
        return (self.round_number, self.match_number)

    @property
    def next_slot(self) -> int:
        """Slot this match feeds in its next match: even matches feed slot 1."""
        return 1 if self.match_number % 2 == 0 else 2

    @property
    def has_scores(self) -> bool:
        return self.team1_score is not None and self.team2_score is not None

    @property
    def state(self) -> MatchState:
        if self.is_bye or self.winner_id is not None:
            return MatchState.SCORED
        if self.team1_id is not None and self.team2_id is not None:
            return MatchState.TEAMS_ASSIGNED
        return MatchState.EMPTY

    @property
    def loser_id(self) -> Optional[int]:
        if self.is_bye or self.winner_id is None:
            return None
        return self.team2_id if self.winner_id == self.team1_id else self.team1_id

    def slot(self, index: int) -> Optional[int]:
        return self.team1_id if index == 1 else self.team2_id

    def set_slot(self, index: int, team_id: Optional[int]) -> None:
        if index == 1:
            self.team1_id = team_id
        else:
            self.team2_id = team_id


@dataclass
class Bracket:
    """An elimination tree of ``size - 1`` matches over ``log2(size)`` rounds."""

    name: str
    size: int
    is_consolante: bool = False
    is_complete: bool = False
    matches: Dict[MatchKey, BracketMatch] = field(default_factory=dict)
    loser_bracket: Optional[str] = None  # name of the consolante fed by round 1
    bracket_id: Optional[int] = None

    @property
    def num_rounds(self) -> int:
        return int(math.log2(self.size))

    def match(self, key: MatchKey) -> BracketMatch:
        try:
            return self.matches[key]
        except KeyError:
            raise InvalidMatch(f"Bracket {self.name} has no match {key}")

    def round_matches(self, round_number: int) -> List[BracketMatch]:
        return sorted(
            (m for m in self.matches.values() if m.round_number == round_number),
            key=lambda m: m.match_number,
        )

    def ordered_matches(self) -> List[BracketMatch]:
        return sorted(self.matches.values(), key=lambda m: m.key)

    @property
    def final(self) -> BracketMatch:
        return self.matches[(self.num_rounds, 0)]

    @property
    def champion_id(self) -> Optional[int]:
        return self.final.winner_id

    def bye_matches(self) -> List[BracketMatch]:
        return [m for m in self.ordered_matches() if m.is_bye]


@dataclass
class KnockoutPhase:
    """All brackets of a tournament, main brackets before their consolantes."""

    brackets: List[Bracket] = field(default_factory=list)

    def bracket(self, name: str) -> Bracket:
        for bracket in self.brackets:
            if bracket.name == name:
                return bracket
        raise InvalidMatch(f"No bracket named {name!r}")

    @property
    def main_brackets(self) -> List[Bracket]:
        return [b for b in self.brackets if not b.is_consolante]

    @property
    def consolantes(self) -> List[Bracket]:
        return [b for b in self.brackets if b.is_consolante]

    @property
    def is_complete(self) -> bool:
        return bool(self.brackets) and all(b.is_complete for b in self.brackets)


def validate_bracket_size(size: int) -> bool:
    """Check if a size is a power of 2 with at least one match."""
    return size > 1 and (size & (size - 1)) == 0


def standard_seed_order(size: int) -> List[int]:
    """Seeds (1-based) in bracket line order.

    Built recursively so that seed 1 meets the lowest seed and seeds 1 and 2
    can only meet in the final. For size 8: [1, 8, 4, 5, 2, 7, 3, 6].
    """
    if not validate_bracket_size(size):
        raise InvalidConfig(f"Bracket size {size} is not a power of 2")

    order = [1]
    while len(order) < size:
        total = len(order) * 2 + 1
        order = [seed for s in order for seed in (s, total - s)]
    return order


def first_round_lines(team_ids: List[int], size: int) -> List[Optional[int]]:
    """Place ranked teams on the bracket lines; missing seeds become byes."""
    return [
        team_ids[seed - 1] if seed <= len(team_ids) else None
        for seed in standard_seed_order(size)
    ]


def split_into_brackets(team_ids: List[int], bracket_size: int) -> List[List[int]]:
    """Split ranked teams into groups of ``bracket_size`` in rank order.

    Raises:
        InvalidConfig: a trailing group would hold a single team
    """
    groups = [
        team_ids[i : i + bracket_size] for i in range(0, len(team_ids), bracket_size)
    ]
    if groups and len(groups[-1]) < 2:
        raise InvalidConfig(
            f"Team {groups[-1][0]} would be alone in the last bracket; "
            "change the advancement count or bracket size"
        )
    return groups


def bracket_name(index: int) -> str:
    if index < len(string.ascii_uppercase):
        return string.ascii_uppercase[index]
    return f"Bracket {index + 1}"


def _size_for(team_count: int, configured: int, is_first: bool) -> int:
    if is_first:
        return configured
    for size in VALID_BRACKET_SIZES:
        if size >= team_count:
            return size
    return configured


def build_bracket(
    name: str,
    size: int,
    lines: List[Optional[int]],
    court_count: int,
    is_consolante: bool = False,
) -> Bracket:
    """Create every match of a bracket and link each to the match it feeds."""
    bracket = Bracket(name=name, size=size, is_consolante=is_consolante)
    rounds = bracket.num_rounds

    for round_number in range(1, rounds + 1):
        for match_number in range(size >> round_number):
            match = BracketMatch(
                round_number=round_number,
                match_number=match_number,
                court_number=match_number % court_count + 1,
            )
            if round_number < rounds:
                match.next_match = (round_number + 1, match_number // 2)
            if round_number == 1:
                match.team1_id = lines[match_number * 2]
                match.team2_id = lines[match_number * 2 + 1]
            bracket.matches[match.key] = match

    return bracket


def attach_consolante(main: Bracket, court_count: int) -> Optional[Bracket]:
    """Create the consolante fed by the first-round losers of ``main``.

    The loser of main match m goes to consolante match m // 2, slot by parity.
    Only built when the main bracket has at least two playable first-round
    matches.
    """
    playable = [
        m
        for m in main.round_matches(1)
        if m.team1_id is not None and m.team2_id is not None
    ]
    if len(playable) < 2:
        logger.info("Bracket %s has too few real matches for a consolante", main.name)
        return None

    size = main.size // 2
    consolante = build_bracket(
        main.name + CONSOLANTE_SUFFIX,
        size,
        [None] * size,
        court_count,
        is_consolante=True,
    )
    main.loser_bracket = consolante.name
    for match in main.round_matches(1):
        match.loser_next_match = (1, match.match_number // 2)
    return consolante


Feeder = Tuple[Bracket, BracketMatch, bool]


def _feeders(phase: KnockoutPhase) -> Dict[Tuple[str, MatchKey, int], Feeder]:
    """Map each linked slot to the match that fills it (and whether by its loser)."""
    feeders: Dict[Tuple[str, MatchKey, int], Feeder] = {}
    for bracket in phase.brackets:
        for match in bracket.matches.values():
            if match.next_match is not None:
                feeders[(bracket.name, match.next_match, match.next_slot)] = (
                    bracket,
                    match,
                    False,
                )
            if match.loser_next_match is not None and bracket.loser_bracket:
                feeders[(bracket.loser_bracket, match.loser_next_match, match.next_slot)] = (
                    bracket,
                    match,
                    True,
                )
    return feeders


def _slot_dead(feeders, bracket: Bracket, match: BracketMatch, index: int) -> bool:
    """True if no team can ever arrive in this slot."""
    if match.slot(index) is not None:
        return False
    feeder = feeders.get((bracket.name, match.key, index))
    if feeder is None:
        return True
    source_bracket, source, by_loser = feeder
    if by_loser:
        # A bye (or an empty match) has no loser to send
        return source.is_bye or _match_dead(feeders, source_bracket, source)
    return _match_dead(feeders, source_bracket, source)


def _match_dead(feeders, bracket: Bracket, match: BracketMatch) -> bool:
    return _slot_dead(feeders, bracket, match, 1) and _slot_dead(
        feeders, bracket, match, 2
    )


def _targets(
    phase: KnockoutPhase, bracket: Bracket, match: BracketMatch
) -> List[Tuple[Bracket, BracketMatch, bool]]:
    targets = []
    if match.next_match is not None:
        targets.append((bracket, bracket.matches[match.next_match], False))
    if match.loser_next_match is not None and bracket.loser_bracket:
        loser_bracket = phase.bracket(bracket.loser_bracket)
        targets.append((loser_bracket, loser_bracket.matches[match.loser_next_match], True))
    return targets


def _place(phase: KnockoutPhase, bracket: Bracket, match: BracketMatch) -> None:
    """Write the winner (and loser) of a decided match into the linked slots."""
    for _, target, by_loser in _targets(phase, bracket, match):
        team_id = match.loser_id if by_loser else match.winner_id
        if team_id is not None:
            target.set_slot(match.next_slot, team_id)


def _settle_byes(phase: KnockoutPhase) -> None:
    """Resolve every match that can only ever hold one team.

    Runs in round order so that byes cascade: a bye winner moves on at once,
    and a match fed by two dead slots is itself dead.
    """
    feeders = _feeders(phase)
    for bracket in phase.brackets:
        for match in bracket.ordered_matches():
            if match.winner_id is not None or match.has_scores:
                continue
            dead1 = _slot_dead(feeders, bracket, match, 1)
            dead2 = _slot_dead(feeders, bracket, match, 2)
            if dead1 and dead2:
                match.is_bye = True
            elif dead1 and match.team2_id is not None:
                match.is_bye = True
                match.winner_id = match.team2_id
                _place(phase, bracket, match)
            elif dead2 and match.team1_id is not None:
                match.is_bye = True
                match.winner_id = match.team1_id
                _place(phase, bracket, match)


def _refresh_completion(phase: KnockoutPhase) -> None:
    for bracket in phase.brackets:
        bracket.is_complete = bracket.champion_id is not None


def generate_brackets(
    config: TournamentConfig,
    standings: List[Standing],
    rounds: List[QualifyingRound],
    has_existing: bool = False,
) -> KnockoutPhase:
    """Seed the advancing teams into brackets.

    Args:
        config: Tournament configuration (bracket size, advancement, courts)
        standings: Final qualifying standings
        rounds: Qualifying rounds, all of which must be complete
        has_existing: Whether the tournament already has brackets

    Returns:
        The knockout phase with byes already resolved

    Raises:
        BracketAlreadyExists: brackets were already generated
        InvalidConfig: the qualifying phase is unfinished or settings are bad
    """
    if has_existing:
        raise BracketAlreadyExists("Brackets already exist; regenerate them instead")
    config.validate()
    if not standings:
        raise InvalidConfig("No standings to seed the brackets from")
    expected = config.rounds_for(len(standings))
    if len(rounds) < expected or not all(r.is_complete for r in rounds):
        raise InvalidConfig(
            f"All {expected} qualifying rounds must be complete before the brackets"
        )

    ranked = [s.team_id for s in sorted(standings, key=lambda s: s.rank)]
    limit = config.advancing_limit
    advancing = ranked[:limit] if limit is not None else ranked
    if len(advancing) < 2:
        raise InvalidConfig("At least 2 teams must advance to the brackets")

    phase = KnockoutPhase()
    for index, group in enumerate(split_into_brackets(advancing, config.bracket_size)):
        size = _size_for(len(group), config.bracket_size, index == 0)
        main = build_bracket(
            bracket_name(index), size, first_round_lines(group, size), config.court_count
        )
        phase.brackets.append(main)
        logger.info(
            "Created bracket %s (size %s) with %s teams", main.name, size, len(group)
        )
        if config.has_consolante:
            consolante = attach_consolante(main, config.court_count)
            if consolante is not None:
                phase.brackets.append(consolante)
                logger.info("Created %s (size %s)", consolante.name, consolante.size)

    _settle_byes(phase)
    for bracket in phase.brackets:
        for match in bracket.bye_matches():
            match.court_number = None
    _refresh_completion(phase)
    return phase


def _locked_by(
    phase: KnockoutPhase, bracket: Bracket, match: BracketMatch
) -> Optional[BracketMatch]:
    """The first downstream match holding a score, following auto-resolved byes."""
    for target_bracket, target, _ in _targets(phase, bracket, match):
        if target.has_scores:
            return target
        if target.is_bye and target.winner_id is not None:
            found = _locked_by(phase, target_bracket, target)
            if found is not None:
                return found
    return None


def _clear_downstream(phase: KnockoutPhase, bracket: Bracket, match: BracketMatch) -> None:
    """Take back the placements of an earlier result, undoing any byes they settled."""
    for target_bracket, target, _ in _targets(phase, bracket, match):
        target.set_slot(match.next_slot, None)
        if target.is_bye and target.winner_id is not None:
            _clear_downstream(phase, target_bracket, target)
            target.winner_id = None
            target.is_bye = False


def update_match_score(
    phase: KnockoutPhase,
    bracket_name: str,
    key: MatchKey,
    team1_score: int,
    team2_score: int,
    scoring: ScoringSystem = PETANQUE_SCORING,
) -> BracketMatch:
    """Record a bracket result and move the teams on.

    Every check runs before anything is changed.

    Raises:
        InvalidMatch: unknown match, or a bye
        MissingTeam: a slot is still empty
        MissingScore, InvalidScore, TiedScore: the scores are not acceptable
        EditLocked: a later match reached by this result already has a score
    """
    bracket = phase.bracket(bracket_name)
    match = bracket.match(key)
    if match.is_bye:
        raise InvalidMatch(f"Match {key} in bracket {bracket.name} is a bye")
    if match.team1_id is None or match.team2_id is None:
        raise MissingTeam(f"Match {key} in bracket {bracket.name} is missing a team")
    scoring.validate(team1_score, team2_score)
    blocker = _locked_by(phase, bracket, match)
    if blocker is not None:
        raise EditLocked(
            f"Match {blocker.key} already has a result; "
            f"match {key} in bracket {bracket.name} can no longer change"
        )

    if match.winner_id is not None:
        _clear_downstream(phase, bracket, match)

    match.team1_score = team1_score
    match.team2_score = team2_score
    match.winner_id = match.team1_id if team1_score > team2_score else match.team2_id
    _place(phase, bracket, match)
    _settle_byes(phase)
    _refresh_completion(phase)
    logger.info(
        "Bracket %s match %s: %s-%s, team %s advances",
        bracket.name,
        key,
        team1_score,
        team2_score,
        match.winner_id,
    )
    return match
