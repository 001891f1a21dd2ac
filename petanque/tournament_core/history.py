"""
History of who played whom, on which court, and who sat out.

The ledger holds no policy. It is rebuilt from the game history whenever a
round is paired, so it can never drift from the authoritative results.
"""

from collections import Counter, defaultdict
from typing import Dict, FrozenSet, Iterable, Set

from petanque.tournament_core.structure import Game


class HistoryLedger:
    """Pairing, court and bye history for one tournament."""

    def __init__(self):
        self._pairs: Counter = Counter()
        self._courts: Dict[int, Counter] = defaultdict(Counter)
        self._byes: Counter = Counter()

    @classmethod
    def from_games(cls, games: Iterable[Game]) -> "HistoryLedger":
        ledger = cls()
        ledger.record_games(games)
        return ledger

    def copy(self) -> "HistoryLedger":
        clone = HistoryLedger()
        clone._pairs = Counter(self._pairs)
        for team_id, courts in self._courts.items():
            clone._courts[team_id] = Counter(courts)
        clone._byes = Counter(self._byes)
        return clone

    def record_game(self, game: Game) -> None:
        if game.is_bye:
            self._byes[game.team1_id] += 1
            return
        if game.team1_id is not None and game.team2_id is not None:
            self._pairs[self._key(game.team1_id, game.team2_id)] += 1
        if game.court_number is not None:
            for team_id in game.team_ids:
                self._courts[team_id][game.court_number] += 1

    def record_games(self, games: Iterable[Game]) -> None:
        for game in games:
            self.record_game(game)

    def has_played(self, team1_id: int, team2_id: int) -> bool:
        return self.times_played(team1_id, team2_id) > 0

    def times_played(self, team1_id: int, team2_id: int) -> int:
        return self._pairs[self._key(team1_id, team2_id)]

    def court_uses(self, team_id: int, court_number: int) -> int:
        return self._courts[team_id][court_number] if team_id in self._courts else 0

    def courts_used(self, team_id: int) -> Set[int]:
        return set(self._courts.get(team_id, {}))

    def bye_count(self, team_id: int) -> int:
        return self._byes[team_id]

    @staticmethod
    def _key(team1_id: int, team2_id: int) -> FrozenSet[int]:
        return frozenset((team1_id, team2_id))
