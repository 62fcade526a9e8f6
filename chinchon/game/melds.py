"""Meld detection for Chinchón hands.

Finds every set (same rank) and run (same suit, consecutive ranks) a hand
can show, padding with wildcards where allowed. The result is a list of
candidates rather than a single partition: runs from different starting
cards may share real cards, and the closing check picks a consistent pair.
A wildcard is handed to at most one meld, sets first, then runs.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Iterable

from chinchon.game.models import Card, Meld
from chinchon.utils.constants import MELD_RUN, MELD_SET, MIN_MELD_SIZE, SUITS


class _WildcardPool:
    """Wildcards of one hand, handed out first-come in hand order."""

    def __init__(self, wildcards: list[Card]) -> None:
        self._wildcards = wildcards
        self._used: list[Card] = []

    def __len__(self) -> int:
        return len(self._wildcards)

    def free(self) -> list[Card]:
        return [w for w in self._wildcards if w not in self._used]

    def take(self) -> Card | None:
        for w in self._wildcards:
            if w not in self._used:
                self._used.append(w)
                return w
        return None

    def release(self, cards: Iterable[Card]) -> None:
        for card in cards:
            if card in self._used:
                self._used.remove(card)


def find_melds(cards: Iterable[Card]) -> list[Meld]:
    """Return all sets, then all runs, found in the given cards."""
    cards = list(cards)
    pool = _WildcardPool([c for c in cards if c.is_wildcard])
    regulars = [c for c in cards if not c.is_wildcard]

    melds = _find_sets(regulars, pool)
    by_suit: dict[str, list[Card]] = defaultdict(list)
    for card in regulars:
        by_suit[card.suit].append(card)
    for suit in SUITS:
        suited = sorted(by_suit.get(suit, []), key=lambda c: c.rank)
        melds.extend(_find_runs(suited, pool))
    return melds


def _find_sets(regulars: list[Card], pool: _WildcardPool) -> list[Meld]:
    by_rank: dict[int, list[Card]] = defaultdict(list)
    for card in regulars:
        by_rank[card.rank].append(card)

    sets: list[Meld] = []
    for rank in sorted(by_rank):
        group = by_rank[rank]
        if len(group) < 2 or len(group) + len(pool) < MIN_MELD_SIZE:
            continue
        needed = max(0, MIN_MELD_SIZE - len(group))
        if len(pool.free()) < needed:
            continue
        padding = [pool.take() for _ in range(needed)]
        sets.append(Meld(cards=tuple(group + padding), meld_type=MELD_SET))
    return sets


def _find_runs(suited: list[Card], pool: _WildcardPool) -> list[Meld]:
    """Greedy run scan from every starting card of one suit (sorted)."""
    runs: list[Meld] = []
    for i, start in enumerate(suited):
        run = [start]
        taken: list[Card] = []
        expected = start.rank + 1
        j = i + 1
        while j < len(suited):
            card = suited[j]
            if card.rank == expected:
                run.append(card)
                expected += 1
                j += 1
                continue
            # Gap: fill one missing rank, then look at the same card again.
            # 8 and 9 never appear, so 7 to 10 costs two wildcards
            wildcard = pool.take()
            if wildcard is None:
                break
            run.append(wildcard)
            taken.append(wildcard)
            expected += 1

        while len(run) < MIN_MELD_SIZE:
            wildcard = pool.take()
            if wildcard is None:
                break
            run.append(wildcard)
            taken.append(wildcard)

        if len(run) >= MIN_MELD_SIZE:
            runs.append(Meld(cards=tuple(run), meld_type=MELD_RUN))
        else:
            pool.release(taken)
    return runs


def unmatched_points(cards: Iterable[Card], melds: Iterable[Meld]) -> int:
    """Sum the points of cards not covered by any of the melds."""
    covered = {card for meld in melds for card in meld}
    return sum(card.points() for card in cards if card not in covered)
