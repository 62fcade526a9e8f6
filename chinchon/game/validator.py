"""Validation logic for Chinchón melds and closings.

Validates sets and runs, and decides whether a 7-card hand can close the
round and with which shape.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from chinchon.game.melds import find_melds
from chinchon.game.models import Card, ClosingResult, Meld
from chinchon.utils.constants import (
    CARDS_PER_PLAYER,
    CLOSING_SEVEN_RUN,
    CLOSING_TWO_GROUPS_3_4,
    CLOSING_TWO_GROUPS_LOW_CARD,
    LOW_CARD_LIMIT,
    MELD_RUN,
    MELD_SET,
    MIN_MELD_SIZE,
    REY,
)


@dataclass
class ValidationResult:
    valid: bool
    error: str | None = None


def is_valid_set(cards: list[Card]) -> ValidationResult:
    """Validate a set.

    Rules:
    - Min 3 cards, all real cards of the same rank
    - At least 2 real cards, at most one wildcard per two real cards
    """
    if len(cards) < MIN_MELD_SIZE:
        return ValidationResult(False, error="A set needs at least 3 cards")

    wildcards = [c for c in cards if c.is_wildcard]
    regulars = [c for c in cards if not c.is_wildcard]

    if len(regulars) < 2:
        return ValidationResult(False, error="A set needs at least 2 real cards")

    if len(wildcards) > len(regulars) // 2:
        return ValidationResult(False, error="Too many wildcards in set")

    rank = regulars[0].rank
    if not all(c.rank == rank for c in regulars):
        return ValidationResult(False, error="Set cards must share a rank")

    if len({c.suit for c in regulars}) != len(regulars):
        return ValidationResult(False, error="Duplicate suit in set")

    return ValidationResult(True)


def is_valid_run(cards: list[Card]) -> ValidationResult:
    """Validate a run.

    Rules:
    - Min 3 cards, all real cards of the same suit
    - Real ranks distinct; wildcards fill the missing ranks of the span and
      may extend it at either end, within 1..12. 8 and 9 are not in the
      deck, so 7 to 10 needs two wildcards
    """
    if len(cards) < MIN_MELD_SIZE:
        return ValidationResult(False, error="A run needs at least 3 cards")

    if len(cards) > REY:
        return ValidationResult(False, error="Run longer than 1 to 12")

    wildcards = [c for c in cards if c.is_wildcard]
    regulars = [c for c in cards if not c.is_wildcard]

    if not regulars:
        return ValidationResult(False, error="A run cannot be only wildcards")

    suit = regulars[0].suit
    if not all(c.suit == suit for c in regulars):
        return ValidationResult(False, error="Run cards must share a suit")

    ranks = sorted(c.rank for c in regulars)
    if len(ranks) != len(set(ranks)):
        return ValidationResult(False, error="Duplicate rank in run")

    gaps = (ranks[-1] - ranks[0] + 1) - len(ranks)
    if gaps > len(wildcards):
        return ValidationResult(False, error="Not enough wildcards to fill run")

    return ValidationResult(True)


def detect_meld_type(cards: list[Card]) -> str | None:
    """Detect whether cards form a run or a set. Returns type or None."""
    if is_valid_run(cards).valid:
        return MELD_RUN
    if is_valid_set(cards).valid:
        return MELD_SET
    return None


def _covers(combined: list[Card], hand: list[Card]) -> bool:
    """True when combined holds exactly the hand's cards, no more, no less."""
    if len(combined) != len(hand):
        return False
    return all(card in combined for card in hand)


def _is_run(meld: Meld) -> bool:
    suits = {c.suit for c in meld if not c.is_wildcard}
    return meld.meld_type == MELD_RUN and len(suits) <= 1


def verify_closing(cards: Iterable[Card]) -> ClosingResult:
    """Check whether a 7-card hand can close, trying shapes in order.

    1. Seven-card run covering the whole hand.
    2. Two distinct melds of 3 and 4 covering the whole hand.
    3. Two distinct melds of 3+ plus one loose non-wildcard below 5.
    """
    hand = list(cards)
    if len(hand) != CARDS_PER_PLAYER:
        return ClosingResult(False)

    melds = find_melds(hand)

    for meld in melds:
        if len(meld) == 7 and _is_run(meld) and _covers(list(meld), hand):
            return ClosingResult(
                True, CLOSING_SEVEN_RUN, wildcards_used=meld.wildcard_count
            )

    for i, first in enumerate(melds):
        for j, second in enumerate(melds):
            if i == j or {len(first), len(second)} != {3, 4}:
                continue
            if _covers(list(first) + list(second), hand):
                return ClosingResult(True, CLOSING_TWO_GROUPS_3_4)

    for i, first in enumerate(melds):
        for j, second in enumerate(melds):
            if i == j or len(first) < MIN_MELD_SIZE or len(second) < MIN_MELD_SIZE:
                continue
            combined = list(first) + list(second)
            loose = [c for c in hand if c not in combined]
            if len(loose) != 1:
                continue
            card = loose[0]
            if card.is_wildcard or card.rank >= LOW_CARD_LIMIT:
                continue
            if _covers(combined + loose, hand):
                return ClosingResult(True, CLOSING_TWO_GROUPS_LOW_CARD)

    return ClosingResult(False)
