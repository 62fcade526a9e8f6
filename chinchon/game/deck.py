"""Deck operations for Chinchón: creation, shuffle, deal, draw."""

from __future__ import annotations

import random

from chinchon.game.models import Card
from chinchon.utils.constants import (
    CARDS_PER_PLAYER,
    DEFAULT_WILDCARDS,
    RANKS,
    SUITS,
)


def create_deck(num_wildcards: int = DEFAULT_WILDCARDS) -> list[Card]:
    """Create a 40-card Spanish deck plus numbered wildcards."""
    cards: list[Card] = []
    for suit in SUITS:
        for rank in RANKS:
            cards.append(Card(suit=suit, rank=rank))
    for tag in range(1, num_wildcards + 1):
        cards.append(Card.wildcard(tag))
    return cards


def shuffle_cards(cards: list[Card], rng: random.Random) -> list[Card]:
    """Shuffle Spanish cards and wildcards alike; the input is left as is.

    Walks the list from the tail down (Fisher-Yates), so a seeded ``rng``
    always yields the same order for the same deck.
    """
    shuffled = list(cards)
    for last in range(len(shuffled) - 1, 0, -1):
        pick = rng.randint(0, last)
        shuffled[last], shuffled[pick] = shuffled[pick], shuffled[last]
    return shuffled


def deal(
    deck: list[Card], num_players: int, cards_each: int = CARDS_PER_PLAYER
) -> tuple[list[list[Card]], list[Card], Card]:
    """Deal cards from the tail of a shuffled deck.

    Each player receives all of their cards before the next one is served.

    Returns:
        (hands, remaining_deck, first_discard)
    Raises ValueError if the deck cannot cover the deal plus one discard.
    """
    needed = num_players * cards_each + 1
    if len(deck) < needed:
        raise ValueError(f"Deck has {len(deck)} cards, {needed} needed")
    remaining = list(deck)
    hands: list[list[Card]] = []
    for _ in range(num_players):
        hands.append([remaining.pop() for _ in range(cards_each)])
    first_discard = remaining.pop()
    return hands, remaining, first_discard


def draw_from_deck(deck: list[Card]) -> tuple[Card, list[Card]]:
    """Take the next face-down card, which sits at the tail like in ``deal``.

    Returns (drawn_card, remaining_deck). An empty deck raises ValueError;
    the engine rebuilds it with ``reshuffle_discard`` before drawing.
    """
    if not deck:
        raise ValueError("Deck is empty")
    remaining = list(deck)
    card = remaining.pop()
    return card, remaining


def draw_from_discard(discard_pile: list[Card]) -> tuple[Card, list[Card]]:
    """Take the face-up card, the last one discarded.

    Returns (picked_card, remaining_pile). Raises ValueError on an empty pile.
    """
    if not discard_pile:
        raise ValueError("Discard pile is empty")
    remaining = list(discard_pile)
    card = remaining.pop()
    return card, remaining


def reshuffle_discard(
    discard_pile: list[Card], rng: random.Random
) -> tuple[list[Card], Card]:
    """Turn the discard pile into a fresh deck once the deck is empty.

    The face-up card stays on the table as the only card of the new pile;
    everything under it, wildcards included, is shuffled into the deck.
    Returns (new_deck, face_up).
    """
    if len(discard_pile) < 2:
        raise ValueError("Not enough cards to reshuffle")
    *buried, face_up = discard_pile
    return shuffle_cards(buried, rng), face_up
