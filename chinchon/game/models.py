"""Data models for Chinchón game state."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator

from chinchon.utils.constants import (
    FACE_POINTS,
    PHASE_DRAW,
    RANK_NAMES,
    RANKS,
    SOTA,
    STATUS_WAITING,
    SUIT_NAMES,
    SUITS,
    WILDCARD_POINTS,
    WILDCARD_RANK,
    WILDCARD_SUIT,
)


@dataclass(frozen=True)
class Card:
    """A single card of the Spanish deck.

    Compact encoding examples: "5o" = 5 of oros, "12e" = rey of espadas,
    "W1" = wildcard number 1.
    """

    suit: str  # "o", "c", "e", "b", "w"
    rank: int  # 0=wildcard, 1-7, 10-12
    tag: int = 0  # wildcard number, 0 for suited cards

    @classmethod
    def wildcard(cls, tag: int) -> Card:
        return cls(suit=WILDCARD_SUIT, rank=WILDCARD_RANK, tag=tag)

    @property
    def is_wildcard(self) -> bool:
        return self.suit == WILDCARD_SUIT

    def points(self) -> int:
        """Point value of this card when left unmatched."""
        if self.is_wildcard:
            return WILDCARD_POINTS
        if self.rank >= SOTA:
            return FACE_POINTS
        return self.rank

    def sort_key(self) -> tuple[int, int, int]:
        """Suit order, then rank; wildcards last, by tag."""
        if self.is_wildcard:
            return (len(SUITS), 0, self.tag)
        return (SUITS.index(self.suit), self.rank, 0)

    def compact(self) -> str:
        """Encode to compact string."""
        if self.is_wildcard:
            return f"W{self.tag}"
        return f"{RANK_NAMES[self.rank]}{self.suit}"

    @classmethod
    def from_compact(cls, code: str) -> Card:
        """Decode from compact string.

        Formats:
        - "W1", "W2" -> wildcard with its tag
        - "5o", "12e", "1b" -> suited card
        """
        if code.startswith("W") and code[1:].isdigit():
            return cls.wildcard(int(code[1:]))

        suit = code[-1]
        if suit not in SUITS:
            raise ValueError(f"Unknown suit in card code: {code!r}")
        rank = int(code[:-1])
        if rank not in RANKS:
            raise ValueError(f"Unknown rank in card code: {code!r}")
        return cls(suit=suit, rank=rank)

    def display(self) -> str:
        if self.is_wildcard:
            return f"{SUIT_NAMES[WILDCARD_SUIT]} {self.tag}"
        return f"{RANK_NAMES[self.rank]} de {SUIT_NAMES[self.suit]}"


@dataclass(frozen=True)
class Meld:
    """A set (same rank) or run (same suit, consecutive) of cards."""

    cards: tuple[Card, ...]
    meld_type: str  # "set" or "run"
    owner: str = ""

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self.cards)

    def __contains__(self, card: object) -> bool:
        return card in self.cards

    @property
    def wildcard_count(self) -> int:
        return sum(1 for c in self.cards if c.is_wildcard)

    def compact(self) -> list[str]:
        return [c.compact() for c in self.cards]


@dataclass(frozen=True)
class ClosingResult:
    can_close: bool
    closing_type: str | None = None
    wildcards_used: int = 0


class Hand:
    """A player's cards, kept sorted by suit then rank with wildcards last."""

    def __init__(self, cards: Iterable[Card] = ()) -> None:
        self._cards: list[Card] = []
        for card in cards:
            self.add(card)

    def add(self, card: Card) -> None:
        if card in self._cards:
            raise ValueError(f"Card {card.compact()} already in hand")
        self._cards.append(card)
        self._cards.sort(key=Card.sort_key)

    def remove_at(self, index: int) -> Card | None:
        if 0 <= index < len(self._cards):
            return self._cards.pop(index)
        return None

    def get(self, index: int) -> Card | None:
        if 0 <= index < len(self._cards):
            return self._cards[index]
        return None

    def clear(self) -> None:
        self._cards.clear()

    @property
    def cards(self) -> list[Card]:
        return list(self._cards)

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(list(self._cards))

    def __contains__(self, card: object) -> bool:
        return card in self._cards

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Hand):
            return NotImplemented
        return self._cards == other._cards

    def __repr__(self) -> str:
        return f"Hand({self.compact()})"

    def compact(self) -> list[str]:
        return [c.compact() for c in self._cards]

    def find_melds(self) -> list[Meld]:
        from chinchon.game.melds import find_melds

        return find_melds(self._cards)

    def verify_closing(self) -> ClosingResult:
        from chinchon.game.validator import verify_closing

        return verify_closing(self._cards)

    def unmatched_points(self, melds: Iterable[Meld]) -> int:
        from chinchon.game.melds import unmatched_points

        return unmatched_points(self._cards, melds)


@dataclass
class Player:
    """A seat at the table. Score and flags persist across rounds."""

    name: str
    score: int = 0
    hand: Hand = field(default_factory=Hand)
    rebought: bool = False
    eliminated: bool = False
    rebuy_offered: bool = False

    @property
    def is_active(self) -> bool:
        return not self.eliminated

    def add_points(self, points: int) -> None:
        self.score += points

    def subtract_points(self, points: int) -> None:
        self.score = max(0, self.score - points)


@dataclass
class GameState:
    """Complete state of a Chinchón game and its current round."""

    players: list[Player]
    settings: dict
    deck: list[Card] = field(default_factory=list)
    discard_pile: list[Card] = field(default_factory=list)
    table_melds: list[Meld] = field(default_factory=list)
    current_index: int = 0
    turn_phase: str = PHASE_DRAW
    turns_elapsed: int = 0
    round_number: int = 0
    status: str = STATUS_WAITING
    closer_index: int | None = None
    closing_result: ClosingResult | None = None
    # Seats still due a post-close placement, in turn order
    placement_queue: list[int] = field(default_factory=list)
    winner_index: int | None = None

    @property
    def current_player(self) -> Player:
        return self.players[self.current_index]

    @property
    def closer(self) -> Player | None:
        if self.closer_index is None:
            return None
        return self.players[self.closer_index]

    @property
    def winner(self) -> Player | None:
        if self.winner_index is None:
            return None
        return self.players[self.winner_index]

    @property
    def discard_top(self) -> Card | None:
        return self.discard_pile[-1] if self.discard_pile else None

    def get_player(self, name: str) -> Player | None:
        for p in self.players:
            if p.name == name:
                return p
        return None

    def get_active_players(self) -> list[Player]:
        return [p for p in self.players if not p.eliminated]

    def active_indexes(self) -> list[int]:
        return [i for i, p in enumerate(self.players) if not p.eliminated]

    def next_active_index(self, from_index: int) -> int | None:
        """First active seat after from_index, wrapping; None if all are out."""
        count = len(self.players)
        index = from_index
        for _ in range(count):
            index = (index + 1) % count
            if not self.players[index].eliminated:
                return index
        return None
