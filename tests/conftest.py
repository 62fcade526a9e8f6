"""Shared test fixtures for Chinchón."""

from __future__ import annotations

import pytest

from chinchon.game.deck import create_deck
from chinchon.game.engine import GameEngine
from chinchon.game.models import Card, GameState, Hand
from chinchon.utils.constants import PHASE_DRAW, STATUS_PLAYING
from chinchon.utils.crypto import create_rng


class RecordingListener:
    """Records every state-changed notification for test assertions."""

    def __init__(self) -> None:
        self.calls: list[tuple[GameState, list[dict]]] = []

    def __call__(self, game: GameState, events: list[dict]) -> None:
        self.calls.append((game, events))

    def event_names(self) -> list[list[str]]:
        """Event names per notification, in order."""
        return [[e["event"] for e in events] for _, events in self.calls]

    def last_state(self) -> GameState | None:
        return self.calls[-1][0] if self.calls else None


def make_engine(
    hands: dict[str, list[str]] | None = None,
    names: tuple[str, ...] = ("p1", "p2", "p3", "p4"),
    current: int = 0,
    phase: str = PHASE_DRAW,
    turns_elapsed: int | None = None,
    discard: list[str] | None = None,
    scores: dict[str, int] | None = None,
    eliminated: tuple[str, ...] = (),
    settings: dict | None = None,
    seed: int = 42,
) -> GameEngine:
    """Build an engine mid-round with the given hands forced.

    Unlisted players are dealt the remaining cards round-robin in deck
    order, and the rest form the deck, so the card count stays whole.
    By default the first go-round is already over, so closings count.
    """
    engine = GameEngine(list(names), create_rng(seed), settings)
    game = engine._game

    forced = {
        name: [Card.from_compact(code) for code in codes]
        for name, codes in (hands or {}).items()
    }
    discard_cards = [Card.from_compact(code) for code in discard or []]
    used = [card for cards in forced.values() for card in cards] + discard_cards
    pool = [
        card
        for card in create_deck(game.settings["num_wildcards"])
        if card not in used
    ]

    dealt: dict[str, list[Card]] = {}
    for player in game.players:
        player.score = (scores or {}).get(player.name, 0)
        if player.name in eliminated:
            player.eliminated = True
        elif player.name not in forced:
            dealt[player.name] = []

    # One card at a time around the table, so filler hands hold no runs
    for _ in range(game.settings["cards_per_player"]):
        for cards in dealt.values():
            cards.append(pool.pop(0))

    for player in game.players:
        if player.name in forced:
            player.hand = Hand(forced[player.name])
        else:
            player.hand = Hand(dealt.get(player.name, []))

    if not discard_cards:
        discard_cards = [pool.pop(0)]
    game.deck = pool
    game.discard_pile = discard_cards
    game.status = STATUS_PLAYING
    game.turn_phase = phase
    game.current_index = current
    game.turns_elapsed = len(names) if turns_elapsed is None else turns_elapsed
    game.round_number = 1
    return engine


def index_of(engine: GameEngine, code: str) -> int:
    """Position of a card in the current player's sorted hand."""
    return engine.hand().index(Card.from_compact(code))


@pytest.fixture
def listener():
    return RecordingListener()


@pytest.fixture
def engine():
    """Four players, seeded, nothing dealt yet."""
    return GameEngine(["p1", "p2", "p3", "p4"], create_rng(42))


@pytest.fixture
def started_engine(engine):
    result = engine.start_round()
    assert result.success
    return engine
