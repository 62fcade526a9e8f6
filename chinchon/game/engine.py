"""Game engine for Chinchón — orchestrates the round and game flow."""

from __future__ import annotations

import copy
import json
import logging
import random
from dataclasses import dataclass, field, replace

from chinchon.game.deck import (
    create_deck,
    deal,
    draw_from_deck,
    draw_from_discard,
    reshuffle_discard,
    shuffle_cards,
)
from chinchon.game.models import Card, ClosingResult, GameState, Hand, Meld, Player
from chinchon.game.notifications import Notifier, StateListener
from chinchon.game.scoring import (
    apply_rebuy,
    apply_round_scores,
    check_eliminations,
    check_winner,
    elimination_score,
)
from chinchon.utils.constants import (
    CARDS_PER_PLAYER,
    CLOSING_SEVEN_RUN,
    DEFAULT_ELIMINATION_SCORE,
    DEFAULT_WILDCARDS,
    MAX_PLAYERS,
    MIN_PLAYERS,
    PHASE_DISCARD,
    PHASE_DRAW,
    STATUS_CLOSED,
    STATUS_FINISHED,
    STATUS_PLAYING,
    STATUS_ROUND_END,
    STATUS_WAITING,
    SUITED_CARDS,
)
from chinchon.utils.crypto import create_rng

logger = logging.getLogger("chinchon.engine")

DEFAULT_SETTINGS = {
    "num_wildcards": DEFAULT_WILDCARDS,
    "elimination_score": DEFAULT_ELIMINATION_SCORE,
    "cards_per_player": CARDS_PER_PLAYER,
}


@dataclass
class ActionResult:
    success: bool
    error: str | None = None
    events: list[dict] = field(default_factory=list)


class GameEngine:
    """Single-table Chinchón game. Owns the state; callers get copies."""

    def __init__(
        self,
        player_names: list[str],
        rng: random.Random | None = None,
        settings: dict | None = None,
    ) -> None:
        if not MIN_PLAYERS <= len(player_names) <= MAX_PLAYERS:
            raise ValueError(
                f"Chinchón needs {MIN_PLAYERS}-{MAX_PLAYERS} players, "
                f"got {len(player_names)}"
            )
        if len(set(player_names)) != len(player_names):
            raise ValueError("Player names must be unique")

        merged = {**DEFAULT_SETTINGS, **(settings or {})}
        deck_size = SUITED_CARDS + merged["num_wildcards"]
        if len(player_names) * merged["cards_per_player"] + 1 > deck_size:
            raise ValueError(
                f"A {deck_size}-card deck cannot deal "
                f"{merged['cards_per_player']} cards to {len(player_names)} players"
            )

        self._rng = rng or create_rng()
        self._game = GameState(
            players=[Player(name=name) for name in player_names],
            settings=merged,
        )
        self._notifier = Notifier()

    # --- Subscription ---

    def subscribe(self, listener: StateListener) -> None:
        self._notifier.subscribe(listener)

    def unsubscribe(self, listener: StateListener) -> bool:
        return self._notifier.unsubscribe(listener)

    # --- Operations ---

    def start_round(self) -> ActionResult:
        """Shuffle a fresh deck and deal to every active player."""
        game = self._game
        if game.status == STATUS_FINISHED:
            return self._fail("The game is over")
        if game.status not in (STATUS_WAITING, STATUS_ROUND_END):
            return self._fail("A round is already in progress")

        deck = shuffle_cards(
            create_deck(game.settings["num_wildcards"]), self._rng
        )
        active = game.active_indexes()
        hands, remaining_deck, first_discard = deal(
            deck, len(active), game.settings["cards_per_player"]
        )

        for player in game.players:
            player.hand = Hand()
        for seat, cards in zip(active, hands):
            game.players[seat].hand = Hand(cards)

        game.deck = remaining_deck
        game.discard_pile = [first_discard]
        game.table_melds = []
        game.placement_queue = []
        game.closer_index = None
        game.closing_result = None
        game.turns_elapsed = 0
        game.round_number += 1
        game.current_index = active[0]
        game.turn_phase = PHASE_DRAW
        game.status = STATUS_PLAYING

        event = {
            "event": "round_start",
            "round": game.round_number,
            "first_player": game.current_player.name,
            "players_cards": {
                game.players[seat].name: len(game.players[seat].hand)
                for seat in active
            },
            "discard_top": first_discard.compact(),
        }
        return self._commit([event])

    def draw_from_deck(self, player_name: str | None = None) -> ActionResult:
        """Take the card at the tail of the deck.

        An empty deck is rebuilt from the discard pile, keeping its top card.
        """
        error = self._validate_turn(player_name, PHASE_DRAW)
        if error:
            return self._fail(error)

        game = self._game
        events: list[dict] = []
        if not game.deck:
            if len(game.discard_pile) < 2:
                return self._fail("No cards left to draw")
            game.deck, last_discard = reshuffle_discard(game.discard_pile, self._rng)
            game.discard_pile = [last_discard]
            events.append({"event": "reshuffle", "deck_size": len(game.deck)})

        card, game.deck = draw_from_deck(game.deck)
        return self._finish_draw(card, "deck", events)

    def draw_from_discard(self, player_name: str | None = None) -> ActionResult:
        """Take the top card of the discard pile."""
        error = self._validate_turn(player_name, PHASE_DRAW)
        if error:
            return self._fail(error)
        if not self._game.discard_pile:
            return self._fail("The discard pile is empty")

        card, self._game.discard_pile = draw_from_discard(self._game.discard_pile)
        return self._finish_draw(card, "discard", [])

    def discard_by_index(
        self, index: int, player_name: str | None = None
    ) -> ActionResult:
        """Discard a card, ending the turn. May close the round."""
        error = self._validate_turn(player_name, PHASE_DISCARD)
        if error:
            return self._fail(error)

        game = self._game
        player = game.current_player
        card = player.hand.remove_at(index)
        if card is None:
            return self._fail(f"Card index {index} out of range")
        game.discard_pile.append(card)

        events = [{
            "event": "discard",
            "player": player.name,
            "card": card.compact(),
            "hand_remaining": len(player.hand),
        }]

        result = player.hand.verify_closing()
        if result.can_close and not self.is_first_round:
            self._close(result, events)
        else:
            if result.can_close:
                logger.debug(
                    "%s could close but the first round is not over", player.name
                )
            self._advance_turn(events)

        return self._commit(events)

    def attempt_place_melds(self, player_name: str | None = None) -> ActionResult:
        """Lay the current player's melds on the table after a closing."""
        game = self._game
        if game.status != STATUS_CLOSED or not game.placement_queue:
            return self._fail("No placement is pending")
        if game.current_index != game.placement_queue[0]:
            return self._fail("Placement is out of turn order")
        player = game.current_player
        if player_name is not None and player.name != player_name:
            return self._fail("It is not your turn")

        melds = [replace(m, owner=player.name) for m in player.hand.find_melds()]
        game.table_melds.extend(melds)
        game.placement_queue.pop(0)

        events = [{
            "event": "placement",
            "player": player.name,
            "melds": [m.compact() for m in melds],
        }]
        if game.placement_queue:
            game.current_index = game.placement_queue[0]
        else:
            self._settle_round(events)

        return self._commit(events)

    def rebuy(self, player_name: str | None = None) -> ActionResult:
        """Buy the current player back in after going over the limit."""
        game = self._game
        if game.status in (STATUS_WAITING, STATUS_FINISHED):
            return self._fail("No game in progress")
        player = game.current_player
        if player_name is not None and player.name != player_name:
            return self._fail("It is not your turn")
        if player.eliminated:
            return self._fail("You are not an active player")
        if player.score <= elimination_score(game):
            return self._fail("Re-buy is only for players over the limit")
        if player.rebought:
            return self._fail("You have already rebought")
        if len(game.get_active_players()) <= 2:
            return self._fail("Re-buy needs more than two active players")

        before = player.score
        after = apply_rebuy(game, player)
        event = {
            "event": "rebuy",
            "player": player.name,
            "score_before": before,
            "score": after,
        }
        return self._commit([event])

    # --- Queries ---

    @property
    def status(self) -> str:
        return self._game.status

    @property
    def round_number(self) -> int:
        return self._game.round_number

    @property
    def current_player(self) -> Player:
        return copy.deepcopy(self._game.current_player)

    def hand(self, player_name: str | None = None) -> list[Card]:
        """Cards of the named player, or of the current player."""
        if player_name is None:
            return self._game.current_player.hand.cards
        player = self._game.get_player(player_name)
        return player.hand.cards if player else []

    @property
    def discard_top(self) -> Card | None:
        return self._game.discard_top

    @property
    def deck_remaining(self) -> int:
        return len(self._game.deck)

    @property
    def table_melds(self) -> list[Meld]:
        return list(self._game.table_melds)

    @property
    def is_closed(self) -> bool:
        return self._game.status == STATUS_CLOSED

    @property
    def is_first_round(self) -> bool:
        return self._game.turns_elapsed < len(self._game.players)

    @property
    def closer(self) -> Player | None:
        return copy.deepcopy(self._game.closer)

    @property
    def closing_result(self) -> ClosingResult | None:
        return self._game.closing_result

    @property
    def is_round_over(self) -> bool:
        return self._game.status in (STATUS_ROUND_END, STATUS_FINISHED)

    @property
    def is_finished(self) -> bool:
        return self._game.status == STATUS_FINISHED

    @property
    def winner(self) -> Player | None:
        return copy.deepcopy(self._game.winner)

    @property
    def players(self) -> list[Player]:
        return copy.deepcopy(self._game.players)

    def get_state(self) -> GameState:
        return copy.deepcopy(self._game)

    # --- Private helpers ---

    def _validate_turn(
        self, player_name: str | None, expected_phase: str
    ) -> str | None:
        """Validate status, turn, phase and hand size. Returns error or None."""
        game = self._game
        if game.status == STATUS_CLOSED:
            return "The round is closed"
        if game.status != STATUS_PLAYING:
            return "No round in progress"

        player = game.current_player
        if player_name is not None and player.name != player_name:
            return "It is not your turn"
        if player.eliminated:
            return "You are not an active player"

        if game.turn_phase != expected_phase:
            return f"Wrong phase: expected {expected_phase}, current {game.turn_phase}"

        cards_per_player = game.settings["cards_per_player"]
        expected_size = (
            cards_per_player if expected_phase == PHASE_DRAW else cards_per_player + 1
        )
        if len(player.hand) != expected_size:
            return f"Hand must hold {expected_size} cards, holds {len(player.hand)}"
        return None

    def _finish_draw(
        self, card: Card, source: str, events: list[dict]
    ) -> ActionResult:
        game = self._game
        player = game.current_player
        player.hand.add(card)
        game.turn_phase = PHASE_DISCARD

        event = {
            "event": "draw",
            "player": player.name,
            "source": source,
            "card_drawn": card.compact(),
            "deck_remaining": len(game.deck),
            "hand_size": len(player.hand),
        }
        events.append(event)
        return self._commit(events)

    def _advance_turn(self, events: list[dict]) -> None:
        """Move to the next active seat, skipping eliminated ones."""
        game = self._game
        game.turns_elapsed += 1
        next_index = game.next_active_index(game.current_index)
        if next_index is None:
            game.status = STATUS_FINISHED
            events.append({"event": "forced_end", "reason": "no active players"})
            return
        game.current_index = next_index
        game.turn_phase = PHASE_DRAW

    def _close(self, result: ClosingResult, events: list[dict]) -> None:
        """Close the round: lay the closer's melds, then score or win."""
        game = self._game
        game.status = STATUS_CLOSED
        game.closer_index = game.current_index
        game.closing_result = result
        closer = game.current_player
        game.table_melds = [
            replace(m, owner=closer.name) for m in closer.hand.find_melds()
        ]

        events.append({
            "event": "closure",
            "player": closer.name,
            "round": game.round_number,
            "closing_type": result.closing_type,
            "wildcards_used": result.wildcards_used,
            "melds": [m.compact() for m in game.table_melds],
        })

        if result.closing_type == CLOSING_SEVEN_RUN and result.wildcards_used == 0:
            game.status = STATUS_FINISHED
            game.winner_index = game.closer_index
            events.append({"event": "instant_win", "player": closer.name})
            self._end_game(events)
            return

        deltas = apply_round_scores(game, game.closer_index, result)
        events.append({
            "event": "score",
            "round": game.round_number,
            "deltas": deltas,
            "scores": {p.name: p.score for p in game.players},
        })

        eliminated, offered = check_eliminations(game)
        for name in offered:
            events.append({
                "event": "rebuy_offer",
                "player": name,
                "score": game.get_player(name).score,
            })
        for name in eliminated:
            events.append({
                "event": "elimination",
                "player": name,
                "total_score": game.get_player(name).score,
                "threshold": elimination_score(game),
            })

        if len(game.active_indexes()) <= 1:
            game.status = STATUS_FINISHED
            game.winner_index = check_winner(game)
            self._end_game(events)
            return

        count = len(game.players)
        queue = [
            (game.closer_index + step) % count
            for step in range(1, count)
            if not game.players[(game.closer_index + step) % count].eliminated
        ]
        if not queue or closer.hand.unmatched_points(game.table_melds) == 0:
            # Nothing more can be laid down
            self._settle_round(events)
            return
        game.placement_queue = queue
        game.current_index = queue[0]

    def _settle_round(self, events: list[dict]) -> None:
        game = self._game
        game.status = STATUS_ROUND_END
        game.placement_queue = []
        events.append({
            "event": "round_end",
            "round": game.round_number,
            "scores": {p.name: p.score for p in game.players},
            "table_melds": len(game.table_melds),
        })

    def _end_game(self, events: list[dict]) -> None:
        game = self._game
        winner = game.winner
        events.append({
            "event": "game_end",
            "winner": winner.name if winner else None,
            "final_scores": {p.name: p.score for p in game.players},
        })

    def _commit(self, events: list[dict]) -> ActionResult:
        """Log the events, notify listeners once, report success."""
        for event in events:
            logger.info(json.dumps(event))
        self._notifier.notify(self._game, events)
        return ActionResult(success=True, events=events)

    @staticmethod
    def _fail(error: str) -> ActionResult:
        logger.debug("Rejected action: %s", error)
        return ActionResult(success=False, error=error)
