"""Simulate Chinchón games with random AI players.

Usage: python -m cli.simulate --games 100 --players 4 [--seed 42] [--verbose]
"""

from __future__ import annotations

import argparse
import logging
import random
import time

from chinchon.game.engine import GameEngine
from chinchon.game.integrity import validate_game_integrity
from chinchon.game.melds import find_melds
from chinchon.game.models import Card
from chinchon.game.validator import verify_closing
from chinchon.utils.constants import (
    PHASE_DRAW,
    STATUS_CLOSED,
    STATUS_FINISHED,
    STATUS_PLAYING,
    STATUS_ROUND_END,
)
from chinchon.utils.crypto import create_rng


def choose_discard(hand: list[Card], rng: random.Random) -> int:
    """Pick the index to discard from an 8-card hand.

    Prefer a discard that leaves a closing hand; otherwise throw the
    highest-value card outside every meld, ties broken at random.
    """
    for i in range(len(hand)):
        rest = hand[:i] + hand[i + 1:]
        if verify_closing(rest).can_close:
            return i

    melded = {card for meld in find_melds(hand) for card in meld}
    loose = [i for i, card in enumerate(hand) if card not in melded]
    candidates = loose or list(range(len(hand)))
    best = max(hand[i].points() for i in candidates)
    return rng.choice([i for i in candidates if hand[i].points() == best])


def wants_discard_top(hand: list[Card], top: Card | None) -> bool:
    """Take the discard top when it completes a closing hand."""
    if top is None:
        return False
    cards = hand + [top]
    return any(
        verify_closing(cards[:i] + cards[i + 1:]).can_close
        for i in range(len(cards) - 1)
    )


def ai_turn(engine: GameEngine, rng: random.Random) -> None:
    """Execute one AI step for whoever is to act."""
    state = engine.get_state()

    if state.status == STATUS_CLOSED:
        player = state.current_player
        if player.rebuy_offered and rng.random() < 0.5:
            engine.rebuy(player.name)
        result = engine.attempt_place_melds(player.name)
        if not result.success:
            raise RuntimeError(f"Placement failed: {result.error}")
        return

    if state.status != STATUS_PLAYING:
        return

    player = state.current_player
    if state.turn_phase == PHASE_DRAW:
        if player.rebuy_offered and rng.random() < 0.5:
            engine.rebuy(player.name)
        hand = player.hand.cards
        if wants_discard_top(hand, state.discard_top):
            result = engine.draw_from_discard(player.name)
        else:
            result = engine.draw_from_deck(player.name)
        if not result.success:
            raise RuntimeError(f"Draw failed: {result.error}")

    hand = engine.hand(player.name)
    result = engine.discard_by_index(choose_discard(hand, rng), player.name)
    if not result.success:
        raise RuntimeError(f"Discard failed: {result.error}")


def simulate_game(
    num_players: int, rng: random.Random, verbose: bool = False,
    max_turns: int = 5000,
) -> dict:
    """Simulate one complete game. Returns stats dict."""
    player_ids = [f"p{i + 1}" for i in range(num_players)]
    engine = GameEngine(player_ids, rng)
    result = engine.start_round()
    if not result.success:
        return {"error": result.error, "turns": 0}

    turn_count = 0
    while engine.status != STATUS_FINISHED and turn_count < max_turns:
        if engine.status == STATUS_ROUND_END:
            result = engine.start_round()
            if not result.success:
                return {"error": result.error, "turns": turn_count}

        errors = validate_game_integrity(engine.get_state())
        if errors:
            return {"error": f"Integrity: {errors}", "turns": turn_count}

        try:
            ai_turn(engine, rng)
        except RuntimeError as e:
            return {"error": str(e), "turns": turn_count}

        turn_count += 1
        if verbose and turn_count % 100 == 0:
            print(f"  Turn {turn_count}, round {engine.round_number}")

    winner = engine.winner
    return {
        "winner": winner.name if winner else None,
        "turns": turn_count,
        "rounds": engine.round_number,
        "scores": {p.name: p.score for p in engine.players},
        "error": None,
    }


def main() -> None:
    parser = argparse.ArgumentParser(description="Chinchón Simulator")
    parser.add_argument("--games", type=int, default=100)
    parser.add_argument("--players", type=int, default=4, choices=[2, 3, 4, 5])
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    base_seed = args.seed if args.seed is not None else int(time.time())
    n, p = args.games, args.players
    print(f"Simulating {n} games with {p} players (base seed: {base_seed})")

    errors = 0
    wins: dict[str, int] = {}
    total_turns = 0
    total_rounds = 0

    for i in range(args.games):
        rng = create_rng(base_seed + i)
        result = simulate_game(args.players, rng, verbose=args.verbose)

        if result.get("error"):
            errors += 1
            if args.verbose:
                print(f"  Game {i + 1}: ERROR - {result['error']}")
        else:
            winner = result.get("winner") or "none"
            wins[winner] = wins.get(winner, 0) + 1
            total_turns += result["turns"]
            total_rounds += result["rounds"]

            if args.verbose:
                print(
                    f"  Game {i + 1}: winner={winner}, "
                    f"turns={result['turns']}, rounds={result['rounds']}"
                )

        if (i + 1) % 100 == 0 and not args.verbose:
            print(f"  {i + 1}/{args.games} done...")

    completed = args.games - errors
    print("\nResults:")
    print(f"  Games completed: {completed}/{args.games}")
    print(f"  Errors: {errors}")
    if completed > 0:
        print(f"  Average turns: {total_turns / completed:.1f}")
        print(f"  Average rounds: {total_rounds / completed:.1f}")
        print(f"  Wins: {wins}")


if __name__ == "__main__":
    main()
