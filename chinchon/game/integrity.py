"""State integrity checker for Chinchón game state."""

from __future__ import annotations

from collections import Counter

from chinchon.game.models import Card, GameState
from chinchon.game.validator import is_valid_run, is_valid_set
from chinchon.utils.constants import (
    MELD_RUN,
    PHASE_DISCARD,
    PHASE_DRAW,
    STATUS_CLOSED,
    STATUS_PLAYING,
    STATUS_ROUND_END,
    SUITED_CARDS,
)


def validate_game_integrity(game: GameState) -> list[str]:
    """Validate all game state invariants. Returns list of errors (empty = OK).

    Checks:
    1. Total cards = 40 + wildcards (hands + deck + discard)
    2. No duplicate cards
    3. Hand sizes: 7, or 8 for the current player after drawing
    4. Table melds are valid and their cards sit in their owner's hand
    5. Current player exists and is active
    6. Turn phase is valid
    7. Scores are non-negative
    """
    errors: list[str] = []

    if game.status not in (STATUS_PLAYING, STATUS_CLOSED, STATUS_ROUND_END):
        # Nothing dealt yet, or the game is over
        return errors

    # 1. Table melds reuse hand cards, so only hands, deck and discard count
    all_cards: list[Card] = []
    for player in game.players:
        all_cards.extend(player.hand)
    all_cards.extend(game.deck)
    all_cards.extend(game.discard_pile)

    expected_total = SUITED_CARDS + game.settings.get("num_wildcards", 0)
    if len(all_cards) != expected_total:
        errors.append(f"Total cards = {len(all_cards)}, expected {expected_total}")

    # 2. Duplicates
    counts = Counter(all_cards)
    for card, count in counts.items():
        if count > 1:
            errors.append(f"Duplicate card {card.compact()} (x{count})")

    # 3. Hand sizes
    cards_per_player = game.settings.get("cards_per_player", 7)
    for index, player in enumerate(game.players):
        size = len(player.hand)
        if player.eliminated:
            if game.status == STATUS_PLAYING and size:
                errors.append(f"Eliminated player {player.name} holds {size} cards")
            continue
        allowed = {cards_per_player}
        if (
            game.status == STATUS_PLAYING
            and index == game.current_index
            and game.turn_phase == PHASE_DISCARD
        ):
            allowed = {cards_per_player + 1}
        if size not in allowed:
            errors.append(f"Player {player.name} holds {size} cards")

    # 4. Table melds
    for meld in game.table_melds:
        check = is_valid_run if meld.meld_type == MELD_RUN else is_valid_set
        result = check(list(meld.cards))
        if not result.valid:
            errors.append(f"Invalid table meld {meld.compact()}: {result.error}")
        owner = game.get_player(meld.owner)
        if owner is None:
            errors.append(f"Table meld {meld.compact()} has unknown owner {meld.owner!r}")
        elif any(card not in owner.hand for card in meld):
            errors.append(f"Table meld {meld.compact()} not in {owner.name}'s hand")

    # 5. Current player
    if not 0 <= game.current_index < len(game.players):
        errors.append(f"Current seat {game.current_index} out of range")
    elif game.players[game.current_index].eliminated and game.status == STATUS_PLAYING:
        errors.append(f"Current player {game.current_player.name} is not active")

    # 6. Turn phase
    if game.turn_phase not in (PHASE_DRAW, PHASE_DISCARD):
        errors.append(f"Invalid turn phase: {game.turn_phase}")

    # 7. Non-negative scores
    for player in game.players:
        if player.score < 0:
            errors.append(f"Negative score for {player.name}: {player.score}")

    return errors
