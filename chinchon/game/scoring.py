"""Score calculation, elimination and re-buy logic for Chinchón."""

from __future__ import annotations

from chinchon.game.models import ClosingResult, GameState, Player
from chinchon.utils.constants import (
    CLOSING_BONUSES,
    DEFAULT_ELIMINATION_SCORE,
)


def closing_bonus(result: ClosingResult) -> int:
    """Points taken off the closer's score when nothing is left unmatched."""
    bonus = CLOSING_BONUSES.get((result.closing_type, result.wildcards_used))
    if bonus is None:
        bonus = CLOSING_BONUSES.get((result.closing_type, None), 0)
    return bonus


def apply_round_scores(
    game: GameState, closer_index: int, result: ClosingResult
) -> dict[str, int]:
    """Score every active player against the melds on the table.

    The closer with no unmatched points gets the closing bonus instead
    (subtracted, never below zero). Everyone else, and a closer with
    leftovers, adds their unmatched points.

    Returns the per-player change, negative for a bonus.
    """
    deltas: dict[str, int] = {}
    for index, player in enumerate(game.players):
        if player.eliminated:
            continue
        unmatched = player.hand.unmatched_points(game.table_melds)
        if index == closer_index and unmatched == 0:
            before = player.score
            player.subtract_points(closing_bonus(result))
            deltas[player.name] = player.score - before
        else:
            player.add_points(unmatched)
            deltas[player.name] = unmatched
    return deltas


def elimination_score(game: GameState) -> int:
    return game.settings.get("elimination_score", DEFAULT_ELIMINATION_SCORE)


def can_offer_rebuy(game: GameState, player: Player) -> bool:
    """An over-limit player may buy back in once, with 3+ players left."""
    return (
        player.score > elimination_score(game)
        and not player.rebought
        and len(game.get_active_players()) > 2
    )


def check_eliminations(game: GameState) -> tuple[list[str], list[str]]:
    """Walk the seats and settle every player over the limit.

    A player over the limit who has not rebought, with more than two players
    still in, is offered a re-buy; an offer left untaken is made again at
    every scoring while that holds. Anyone else over the limit is eliminated.

    Returns (newly_eliminated, newly_offered) player names.
    """
    threshold = elimination_score(game)
    eliminated: list[str] = []
    offered: list[str] = []
    for player in game.players:
        if player.eliminated or player.score <= threshold:
            continue
        if can_offer_rebuy(game, player):
            player.rebuy_offered = True
            offered.append(player.name)
        else:
            player.eliminated = True
            player.rebuy_offered = False
            eliminated.append(player.name)
    return eliminated, offered


def apply_rebuy(game: GameState, player: Player) -> int:
    """Mark the re-buy and snap the score to the best other active score.

    The score is never raised. Returns the new score.
    """
    others = [
        p.score for p in game.get_active_players() if p is not player
    ]
    top = max(others, default=0)
    player.rebought = True
    player.rebuy_offered = False
    player.score = min(player.score, top)
    return player.score


def check_winner(game: GameState) -> int | None:
    """If only one non-eliminated player remains, return their seat."""
    active = game.active_indexes()
    if len(active) == 1:
        return active[0]
    return None
