"""Tests for state integrity checker."""

from chinchon.game.engine import GameEngine
from chinchon.game.integrity import validate_game_integrity
from chinchon.game.models import Card, Meld
from chinchon.utils.constants import MELD_RUN, MELD_SET
from chinchon.utils.crypto import create_rng
from tests.conftest import make_engine


def c(code: str) -> Card:
    return Card.from_compact(code)


def _started():
    engine = GameEngine(["a", "b", "c"], create_rng(42))
    engine.start_round()
    return engine


class TestIntegrity:
    def test_fresh_round_passes(self):
        assert validate_game_integrity(_started().get_state()) == []

    def test_after_draw_passes(self):
        engine = _started()
        engine.draw_from_deck()
        assert validate_game_integrity(engine.get_state()) == []

    def test_waiting_game_not_checked(self):
        engine = GameEngine(["a", "b"], create_rng(1))
        assert validate_game_integrity(engine.get_state()) == []

    def test_missing_card(self):
        state = _started().get_state()
        state.deck.pop()
        errors = validate_game_integrity(state)
        assert any("Total cards" in e for e in errors)

    def test_duplicate_card(self):
        state = _started().get_state()
        state.deck[0] = state.deck[1]
        errors = validate_game_integrity(state)
        assert any("Duplicate" in e for e in errors)

    def test_wrong_hand_size(self):
        state = _started().get_state()
        card = state.players[1].hand.remove_at(0)
        state.deck.append(card)
        errors = validate_game_integrity(state)
        assert any("holds 6 cards" in e for e in errors)

    def test_eliminated_player_with_cards(self):
        state = _started().get_state()
        state.players[2].eliminated = True
        errors = validate_game_integrity(state)
        assert any("Eliminated player c" in e for e in errors)

    def test_invalid_table_meld(self):
        engine = make_engine(hands={"p1": ["1o", "2o", "4o", "5c", "6c", "7c", "12e"]})
        state = engine.get_state()
        state.table_melds = [
            Meld(cards=(c("1o"), c("2o"), c("4o")), meld_type=MELD_RUN, owner="p1")
        ]
        errors = validate_game_integrity(state)
        assert any("Invalid table meld" in e for e in errors)

    def test_table_meld_outside_owner_hand(self):
        engine = make_engine(hands={"p1": ["5c", "6c", "7c", "1o", "2o", "4o", "12e"]})
        state = engine.get_state()
        state.table_melds = [
            Meld(cards=(c("5c"), c("6c"), c("7c")), meld_type=MELD_RUN, owner="p2")
        ]
        errors = validate_game_integrity(state)
        assert any("not in p2's hand" in e for e in errors)

    def test_table_meld_unknown_owner(self):
        engine = make_engine(hands={"p1": ["5c", "5o", "5e", "1o", "2o", "4o", "12e"]})
        state = engine.get_state()
        state.table_melds = [
            Meld(cards=(c("5c"), c("5o"), c("5e")), meld_type=MELD_SET, owner="zoe")
        ]
        errors = validate_game_integrity(state)
        assert any("unknown owner" in e for e in errors)

    def test_current_player_eliminated(self):
        engine = make_engine(names=("p1", "p2", "p3"), eliminated=("p1",))
        state = engine.get_state()
        errors = validate_game_integrity(state)
        assert any("not active" in e for e in errors)

    def test_negative_score(self):
        state = _started().get_state()
        state.players[0].score = -1
        errors = validate_game_integrity(state)
        assert any("Negative score" in e for e in errors)

    def test_bad_phase(self):
        state = _started().get_state()
        state.turn_phase = "lunch"
        errors = validate_game_integrity(state)
        assert any("Invalid turn phase" in e for e in errors)
