"""Tests for scoring module."""

from chinchon.game.models import Card, ClosingResult, GameState, Hand, Meld, Player
from chinchon.game.scoring import (
    apply_rebuy,
    apply_round_scores,
    can_offer_rebuy,
    check_eliminations,
    check_winner,
    closing_bonus,
)
from chinchon.utils.constants import (
    CLOSING_SEVEN_RUN,
    CLOSING_TWO_GROUPS_3_4,
    CLOSING_TWO_GROUPS_LOW_CARD,
    MELD_RUN,
    MELD_SET,
)


def c(code: str) -> Card:
    return Card.from_compact(code)


def hand(*codes: str) -> Hand:
    return Hand(c(code) for code in codes)


def make_state(*players: Player) -> GameState:
    return GameState(players=list(players), settings={"elimination_score": 100})


class TestClosingBonus:
    def test_seven_run_one_wildcard(self):
        assert closing_bonus(ClosingResult(True, CLOSING_SEVEN_RUN, 1)) == 50

    def test_seven_run_two_wildcards(self):
        assert closing_bonus(ClosingResult(True, CLOSING_SEVEN_RUN, 2)) == 25

    def test_seven_run_many_wildcards(self):
        assert closing_bonus(ClosingResult(True, CLOSING_SEVEN_RUN, 3)) == 0

    def test_three_and_four(self):
        assert closing_bonus(ClosingResult(True, CLOSING_TWO_GROUPS_3_4)) == 10

    def test_low_card_has_none(self):
        assert closing_bonus(ClosingResult(True, CLOSING_TWO_GROUPS_LOW_CARD)) == 0


class TestApplyRoundScores:
    def _closed_state(self, closer_score=0):
        closer = Player(
            name="a",
            score=closer_score,
            hand=hand("5o", "5c", "5e", "1b", "2b", "3b", "4b"),
        )
        other = Player(
            name="b", score=30, hand=hand("1o", "2c", "3e", "12o", "W1", "6b", "7c")
        )
        out = Player(name="c", score=150, eliminated=True)
        state = make_state(closer, other, out)
        state.table_melds = [
            Meld(cards=(c("5o"), c("5c"), c("5e")), meld_type=MELD_SET, owner="a"),
            Meld(
                cards=(c("1b"), c("2b"), c("3b"), c("4b")),
                meld_type=MELD_RUN,
                owner="a",
            ),
        ]
        return state

    def test_closer_bonus_subtracted(self):
        state = self._closed_state(closer_score=25)
        deltas = apply_round_scores(state, 0, ClosingResult(True, CLOSING_TWO_GROUPS_3_4))
        assert state.players[0].score == 15
        assert deltas["a"] == -10

    def test_closer_bonus_clamped(self):
        state = self._closed_state(closer_score=4)
        deltas = apply_round_scores(state, 0, ClosingResult(True, CLOSING_TWO_GROUPS_3_4))
        assert state.players[0].score == 0
        assert deltas["a"] == -4

    def test_others_add_unmatched(self):
        state = self._closed_state()
        deltas = apply_round_scores(state, 0, ClosingResult(True, CLOSING_TWO_GROUPS_3_4))
        # 1 + 2 + 3 + 10 + 20 + 6 + 7
        assert deltas["b"] == 49
        assert state.players[1].score == 79

    def test_eliminated_not_scored(self):
        state = self._closed_state()
        deltas = apply_round_scores(state, 0, ClosingResult(True, CLOSING_TWO_GROUPS_3_4))
        assert "c" not in deltas
        assert state.players[2].score == 150

    def test_closer_with_leftover_adds_points(self):
        closer = Player(
            name="a", score=10, hand=hand("5o", "5c", "5e", "10b", "11b", "12b", "3c")
        )
        state = make_state(closer, Player(name="b"))
        state.table_melds = [
            Meld(cards=(c("5o"), c("5c"), c("5e")), meld_type=MELD_SET, owner="a"),
            Meld(cards=(c("10b"), c("11b"), c("12b")), meld_type=MELD_RUN, owner="a"),
        ]
        result = ClosingResult(True, CLOSING_TWO_GROUPS_LOW_CARD)
        deltas = apply_round_scores(state, 0, result)
        assert deltas["a"] == 3
        assert state.players[0].score == 13


class TestEliminations:
    def test_first_time_over_is_offered(self):
        state = make_state(
            Player(name="a", score=115), Player(name="b"), Player(name="c")
        )
        eliminated, offered = check_eliminations(state)
        assert offered == ["a"]
        assert eliminated == []
        assert state.players[0].rebuy_offered
        assert not state.players[0].eliminated

    def test_untaken_offer_is_made_again(self):
        state = make_state(
            Player(name="a", score=130, rebuy_offered=True),
            Player(name="b"),
            Player(name="c"),
        )
        eliminated, offered = check_eliminations(state)
        assert eliminated == []
        assert offered == ["a"]
        assert not state.players[0].eliminated
        assert state.players[0].rebuy_offered

    def test_rebought_player_is_out(self):
        state = make_state(
            Player(name="a", score=101, rebought=True),
            Player(name="b"),
            Player(name="c"),
        )
        eliminated, _ = check_eliminations(state)
        assert eliminated == ["a"]

    def test_two_players_left_no_offer(self):
        state = make_state(Player(name="a", score=120), Player(name="b"))
        assert not can_offer_rebuy(state, state.players[0])
        eliminated, offered = check_eliminations(state)
        assert eliminated == ["a"]
        assert offered == []

    def test_exactly_limit_survives(self):
        state = make_state(Player(name="a", score=100), Player(name="b"))
        assert check_eliminations(state) == ([], [])


class TestRebuy:
    def test_snaps_to_best_other_score(self):
        state = make_state(
            Player(name="a", score=115, rebuy_offered=True),
            Player(name="b", score=40),
            Player(name="c", score=72),
        )
        assert apply_rebuy(state, state.players[0]) == 72
        assert state.players[0].rebought
        assert not state.players[0].rebuy_offered

    def test_never_raises_score(self):
        state = make_state(
            Player(name="a", score=105),
            Player(name="b", score=110),
            Player(name="c", score=20),
        )
        assert apply_rebuy(state, state.players[0]) == 105

    def test_ignores_eliminated_players(self):
        state = make_state(
            Player(name="a", score=115),
            Player(name="b", score=40),
            Player(name="c", score=30),
            Player(name="d", score=90, eliminated=True),
        )
        assert apply_rebuy(state, state.players[0]) == 40


class TestCheckWinner:
    def test_one_left(self):
        state = make_state(
            Player(name="a", eliminated=True), Player(name="b"), Player(name="c", eliminated=True)
        )
        assert check_winner(state) == 1

    def test_no_winner_yet(self):
        state = make_state(Player(name="a"), Player(name="b"))
        assert check_winner(state) is None
