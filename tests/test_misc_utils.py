import math

from nfl_defense.utils.misc_utils import per_game, round_one, to_number


def test_to_number_accepts_numbers_and_numeric_strings():
    assert to_number(12) == 12.0
    assert to_number(3.5) == 3.5
    assert to_number("19.9") == 19.9
    assert to_number(" 4,012 ") == 4012.0


def test_to_number_rejects_garbage():
    assert to_number(None) is None
    assert to_number("") is None
    assert to_number("--") is None
    assert to_number(True) is None
    assert to_number({"value": 1}) is None
    assert to_number(math.nan) is None
    assert to_number("inf") is None


def test_round_one_rounds_half_up():
    assert round_one(19.95) == 20.0
    assert round_one(0.25) == 0.3
    assert round_one(19.647) == 19.6


def test_per_game_average():
    assert per_game(340, 17) == 20.0
    assert per_game(334, 17) == 19.6
    assert per_game(100, 0) == 0.0


def test_to_number_rejects_integers_too_large_for_float():
    assert to_number(10**400) is None
    assert to_number(str(10**400)) is None


def test_round_one_keeps_large_finite_values():
    assert round_one(1e30) == 1e30
    assert round_one(1.7e308) == 1.7e308


def test_round_one_non_finite_is_zero():
    assert round_one(math.inf) == 0.0
