import random

import pytest

from dart_counter.services.match.bot import BotThrow, decide_bot_throw, generate_bot_score


class ScriptedRandom:
    """Returns queued values from random() and randint() in order."""

    def __init__(self, values=(), ints=()):
        self.values = list(values)
        self.ints = list(ints)

    def random(self):
        return self.values.pop(0)

    def randint(self, low, high):
        value = self.ints.pop(0)
        assert low <= value <= high
        return value


@pytest.mark.parametrize('skill', [1, 30, 60, 100, 150])
def test_bot_scores_stay_in_range_and_never_leave_one(skill):
    rng = random.Random(skill)
    for current in list(range(2, 200)) + [301, 501]:
        for _ in range(20):
            points = generate_bot_score(skill, current, rng)
            assert 0 <= points <= 180
            remaining = current - points
            assert remaining != 1
            assert remaining >= 0


def test_finish_attempt_on_low_score():
    rng = ScriptedRandom(values=[0.1])
    assert generate_bot_score(60, 32, rng) == 32


def test_low_score_without_attempt_stays_safe():
    rng = ScriptedRandom(values=[0.9, 0.5])
    assert generate_bot_score(60, 32, rng) == 15


def test_score_centered_on_skill():
    # variance = 25 - 60 / 5 = 13; 60 + 0.5 * 26 - 13 = 60
    rng = ScriptedRandom(values=[0.5])
    assert generate_bot_score(60, 501, rng) == 60


def test_dead_score_replaced_with_safe_score():
    # 60 would leave 1, so the bot lays up to 40
    rng = ScriptedRandom(values=[0.5])
    assert generate_bot_score(60, 61, rng) == 21


def test_exact_finish_kept_on_finishable_score():
    # variance = 25 - 150 / 5 = -5; 150 + 0.0 * -10 + 5 = 155
    rng = ScriptedRandom(values=[0.0])
    assert generate_bot_score(150, 155, rng) == 155


def test_checkout_success():
    rng = ScriptedRandom(values=[0.1, 0.2], ints=[2])
    throw = decide_bot_throw(60, 50, 32, rng)
    assert throw == BotThrow(points=32, doubles_missed=1, finish_darts=2)


def test_checkout_failure_misses_all_darts():
    rng = ScriptedRandom(values=[0.1, 0.9, 0.9])
    throw = decide_bot_throw(60, 50, 32, rng)
    assert throw == BotThrow(points=0, doubles_missed=3, finish_darts=3)


def test_checkout_failure_can_leave_a_split():
    rng = ScriptedRandom(values=[0.1, 0.9, 0.2], ints=[16])
    throw = decide_bot_throw(60, 50, 32, rng)
    assert throw == BotThrow(points=16, doubles_missed=3, finish_darts=3)


def test_regular_turn_has_no_missed_doubles():
    rng = ScriptedRandom(values=[0.5])
    assert decide_bot_throw(60, 50, 501, rng) == BotThrow(points=60)
