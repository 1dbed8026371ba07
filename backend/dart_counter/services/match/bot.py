"""Simulated opponent.

The bot throws whole turns: a score drawn around its skill level, plus a
separate roll deciding whether a finishing turn actually lands.
"""

import math
import random
from dataclasses import dataclass

from .checkout import is_finishable, min_darts_to_finish

# On 40 or less the bot goes for the finish with probability skill / this
FINISH_ATTEMPT_DENOMINATOR = 150


@dataclass(frozen=True)
class BotThrow:
    points: int
    doubles_missed: int = 0
    finish_darts: int = 3


def generate_bot_score(skill: int, current: int, rng: random.Random) -> int:
    if current <= 40:
        if rng.random() < skill / FINISH_ATTEMPT_DENOMINATOR:
            return current
        if current <= 2:
            return 0
        return int(math.floor(rng.random() * (current - 2)))

    variance = 25 - skill / 5
    points = int(math.floor(skill + rng.random() * variance * 2 - variance))
    points = max(0, min(180, points))
    remaining = current - points
    if remaining == 1 or remaining < 0 or (remaining == 0 and not is_finishable(current)):
        points = max(0, current - 40)
    return points


def decide_bot_throw(skill: int, checkout_chance: int, current: int, rng: random.Random) -> BotThrow:
    points = generate_bot_score(skill, current, rng)
    if points != current:
        return BotThrow(points=points)

    if rng.random() * 100 < checkout_chance:
        finish_darts = rng.randint(min_darts_to_finish(current), 3)
        return BotThrow(points=points, doubles_missed=finish_darts - 1, finish_darts=finish_darts)

    # Missed all three at the double: either nothing scored or a safe split
    if current > 3 and rng.random() < 0.5:
        points = rng.randint(1, current - 2)
    else:
        points = 0
    return BotThrow(points=points, doubles_missed=3, finish_darts=3)
