import pytest

from dart_counter.services.match.state import Player
from dart_counter.services.match.stats import recalc_averages, record_bust, record_score, score_band


@pytest.mark.parametrize('points, band', [
    (180, 180), (179, 140), (140, 140), (139, 120), (120, 120), (100, 100),
    (99, 80), (80, 80), (60, 60), (45, 40), (26, 20), (19, 0), (0, 0),
])
def test_score_band(points, band):
    assert score_band(points) == band


def test_record_score_increments_exactly_one_band():
    player = Player(id=0, name='Ann', score=501)
    record_score(player, 140, darts=3)
    bands = {k: v for k, v in player.stats.to_dict().items() if k.startswith('score_')}
    assert bands['score_140'] == 1
    assert sum(bands.values()) == 1


def test_checkouts_and_missed_finishes_are_not_pure_scoring():
    player = Player(id=0, name='Ann', score=501)
    record_score(player, 60, darts=3)
    record_score(player, 20, darts=3, miss_count=1)
    record_score(player, 40, darts=1, is_checkout=True)
    assert player.total_score == 120
    assert player.darts_thrown == 7
    assert player.stats.scoring_sum == 60
    assert player.stats.scoring_darts == 3


def test_recalc_averages():
    player = Player(id=0, name='Ann', score=501)
    record_score(player, 100, darts=3)
    record_bust(player, 3)
    player.stats.doubles_thrown = 4
    player.stats.doubles_hit = 1
    recalc_averages(player)
    assert player.avg == 50.0
    assert player.scoring_avg == 100.0
    assert player.checkout_percent == 25.0


def test_scoring_average_falls_back_to_average():
    player = Player(id=0, name='Ann', score=501)
    record_score(player, 40, darts=2, is_checkout=True)
    recalc_averages(player, default_checkout_percent=12.5)
    assert player.avg == 60.0
    assert player.scoring_avg == 60.0
    assert player.first9_avg == 0.0
    assert player.checkout_percent == 12.5


def test_averages_with_no_darts():
    player = Player(id=0, name='Ann', score=501)
    recalc_averages(player)
    assert player.avg == 0.0
    assert player.scoring_avg == 0.0
