"""Running per-player statistics for the live match."""

from .state import SCORE_BANDS, Player


def score_band(points: int) -> int:
    """Return the band a turn score falls in. Bands are exclusive; 180 is exact."""
    if points == 180:
        return 180
    for band in SCORE_BANDS[1:]:
        if points >= band:
            return band
    return 0


def record_score(player: Player, points: int, darts: int, is_checkout: bool = False, miss_count: int = 0) -> None:
    stats = player.stats
    player.total_score += points
    player.darts_thrown += darts
    player.last_score = points
    # Pure scoring throws only: no finish attempt was missed and it was not the finish
    if not is_checkout and miss_count == 0:
        stats.scoring_sum += points
        stats.scoring_darts += darts
    band = score_band(points)
    attr = f'score_{band}'
    setattr(stats, attr, getattr(stats, attr) + 1)


def record_bust(player: Player, darts: int) -> None:
    player.darts_thrown += darts


def _three_dart(points: int, darts: int) -> float:
    return round(points / darts * 3, 2)


def recalc_averages(player: Player, default_checkout_percent: float = 0.0) -> None:
    stats = player.stats
    player.avg = _three_dart(player.total_score, player.darts_thrown) if player.darts_thrown > 0 else 0.0
    player.first9_avg = _three_dart(stats.first9_sum, stats.first9_darts) if stats.first9_darts > 0 else 0.0
    if stats.scoring_darts > 0:
        player.scoring_avg = _three_dart(stats.scoring_sum, stats.scoring_darts)
    else:
        player.scoring_avg = player.avg
    if stats.doubles_thrown > 0:
        player.checkout_percent = round(stats.doubles_hit / stats.doubles_thrown * 100, 2)
    else:
        player.checkout_percent = default_checkout_percent
