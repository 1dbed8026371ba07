from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from dart_counter.services.match.state import SCORE_BANDS

WINDOW_FILTERS = ('all', 'today', 'week', 'month')
WINDOW_DAYS = {'week': 7, 'month': 30}
TREND_LENGTH = 30

Record = Dict[str, Any]


def parse_filter(value) -> Union[str, int]:
    """Return a window name or a match id. Raises ValueError for anything else."""
    if value is None or value == '':
        return 'all'
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in WINDOW_FILTERS:
        return text
    try:
        return int(text)
    except ValueError:
        raise ValueError(f"unknown filter {value!r}")


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _as_datetime(value) -> Optional[datetime]:
    if isinstance(value, datetime):
        return _naive_utc(value)
    if isinstance(value, str):
        try:
            return _naive_utc(datetime.fromisoformat(value))
        except ValueError:
            return None
    return None


def _start_of_day(value: datetime) -> datetime:
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def window_start(name: str, now: datetime) -> Optional[datetime]:
    now = _naive_utc(now)
    if name == 'today':
        return _start_of_day(now)
    if name in WINDOW_DAYS:
        return _start_of_day(now - timedelta(days=WINDOW_DAYS[name]))
    return None


def _split_players(record: Record, user_id: int) -> Optional[Tuple[Dict[str, Any], Optional[Dict[str, Any]]]]:
    players = record.get('players') or []
    me = next((p for p in players if p.get('user_id') == user_id), None)
    if me is None:
        return None
    opponent = next((p for p in players if p is not me), None)
    return me, opponent


def _points(player: Dict[str, Any]) -> float:
    if player.get('total_score') is not None:
        return float(player['total_score'])
    return float(player.get('avg') or 0) * (player.get('darts_thrown') or 0) / 3


def _rate(points: float, darts: int) -> float:
    return round(points / darts * 3, 2) if darts > 0 else 0.0


def _percent(part: int, whole: int) -> float:
    return round(part / whole * 100, 2) if whole > 0 else 0.0


def _result(record: Record, me: Dict[str, Any]) -> str:
    return 'win' if record.get('winner_id') == me.get('id') else 'loss'


def _distribution(stats_list: Iterable[Dict[str, Any]]) -> Dict[str, int]:
    totals = {f'score_{band}': 0 for band in SCORE_BANDS}
    for stats in stats_list:
        for key in totals:
            totals[key] += int(stats.get(key) or 0)
    return totals


def _averages(player: Dict[str, Any]) -> Dict[str, Any]:
    return {
        'avg': player.get('avg', 0.0),
        'first9_avg': player.get('first9_avg', 0.0),
        'scoring_avg': player.get('scoring_avg', 0.0),
        'darts_thrown': player.get('darts_thrown', 0),
    }


def match_detail(records: Iterable[Record], user_id: int, match_id: int) -> Optional[Dict[str, Any]]:
    record = next((r for r in records if r.get('id') == match_id), None)
    if record is None:
        return None
    split = _split_players(record, user_id)
    if split is None:
        return None
    me, opponent = split
    stats = me.get('stats') or {}

    timeline = record.get('timeline') or []
    mine = [e for e in timeline if e.get('player_id') == me.get('id')]
    theirs = [e for e in timeline if opponent is not None and e.get('player_id') == opponent.get('id')]
    aligned = []
    for idx in range(max(len(mine), len(theirs))):
        aligned.append({
            'turn': idx + 1,
            'player': mine[idx] if idx < len(mine) else None,
            'opponent': theirs[idx] if idx < len(theirs) else None,
        })

    scored = [e.get('points', 0) for e in mine if e.get('result') != 'bust']
    hits = int(stats.get('doubles_hit') or 0)
    thrown = int(stats.get('doubles_thrown') or 0)
    return {
        'match_id': record.get('id'),
        'date': record.get('date'),
        'score_str': record.get('score_str'),
        'result': _result(record, me),
        'opponent': opponent.get('name') if opponent else None,
        'averages': _averages(me),
        'opponent_averages': _averages(opponent) if opponent else None,
        'timeline': aligned,
        'distribution': _distribution([stats]),
        'checkout': {'hits': hits, 'thrown': thrown, 'percent': _percent(hits, thrown)},
        'best': {
            'high_turn': stats.get('high_turn', 0),
            'highest_checkout': stats.get('highest_checkout', 0),
            'best_leg': stats.get('best_leg'),
        },
        'worst': {
            'lowest_turn': min(scored) if scored else None,
            'busts': sum(1 for e in mine if e.get('result') == 'bust'),
        },
        'heatmap': dict(stats.get('heatmap') or {}),
    }


def summarize(records: Iterable[Record], user_id: int, since: Optional[datetime] = None) -> Dict[str, Any]:
    rows: List[Tuple[datetime, Record, Dict[str, Any]]] = []
    for record in records:
        split = _split_players(record, user_id)
        if split is None:
            continue
        date = _as_datetime(record.get('date'))
        if date is None:
            continue
        if since is not None and date < since:
            continue
        rows.append((date, record, split[0]))
    rows.sort(key=lambda row: (row[0], row[1].get('id') or 0))

    points = darts = 0
    first9_sum = first9_darts = scoring_sum = scoring_darts = 0
    hits = thrown = wins = 0
    heatmap: Dict[str, int] = {}
    best_leg = None
    highest_checkout = high_turn = 0
    for _, record, me in rows:
        stats = me.get('stats') or {}
        points += _points(me)
        darts += int(me.get('darts_thrown') or 0)
        first9_sum += int(stats.get('first9_sum') or 0)
        first9_darts += int(stats.get('first9_darts') or 0)
        scoring_sum += int(stats.get('scoring_sum') or 0)
        scoring_darts += int(stats.get('scoring_darts') or 0)
        hits += int(stats.get('doubles_hit') or 0)
        thrown += int(stats.get('doubles_thrown') or 0)
        if _result(record, me) == 'win':
            wins += 1
        for seg, count in (stats.get('heatmap') or {}).items():
            heatmap[seg] = heatmap.get(seg, 0) + int(count)
        leg = stats.get('best_leg')
        if leg is not None and (best_leg is None or leg < best_leg):
            best_leg = leg
        highest_checkout = max(highest_checkout, int(stats.get('highest_checkout') or 0))
        high_turn = max(high_turn, int(stats.get('high_turn') or 0))

    matches = len(rows)
    avg = _rate(points, darts)
    trend = [
        {
            'match_id': record.get('id'),
            'date': date.isoformat(),
            'avg': me.get('avg', 0.0),
            'result': _result(record, me),
        }
        for date, record, me in rows[-TREND_LENGTH:]
    ]
    return {
        'matches': matches,
        'wins': wins,
        'losses': matches - wins,
        'win_rate': _percent(wins, matches),
        'avg': avg,
        'first9_avg': _rate(first9_sum, first9_darts),
        'scoring_avg': _rate(scoring_sum, scoring_darts) if scoring_darts else avg,
        'darts_thrown': darts,
        'checkout': {'hits': hits, 'thrown': thrown, 'percent': _percent(hits, thrown)},
        'distribution': _distribution((me.get('stats') or {}) for _, _, me in rows),
        'trend': trend,
        'heatmap': heatmap,
        'best_leg': best_leg,
        'highest_checkout': highest_checkout,
        'high_turn': high_turn,
    }


def query_user(records: Iterable[Record], user_id: int, filter='all', now: Optional[datetime] = None) -> Optional[Dict[str, Any]]:
    """Statistics for one user: a single match by id, or a time window summary."""
    selected = parse_filter(filter)
    records = list(records)
    if isinstance(selected, int):
        return match_detail(records, user_id, selected)
    if now is None:
        now = datetime.now(timezone.utc)
    summary = summarize(records, user_id, window_start(selected, now))
    summary['filter'] = selected
    return summary
