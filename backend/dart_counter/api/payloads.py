"""Parsing of client command payloads shared by the HTTP and Socket.IO transports."""

import re
from typing import Any, Dict

_INT_RE = re.compile(r'^[+-]?\d+$')


def coerce_int(value, default=None):
    """Turn wire values like ``60``, ``"60"`` or ``60.0`` into ints.

    Anything else comes back unchanged (or as ``default`` when given) so the
    game rules can reject it.
    """
    if isinstance(value, bool):
        return value if default is None else default
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and _INT_RE.match(value.strip()):
        return int(value.strip())
    return value if default is None else default


def parse_throw(data) -> Dict[str, Any]:
    """Accept either a bare score or ``{points, doublesMissed, finishDarts, segments}``."""
    if not isinstance(data, dict):
        return {'points': coerce_int(data), 'doubles_missed': 0, 'finish_darts': 3, 'segments': None}
    segments = data.get('segments')
    if isinstance(segments, list):
        segments = [str(s) for s in segments if isinstance(s, (str, int))]
    else:
        segments = None
    return {
        'points': coerce_int(data.get('points')),
        'doubles_missed': coerce_int(data.get('doublesMissed', 0), default=0),
        'finish_darts': coerce_int(data.get('finishDarts', 3), default=3),
        'segments': segments,
    }
