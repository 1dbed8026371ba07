"""Match data model: configuration, players and the live match state.

These are plain containers. Behavior lives in the sibling modules; the only
methods here copy values and serialize them for broadcasting.
"""

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class MatchStatus(str, Enum):
    SETUP = 'SETUP'
    PLAYING = 'PLAYING'
    MATCH_FINISHED = 'MATCH_FINISHED'


class PlayerStatus(str, Enum):
    NONE = ''
    BUST = 'BUST'
    GAME_SHOT = 'GAME SHOT'


SCORE_BANDS = (180, 140, 120, 100, 80, 60, 40, 20, 0)

DEFAULT_START_SCORE = 501
DEFAULT_LEGS_INPUT = 3
DEFAULT_BOT_CHECKOUT_CHANCE = 40


def _to_int(value, default: int, low: int, high: int) -> int:
    """Parse an int from wire input, falling back to ``default`` and clamping."""
    if isinstance(value, bool):
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return max(low, min(high, number))


def _to_user_id(value) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class MatchConfig:
    start_score: int = DEFAULT_START_SCORE
    legs_input: int = DEFAULT_LEGS_INPUT
    bot_level: int = 0
    bot_checkout_chance: int = DEFAULT_BOT_CHECKOUT_CHANCE
    starter: int = 0
    names: Tuple[str, str] = ('Player 1', 'Player 2')
    user_ids: Tuple[Optional[int], Optional[int]] = (None, None)

    @property
    def legs_to_win_target(self) -> int:
        return math.ceil(self.legs_input / 2)

    @property
    def has_bot(self) -> bool:
        return self.bot_level > 0

    @classmethod
    def parse(cls, raw: Optional[Dict[str, Any]]) -> 'MatchConfig':
        """Build a config from a client payload.

        Missing or non-numeric values take their defaults; out-of-range values
        are clamped. This is the only place client config is validated.
        """
        raw = raw if isinstance(raw, dict) else {}
        legs_value = raw.get('legsInput', raw.get('legs'))
        bot_level = _to_int(raw.get('botLevel'), 0, 0, 150)

        players = raw.get('players')
        if not isinstance(players, list):
            players = []
        entries = [p if isinstance(p, dict) else {} for p in players[:2]]
        while len(entries) < 2:
            entries.append({})

        names = []
        for idx, entry in enumerate(entries):
            name = entry.get('name')
            name = name.strip() if isinstance(name, str) else ''
            if not name:
                if idx == 1 and bot_level > 0:
                    name = f'BOT ({bot_level})'
                else:
                    name = f'Player {idx + 1}'
            names.append(name[:64])

        user_ids = [_to_user_id(entry.get('userId')) for entry in entries]
        if bot_level > 0:
            # The bot never maps onto a stored user
            user_ids[1] = None

        return cls(
            start_score=_to_int(raw.get('startScore'), DEFAULT_START_SCORE, 101, 1001),
            legs_input=_to_int(legs_value, DEFAULT_LEGS_INPUT, 1, 99),
            bot_level=bot_level,
            bot_checkout_chance=_to_int(raw.get('botCheckoutChance'), DEFAULT_BOT_CHECKOUT_CHANCE, 0, 100),
            starter=_to_int(raw.get('starter'), 0, 0, 1),
            names=(names[0], names[1]),
            user_ids=(user_ids[0], user_ids[1]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'start_score': self.start_score,
            'legs_input': self.legs_input,
            'legs_to_win': self.legs_to_win_target,
            'bot_level': self.bot_level,
            'bot_checkout_chance': self.bot_checkout_chance,
            'starter': self.starter,
        }


@dataclass
class MatchStats:
    score_0: int = 0
    score_20: int = 0
    score_40: int = 0
    score_60: int = 0
    score_80: int = 0
    score_100: int = 0
    score_120: int = 0
    score_140: int = 0
    score_180: int = 0
    doubles_thrown: int = 0
    doubles_hit: int = 0
    first9_sum: int = 0
    first9_darts: int = 0
    scoring_sum: int = 0
    scoring_darts: int = 0
    best_leg: Optional[int] = None
    highest_checkout: int = 0
    high_turn: int = 0
    heatmap: Dict[str, int] = field(default_factory=dict)

    def copy(self) -> 'MatchStats':
        return replace(self, heatmap=dict(self.heatmap))

    def to_dict(self) -> Dict[str, Any]:
        data = {f'score_{band}': getattr(self, f'score_{band}') for band in SCORE_BANDS}
        data.update({
            'doubles_thrown': self.doubles_thrown,
            'doubles_hit': self.doubles_hit,
            'first9_sum': self.first9_sum,
            'first9_darts': self.first9_darts,
            'scoring_sum': self.scoring_sum,
            'scoring_darts': self.scoring_darts,
            'best_leg': self.best_leg,
            'highest_checkout': self.highest_checkout,
            'high_turn': self.high_turn,
            'heatmap': dict(self.heatmap),
        })
        return data


@dataclass
class Player:
    id: int
    name: str
    score: int
    user_id: Optional[int] = None
    is_bot: bool = False
    darts_thrown: int = 0
    total_score: int = 0
    status: PlayerStatus = PlayerStatus.NONE
    last_score: Optional[int] = None
    avg: float = 0.0
    first9_avg: float = 0.0
    scoring_avg: float = 0.0
    checkout_percent: float = 0.0
    stats: MatchStats = field(default_factory=MatchStats)

    def copy(self) -> 'Player':
        return replace(self, stats=self.stats.copy())

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'user_id': self.user_id,
            'score': self.score,
            'is_bot': self.is_bot,
            'darts_thrown': self.darts_thrown,
            'total_score': self.total_score,
            'status': self.status.value,
            'last_score': self.last_score,
            'avg': self.avg,
            'first9_avg': self.first9_avg,
            'scoring_avg': self.scoring_avg,
            'checkout_percent': self.checkout_percent,
            'stats': self.stats.to_dict(),
        }


@dataclass(frozen=True)
class TimelineEntry:
    turn: int
    player_id: int
    is_bot: bool
    avg: float
    scoring_avg: float
    points: int
    result: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'turn': self.turn,
            'player_id': self.player_id,
            'is_bot': self.is_bot,
            'avg': self.avg,
            'scoring_avg': self.scoring_avg,
            'points': self.points,
            'result': self.result,
        }


@dataclass
class MatchState:
    config: MatchConfig = field(default_factory=MatchConfig)
    status: MatchStatus = MatchStatus.SETUP
    players: List[Player] = field(default_factory=list)
    legs: List[int] = field(default_factory=lambda: [0, 0])
    current_turn: int = 0
    starter: int = 0
    leg_darts: List[int] = field(default_factory=lambda: [0, 0])
    timeline: List[TimelineEntry] = field(default_factory=list)
    winner: Optional[str] = None

    @property
    def current_player(self) -> Optional[Player]:
        if not self.players:
            return None
        return self.players[self.current_turn]

    @property
    def bot_slot(self) -> Optional[int]:
        for player in self.players:
            if player.is_bot:
                return player.id
        return None

    def copy(self) -> 'MatchState':
        """Value copy. Config and timeline entries are immutable and shared."""
        return replace(
            self,
            players=[p.copy() for p in self.players],
            legs=list(self.legs),
            leg_darts=list(self.leg_darts),
            timeline=list(self.timeline),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'status': self.status.value,
            'config': self.config.to_dict(),
            'players': [p.to_dict() for p in self.players],
            'legs': list(self.legs),
            'turn': self.current_turn,
            'starter': self.starter,
            'leg_darts': list(self.leg_darts),
            'timeline': [e.to_dict() for e in self.timeline],
            'winner': self.winner,
        }
