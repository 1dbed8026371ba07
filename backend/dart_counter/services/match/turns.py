"""Turn processing: one thrown turn from validation to handoff.

TurnProcessor mutates the MatchState it is handed and reports what happened
through a listener, which owns the side effects (broadcasts, persistence,
scheduling the next leg and the bot reply).
"""

import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

from . import stats as aggregator
from .checkout import BOGEY_NUMBERS, MAX_CHECKOUT, is_valid_checkout, min_darts_to_finish, normalize_segment
from .history import SnapshotHistory
from .state import MatchState, MatchStatus, Player, PlayerStatus, TimelineEntry

OUTCOME_SCORE = 'score'
OUTCOME_BUST = 'bust'
OUTCOME_GAMESHOT = 'gameshot'

FIRST_NINE = 9


@dataclass(frozen=True)
class TurnOutcome:
    kind: str
    player_id: int
    points: int

    def to_dict(self):
        return {'type': self.kind, 'points': self.points, 'player_id': self.player_id}


class TurnListener(Protocol):
    def on_outcome(self, state: MatchState, outcome: TurnOutcome) -> None: ...

    def on_leg_won(self, state: MatchState, player: Player) -> None: ...

    def on_match_won(self, state: MatchState, player: Player) -> None: ...

    def on_turn_passed(self, state: MatchState) -> None: ...


def is_valid_points(points) -> bool:
    return isinstance(points, int) and not isinstance(points, bool) and 0 <= points <= 180


def _clamp_int(value, default: int, low: int, high: int) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        return default
    return max(low, min(high, value))


class TurnProcessor:
    def __init__(
        self,
        history: SnapshotHistory,
        listener: TurnListener,
        logger: Optional[logging.Logger] = None,
        bust_counts_double_attempts: bool = True,
        default_checkout_percent: float = 0.0,
    ):
        self.history = history
        self.listener = listener
        self.logger = logger or logging.getLogger(__name__)
        self.bust_counts_double_attempts = bust_counts_double_attempts
        self.default_checkout_percent = default_checkout_percent

    def process_throw(
        self,
        state: MatchState,
        points,
        doubles_missed=0,
        finish_darts_used=3,
        segments: Optional[Sequence[str]] = None,
    ) -> Optional[TurnOutcome]:
        """Apply one turn for the player at ``state.current_turn``.

        Invalid input and throws outside PLAYING are ignored and return None
        without touching the state.
        """
        if state.status != MatchStatus.PLAYING or not is_valid_points(points):
            return None
        player = state.players[state.current_turn]
        if player.status == PlayerStatus.GAME_SHOT:
            # Leg already won, waiting for the next one to start
            return None

        doubles_missed = _clamp_int(doubles_missed, 0, 0, 3)
        finish_darts_used = _clamp_int(finish_darts_used, 3, 1, 3)
        segments = [normalize_segment(s) for s in segments] if segments else []

        self.history.push(state)

        idx = state.current_turn
        stats = player.stats
        player.status = PlayerStatus.NONE

        score_before = player.score
        new_score = score_before - points
        darts = finish_darts_used if new_score <= 1 else 3

        if points > stats.high_turn:
            stats.high_turn = points
        for seg in segments:
            stats.heatmap[seg] = stats.heatmap.get(seg, 0) + 1

        # Full-turn policy: a turn starting inside the first nine darts counts whole
        if state.leg_darts[idx] < FIRST_NINE:
            stats.first9_sum += points
            stats.first9_darts += darts

        state.leg_darts[idx] += darts

        if new_score == 0 and is_valid_checkout(segments):
            outcome = self._checkout(state, player, points, score_before, finish_darts_used)
        elif new_score <= 1:
            outcome = self._bust(state, player, points, score_before, darts)
        else:
            outcome = self._score(state, player, points, new_score, doubles_missed)

        self.listener.on_outcome(state, outcome)
        if outcome.kind == OUTCOME_GAMESHOT:
            self._close_leg(state, player)
        elif state.status == MatchStatus.PLAYING:
            self.listener.on_turn_passed(state)
        return outcome

    def _checkout(self, state: MatchState, player: Player, points: int, score_before: int, finish_darts: int) -> TurnOutcome:
        stats = player.stats
        player.score = 0
        player.status = PlayerStatus.GAME_SHOT

        misses = max(0, finish_darts - min_darts_to_finish(score_before))
        stats.doubles_hit += 1
        stats.doubles_thrown += misses + 1
        stats.highest_checkout = max(stats.highest_checkout, points)
        leg_darts = state.leg_darts[player.id]
        if stats.best_leg is None or leg_darts < stats.best_leg:
            stats.best_leg = leg_darts

        aggregator.record_score(player, points, darts=finish_darts, is_checkout=True)
        aggregator.recalc_averages(player, self.default_checkout_percent)
        self._append_timeline(state, player, points, OUTCOME_GAMESHOT)
        state.legs[player.id] += 1
        self.logger.info(
            f"[gameshot] player={player.id} checkout={points} darts={finish_darts} leg_darts={leg_darts} legs={state.legs}"
        )
        return TurnOutcome(OUTCOME_GAMESHOT, player.id, points)

    def _bust(self, state: MatchState, player: Player, points: int, score_before: int, darts: int) -> TurnOutcome:
        player.status = PlayerStatus.BUST
        if self.bust_counts_double_attempts and score_before <= MAX_CHECKOUT and score_before not in BOGEY_NUMBERS:
            # Assume the player was going for the finish
            player.stats.doubles_thrown += darts
        aggregator.record_bust(player, darts)
        aggregator.recalc_averages(player, self.default_checkout_percent)
        self._append_timeline(state, player, 0, OUTCOME_BUST)
        self.logger.info(f"[bust] player={player.id} points={points} score={score_before}")
        self._pass_turn(state)
        return TurnOutcome(OUTCOME_BUST, player.id, points)

    def _score(self, state: MatchState, player: Player, points: int, new_score: int, doubles_missed: int) -> TurnOutcome:
        player.score = new_score
        if doubles_missed > 0:
            player.stats.doubles_thrown += doubles_missed
        aggregator.record_score(player, points, darts=3, is_checkout=False, miss_count=doubles_missed)
        aggregator.recalc_averages(player, self.default_checkout_percent)
        self._append_timeline(state, player, points, OUTCOME_SCORE)
        self._pass_turn(state)
        return TurnOutcome(OUTCOME_SCORE, player.id, points)

    def _close_leg(self, state: MatchState, player: Player) -> None:
        if state.legs[player.id] >= state.config.legs_to_win_target:
            state.status = MatchStatus.MATCH_FINISHED
            state.winner = player.name
            self.logger.info(f"[match-finished] winner={player.name} legs={state.legs}")
            self.listener.on_match_won(state, player)
            return
        state.starter = 1 - state.starter
        self.listener.on_leg_won(state, player)

    @staticmethod
    def _pass_turn(state: MatchState) -> None:
        state.current_turn = 1 - state.current_turn

    @staticmethod
    def _append_timeline(state: MatchState, player: Player, points: int, result: str) -> None:
        state.timeline.append(TimelineEntry(
            turn=len(state.timeline) + 1,
            player_id=player.id,
            is_bot=player.is_bot,
            avg=player.avg,
            scoring_avg=player.scoring_avg,
            points=points,
            result=result,
        ))
