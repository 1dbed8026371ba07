import logging
import random
import threading
from typing import Any, Callable, Dict, List, Optional, Sequence

from . import legs
from .bot import decide_bot_throw
from .history import DEFAULT_HISTORY_LIMIT, SnapshotHistory
from .scheduler import TaskHandle
from .state import MatchConfig, MatchState, MatchStatus, Player, PlayerStatus
from .turns import TurnOutcome, TurnProcessor

Notify = Callable[[str, Dict[str, Any]], None]


class MatchSession:
    """The one live match: state, undo history, deferred tasks and side effects.

    Every command runs under a single lock and cancels outstanding deferred
    tasks before touching the state out of band, so a stale bot throw or leg
    advance can never land on a superseded state.
    """

    def __init__(
        self,
        scheduler,
        notify: Notify,
        store=None,
        logger: Optional[logging.Logger] = None,
        rng: Optional[random.Random] = None,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
        leg_advance_delay: float = 4.0,
        bot_delay: float = 1.5,
        bot_delay_jitter: float = 0.5,
        bust_counts_double_attempts: bool = True,
        default_checkout_percent: float = 0.0,
    ):
        self.scheduler = scheduler
        self.notify = notify
        self.store = store
        self.logger = logger or logging.getLogger(__name__)
        self.rng = rng or random.Random()
        self.leg_advance_delay = leg_advance_delay
        self.bot_delay = bot_delay
        self.bot_delay_jitter = bot_delay_jitter
        self.state = MatchState()
        self.history = SnapshotHistory(history_limit)
        self.processor = TurnProcessor(
            self.history,
            self,
            logger=self.logger,
            bust_counts_double_attempts=bust_counts_double_attempts,
            default_checkout_percent=default_checkout_percent,
        )
        self._lock = threading.RLock()
        self._tasks: List[TaskHandle] = []

    @classmethod
    def from_app(cls, app, scheduler, notify: Notify, store=None) -> 'MatchSession':
        cfg = app.config
        return cls(
            scheduler,
            notify,
            store=store,
            logger=app.logger,
            history_limit=int(cfg.get('HISTORY_LIMIT', DEFAULT_HISTORY_LIMIT)),
            leg_advance_delay=float(cfg.get('LEG_ADVANCE_DELAY_SEC', 4)),
            bot_delay=float(cfg.get('BOT_DELAY_SEC', 1.5)),
            bot_delay_jitter=float(cfg.get('BOT_DELAY_JITTER_SEC', 0.5)),
            bust_counts_double_attempts=bool(cfg.get('BUST_COUNTS_DOUBLE_ATTEMPTS', True)),
            default_checkout_percent=float(cfg.get('DEFAULT_CHECKOUT_PERCENT', 0.0)),
        )

    # ---- Commands ----

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return self.state.to_dict()

    def start_match(self, raw_config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        with self._lock:
            self._cancel_tasks()
            self.history.clear()
            config = MatchConfig.parse(raw_config)
            state = MatchState()
            legs.start_match(state, config)
            self.state = state
            self.logger.info(
                f"[match-start] start_score={config.start_score} legs_to_win={config.legs_to_win_target} "
                f"bot_level={config.bot_level} starter={config.starter}"
            )
            self._broadcast()
            self._check_bot()
            return self.state.to_dict()

    def throw(
        self,
        points,
        doubles_missed=0,
        finish_darts=3,
        segments: Optional[Sequence[str]] = None,
        from_bot: bool = False,
    ) -> Optional[TurnOutcome]:
        """Submit a turn for the player to throw. Returns None when the throw was rejected."""
        with self._lock:
            player = self.state.current_player
            if self.state.status != MatchStatus.PLAYING or player is None:
                self.logger.debug(f"[throw-rejected] status={self.state.status.value}")
                return None
            if player.is_bot and not from_bot:
                self.logger.debug(f"[throw-rejected] player={player.id} is the bot")
                return None
            outcome = self.processor.process_throw(
                self.state,
                points,
                doubles_missed=doubles_missed,
                finish_darts_used=finish_darts,
                segments=segments,
            )
            if outcome is None:
                self.logger.debug(f"[throw-rejected] points={points!r}")
                return None
            self.logger.info(f"[throw] player={outcome.player_id} points={outcome.points} result={outcome.kind}")
            self._broadcast()
            return outcome

    def undo(self) -> bool:
        with self._lock:
            # A finished match is already recorded; replaying its last turn would record it twice
            if self.state.status == MatchStatus.MATCH_FINISHED:
                self.logger.debug("[undo-rejected] match finished")
                return False
            self._cancel_tasks()
            restored = self.history.undo(bot_slot=self.state.bot_slot)
            if restored is None:
                return False
            self.state = restored
            self.logger.info(f"[undo] turn={restored.current_turn} depth={len(self.history)}")
            self._broadcast()
            self._check_bot()
            return True

    def reset(self) -> Dict[str, Any]:
        with self._lock:
            self._cancel_tasks()
            self.state.status = MatchStatus.SETUP
            self.logger.info("[reset] back to setup")
            self._broadcast()
            return self.state.to_dict()

    def abort_match(self) -> Dict[str, Any]:
        with self._lock:
            self._cancel_tasks()
            self.history.clear()
            self.state = MatchState(config=self.state.config)
            self.logger.info("[abort] match discarded")
            self._broadcast()
            return self.state.to_dict()

    # ---- TurnProcessor listener ----

    def on_outcome(self, state: MatchState, outcome: TurnOutcome) -> None:
        self.notify('turn_outcome', outcome.to_dict())

    def on_leg_won(self, state: MatchState, player: Player) -> None:
        self._schedule('leg-advance', self.leg_advance_delay, self._advance_leg, state, tuple(state.legs))

    def on_match_won(self, state: MatchState, player: Player) -> None:
        self.history.clear()
        if self.store is not None:
            self.store.save_match(state, player.id)

    def on_turn_passed(self, state: MatchState) -> None:
        self._check_bot()

    # ---- Deferred tasks ----

    def _schedule(self, name: str, delay: float, fn: Callable, *args) -> TaskHandle:
        self._tasks = [t for t in self._tasks if t.active]
        handle = self.scheduler.schedule(name, delay, fn, *args)
        self._tasks.append(handle)
        return handle

    def _cancel_tasks(self) -> None:
        for handle in self._tasks:
            handle.cancel()
        self._tasks = []

    def _check_bot(self) -> None:
        state = self.state
        player = state.current_player
        if state.status != MatchStatus.PLAYING or player is None or not player.is_bot:
            return
        if player.status == PlayerStatus.GAME_SHOT:
            return
        delay = self.bot_delay + self.rng.random() * self.bot_delay_jitter
        self._schedule('bot-throw', delay, self._bot_turn, state, len(state.timeline))

    def _bot_turn(self, expected_state: MatchState, expected_turns: int) -> None:
        with self._lock:
            state = self.state
            if state is not expected_state or len(state.timeline) != expected_turns:
                self.logger.info("[timer-abort] bot-throw state changed")
                return
            player = state.current_player
            if state.status != MatchStatus.PLAYING or player is None or not player.is_bot:
                self.logger.info("[timer-abort] bot-throw not the bot's turn")
                return
            config = state.config
            decision = decide_bot_throw(config.bot_level, config.bot_checkout_chance, player.score, self.rng)
            self.throw(
                decision.points,
                doubles_missed=decision.doubles_missed,
                finish_darts=decision.finish_darts,
                from_bot=True,
            )

    def _advance_leg(self, expected_state: MatchState, expected_legs: tuple) -> None:
        with self._lock:
            state = self.state
            if state is not expected_state or state.status != MatchStatus.PLAYING or tuple(state.legs) != expected_legs:
                self.logger.info("[timer-abort] leg-advance state changed")
                return
            legs.start_next_leg(state, state.config.start_score, state.starter)
            self.logger.info(f"[leg-start] legs={state.legs} starter={state.starter}")
            self._broadcast()
            self._check_bot()

    def _broadcast(self) -> None:
        self.notify('update', self.state.to_dict())
