from collections import deque
from typing import Deque, Optional

from .state import MatchState

DEFAULT_HISTORY_LIMIT = 50


class SnapshotHistory:
    """Bounded undo stack of MatchState value copies.

    Snapshots never alias the live state: a copy is taken on push, and a
    popped snapshot leaves the stack, so handing it back as the live state is
    safe.
    """

    def __init__(self, limit: int = DEFAULT_HISTORY_LIMIT):
        self._limit = max(1, int(limit))
        self._snapshots: Deque[MatchState] = deque()

    def __len__(self) -> int:
        return len(self._snapshots)

    @property
    def limit(self) -> int:
        return self._limit

    def push(self, state: MatchState) -> None:
        self._snapshots.append(state.copy())
        while len(self._snapshots) > self._limit:
            self._snapshots.popleft()

    def undo(self, bot_slot: Optional[int] = None) -> Optional[MatchState]:
        """Pop the latest snapshot.

        Against a bot, a snapshot taken on the bot's turn means only the bot's
        reply would be undone, so one more snapshot is popped to hand control
        back to the human.
        """
        if not self._snapshots:
            return None
        state = self._snapshots.pop()
        if bot_slot is not None and state.current_turn == bot_slot and self._snapshots:
            state = self._snapshots.pop()
        return state

    def clear(self) -> None:
        self._snapshots.clear()
