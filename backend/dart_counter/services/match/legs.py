from typing import List, Optional

from .state import MatchConfig, MatchState, MatchStatus, Player, PlayerStatus


def build_players(config: MatchConfig) -> List[Player]:
    """Create both players for a fresh match; slot 1 is the bot when one is configured."""
    return [
        Player(
            id=idx,
            name=config.names[idx],
            score=config.start_score,
            user_id=config.user_ids[idx],
            is_bot=(idx == 1 and config.has_bot),
        )
        for idx in (0, 1)
    ]


def start_match(state: MatchState, config: MatchConfig, players: Optional[List[Player]] = None) -> None:
    state.config = config
    state.players = players if players is not None else build_players(config)
    state.legs = [0, 0]
    state.leg_darts = [0, 0]
    state.timeline = []
    state.winner = None
    state.starter = config.starter
    start_next_leg(state, config.start_score, config.starter)
    state.status = MatchStatus.PLAYING


def start_next_leg(state: MatchState, start_score: int, starter: int) -> None:
    """Reset scores and per-leg counters; cumulative match statistics are kept."""
    for player in state.players:
        player.score = start_score
        player.status = PlayerStatus.NONE
        player.last_score = None
    state.leg_darts = [0, 0]
    state.starter = starter
    state.current_turn = starter
