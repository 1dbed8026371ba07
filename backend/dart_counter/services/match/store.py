import json
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from dart_counter import db
from dart_counter.models import MatchRecord

from .state import MatchState


def build_record_fields(state: MatchState, winner_id: int) -> Dict[str, Any]:
    """Freeze a finished match into MatchRecord column values."""
    players = [
        {
            'id': p.id,
            'user_id': p.user_id,
            'name': p.name,
            'is_bot': p.is_bot,
            'stats': p.stats.to_dict(),
            'avg': p.avg,
            'scoring_avg': p.scoring_avg,
            'first9_avg': p.first9_avg,
            'checkout_percent': p.checkout_percent,
            'darts_thrown': p.darts_thrown,
            'total_score': p.total_score,
        }
        for p in state.players
    ]
    return {
        'winner_id': winner_id,
        'score_str': f"{state.legs[0]}:{state.legs[1]}",
        'timeline': json.dumps([e.to_dict() for e in state.timeline]),
        'players': json.dumps(players),
    }


class MatchStore:
    """Append-only persistence of finished matches.

    Failures are logged and swallowed here: a broken database must never stop
    the live match.
    """

    def __init__(self, app, logger: Optional[logging.Logger] = None):
        self.app = app
        self.logger = logger or app.logger

    def save_match(self, state: MatchState, winner_id: int) -> Optional[int]:
        with self.app.app_context():
            try:
                record = MatchRecord(**build_record_fields(state, winner_id))
                db.session.add(record)
                db.session.commit()
            except SQLAlchemyError as exc:
                db.session.rollback()
                self.logger.error(f"[store-write-failed] winner={state.winner} error={exc}")
                return None
            self.logger.info(f"[store-write] match={record.id} score={record.score_str}")
            return record.id

    def records(self, user_id: Optional[int] = None) -> List[Dict[str, Any]]:
        with self.app.app_context():
            try:
                rows = MatchRecord.query.order_by(MatchRecord.date.asc(), MatchRecord.id.asc()).all()
            except SQLAlchemyError as exc:
                db.session.rollback()
                self.logger.warning(f"[store-read-failed] error={exc}")
                return []
            records = [row.to_dict() for row in rows]
        if user_id is None:
            return records
        return [r for r in records if any(p.get('user_id') == user_id for p in r['players'])]
