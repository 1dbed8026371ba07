from datetime import datetime, timezone
import json

from dart_counter import db


def utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _load_json(raw, default):
    if not raw:
        return default
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        return default


class User(db.Model):
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(64), unique=True, nullable=False, index=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class MatchRecord(db.Model):
    """A finished match, frozen at the moment it ended. Never updated."""
    __tablename__ = 'match_record'
    id = db.Column(db.Integer, primary_key=True)
    date = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    winner_id = db.Column(db.Integer, nullable=False)  # slot 0|1 of the winning player
    score_str = db.Column(db.String(16), nullable=False)
    timeline = db.Column(db.Text, nullable=True)  # JSON-encoded list of turn summaries
    players = db.Column(db.Text, nullable=False)  # JSON-encoded list of player snapshots

    def to_dict(self):
        return {
            'id': self.id,
            'date': self.date.isoformat() if self.date else None,
            'winner_id': self.winner_id,
            'score_str': self.score_str,
            'timeline': _load_json(self.timeline, []),
            'players': _load_json(self.players, []),
        }
