from flask import Blueprint, current_app, jsonify, request

from dart_counter import current_session, db
from dart_counter.models import User
from dart_counter.services.records.query import parse_filter, query_user

stats = Blueprint('stats', __name__)


@stats.route('/stats/<int:user_id>', methods=['GET'])
def user_stats(user_id):
    db.get_or_404(User, user_id)
    raw_filter = request.args.get('filter', 'all')
    try:
        selected = parse_filter(raw_filter)
    except ValueError as exc:
        return jsonify({'error': str(exc)}), 400

    records = current_session().store.records(user_id)
    result = query_user(records, user_id, selected)
    if result is None:
        return jsonify({'error': 'Match not found for this user'}), 404
    current_app.logger.info(f"[stats] user={user_id} filter={selected} records={len(records)}")
    return jsonify(result)


@stats.route('/matches', methods=['GET'])
def list_matches():
    records = current_session().store.records()
    records.reverse()
    return jsonify(records)
