from flask import Blueprint, jsonify, request

from dart_counter import current_session
from dart_counter.api.payloads import parse_throw

match = Blueprint('match', __name__)


@match.route('/state', methods=['GET'])
def get_state():
    return jsonify(current_session().snapshot())


@match.route('/start', methods=['POST'])
def start_match():
    data = request.get_json(silent=True) or {}
    return jsonify(current_session().start_match(data)), 201


@match.route('/throw', methods=['POST'])
def submit_throw():
    session = current_session()
    payload = parse_throw(request.get_json(silent=True))
    outcome = session.throw(
        payload['points'],
        doubles_missed=payload['doubles_missed'],
        finish_darts=payload['finish_darts'],
        segments=payload['segments'],
    )
    if outcome is None:
        return jsonify({'error': 'Throw not accepted'}), 409
    return jsonify({'outcome': outcome.to_dict(), 'state': session.snapshot()})


@match.route('/undo', methods=['POST'])
def undo():
    session = current_session()
    undone = session.undo()
    return jsonify({'undone': undone, 'state': session.snapshot()})


@match.route('/reset', methods=['POST'])
def reset():
    return jsonify(current_session().reset())


@match.route('/abort', methods=['POST'])
def abort_match():
    return jsonify(current_session().abort_match())
