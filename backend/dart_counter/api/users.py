from flask import Blueprint, jsonify, request

from dart_counter import db
from dart_counter.models import User

users = Blueprint('users', __name__)


@users.route('', methods=['GET'])
def list_users():
    return jsonify([u.to_dict() for u in User.query.order_by(User.name.asc()).all()])


@users.route('', methods=['POST'])
def create_user():
    data = request.get_json(silent=True) or {}
    name = data.get('name')
    name = name.strip() if isinstance(name, str) else ''
    if not name:
        return jsonify({'error': 'Name is required'}), 400
    if len(name) > 64:
        return jsonify({'error': 'Name must be 64 characters or fewer'}), 400
    if User.query.filter_by(name=name).first():
        return jsonify({'error': 'User already exists'}), 400

    user = User(name=name)
    db.session.add(user)
    db.session.commit()
    return jsonify(user.to_dict()), 201


@users.route('/<int:user_id>', methods=['DELETE'])
def delete_user(user_id):
    # Stored match records keep their frozen copy of the user's name
    user = db.get_or_404(User, user_id)
    db.session.delete(user)
    db.session.commit()
    return jsonify({'message': 'User deleted'})
