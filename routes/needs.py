from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required
from models import db, FoodNeed, CATEGORIES, URGENCY_LEVELS
from matching import check_matches_for_need
from utils import get_current_user

needs_bp = Blueprint('needs', __name__)


@needs_bp.route('/api/food-needs', methods=['GET'])
def get_open_needs():
    """ All open food needs, newest first. """
    needs = FoodNeed.query.filter_by(status='Open').order_by(FoodNeed.created_at.desc()).all()
    return jsonify([n.to_dict() for n in needs]), 200


@needs_bp.route('/api/food-needs/my', methods=['GET'])
@jwt_required()
def get_my_needs():
    user = get_current_user()
    if not user:
        return jsonify({'error': 'User not found'}), 404

    needs = FoodNeed.query.filter_by(ngo_id=user.id).order_by(FoodNeed.created_at.desc()).all()
    return jsonify([n.to_dict() for n in needs]), 200


@needs_bp.route('/api/food-needs', methods=['POST'])
@jwt_required()
def create_need():
    user = get_current_user()
    if not user or user.role != 'ngo':
        return jsonify({'error': 'Only NGOs can post food needs.'}), 403

    data = request.get_json() or {}

    required_fields = ['title', 'category', 'quantity', 'lat', 'lng']
    if not all(field in data for field in required_fields):
        return jsonify({'error': 'Missing required fields'}), 400

    if data['category'] not in CATEGORIES:
        return jsonify({'error': f'Invalid category. Must be one of: {", ".join(CATEGORIES)}'}), 400

    urgency = data.get('urgency', 'Standard')
    if urgency not in URGENCY_LEVELS:
        return jsonify({'error': f'Invalid urgency. Must be one of: {", ".join(URGENCY_LEVELS)}'}), 400

    try:
        quantity = float(data['quantity'])
        lat = float(data['lat'])
        lng = float(data['lng'])
    except (TypeError, ValueError):
        return jsonify({'error': 'Quantity and location must be numbers'}), 400

    new_need = FoodNeed(
        ngo_id=user.id,
        title=data['title'],
        description=data.get('description', ''),
        category=data['category'],
        quantity=quantity,
        unit=data.get('unit', 'kg'),
        urgency=urgency,
        is_perishable=bool(data.get('is_perishable', False)),
        lat=lat,
        lng=lng
    )

    try:
        db.session.add(new_need)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        return jsonify({'error': str(e)}), 500

    # Trigger matching engine
    matches = check_matches_for_need(new_need)

    return jsonify({
        'message': 'Food need posted successfully!',
        'need': new_need.to_dict(),
        'matches': matches
    }), 201


@needs_bp.route('/api/food-needs/<int:need_id>', methods=['DELETE'])
@jwt_required()
def cancel_need(need_id):
    user = get_current_user()
    need = db.session.get(FoodNeed, need_id)

    if not need:
        return jsonify({'error': 'Need not found'}), 404

    if not user or (need.ngo_id != user.id and user.role != 'admin'):
        return jsonify({'error': 'User not authorized'}), 401

    need.status = 'Cancelled'
    db.session.commit()
    return jsonify({'message': 'Food need removed'}), 200
