from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import create_access_token, jwt_required
from models import db, User
from utils import get_current_user

auth_bp = Blueprint('auth', __name__)

SELF_SERVICE_ROLES = ['donor', 'ngo', 'volunteer']


@auth_bp.route('/api/auth/register', methods=['POST'])
def register():
    data = request.get_json() or {}

    required_fields = ['name', 'email', 'password', 'role']
    for field in required_fields:
        if not data.get(field):
            return jsonify({'error': f'Missing required field: {field}'}), 400

    role = data['role'].lower()
    if role not in SELF_SERVICE_ROLES:
        return jsonify({'error': f'Invalid role. Must be one of: {", ".join(SELF_SERVICE_ROLES)}'}), 400

    if User.query.filter_by(email=data['email']).first():
        return jsonify({'error': 'Email already exists'}), 400

    new_user = User(
        name=data['name'],
        email=data['email'],
        role=role,
        is_verified=False
    )
    new_user.set_password(data['password'])

    try:
        db.session.add(new_user)
        db.session.commit()
        return jsonify({'message': 'Registration successful! Your account is pending verification.'}), 201
    except Exception as e:
        db.session.rollback()
        return jsonify({'error': str(e)}), 500


@auth_bp.route('/api/auth/login', methods=['POST'])
def login():
    data = request.get_json()

    if not data or not data.get('email') or not data.get('password'):
        return jsonify({'error': 'Missing email or password'}), 400

    user = User.query.filter_by(email=data['email']).first()

    if not user or not user.check_password(data['password']):
        return jsonify({'error': 'Invalid email or password'}), 401

    if user.is_banned:
        return jsonify({'error': f'Your account has been suspended due to {user.ban_reason}.'}), 403

    additional_claims = {"role": user.role}
    access_token = create_access_token(identity=str(user.id), additional_claims=additional_claims)

    return jsonify({
        'message': 'Login successful!',
        'access_token': access_token,
        'user': {
            'id': user.id,
            'name': user.name,
            'email': user.email,
            'role': user.role,
            'is_verified': user.is_verified
        }
    }), 200


# ==========================================
#  ADMIN: UNBAN USER
# ==========================================
@auth_bp.route('/api/auth/admin/unban/<int:user_id>', methods=['PUT'])
@jwt_required()
def unban_user(user_id):
    admin = get_current_user()
    if not admin or admin.role != 'admin':
        return jsonify({'error': 'Access Denied. Admin only.'}), 403

    user = db.session.get(User, user_id)
    if not user:
        return jsonify({'error': 'User not found'}), 404

    user.is_banned = False
    user.ban_reason = None
    user.banned_at = None
    db.session.commit()

    current_app.logger.info("Admin %s unbanned user %s", admin.id, user_id)
    return jsonify({'message': 'User has been unbanned successfully', 'user': {'id': user.id, 'name': user.name}}), 200


@auth_bp.route('/api/auth/admin/verify/<int:user_id>', methods=['PUT'])
@jwt_required()
def verify_user(user_id):
    admin = get_current_user()
    if not admin or admin.role != 'admin':
        return jsonify({'error': 'Access Denied. Admin only.'}), 403

    user = db.session.get(User, user_id)
    if not user:
        return jsonify({'error': 'User not found'}), 404

    user.is_verified = True
    db.session.commit()
    return jsonify({'message': f'{user.name} is now verified.'}), 200
