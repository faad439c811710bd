from flask import Blueprint, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity
from models import db, Notification

notifications_bp = Blueprint('notifications', __name__)


@notifications_bp.route('/api/notifications', methods=['GET'])
@jwt_required()
def get_notifications():
    """ Latest 20 notifications for the logged-in user. """
    current_user_id = int(get_jwt_identity())
    notifications = Notification.query.filter_by(recipient_id=current_user_id)\
        .order_by(Notification.created_at.desc(), Notification.id.desc())\
        .limit(20).all()
    return jsonify([n.to_dict() for n in notifications]), 200


@notifications_bp.route('/api/notifications/<int:notification_id>/read', methods=['PUT'])
@jwt_required()
def mark_read(notification_id):
    current_user_id = int(get_jwt_identity())
    notification = db.session.get(Notification, notification_id)

    if not notification:
        return jsonify({'error': 'Notification not found'}), 404

    # Check ownership
    if notification.recipient_id != current_user_id:
        return jsonify({'error': 'Not authorized'}), 401

    notification.is_read = True
    db.session.commit()
    return jsonify(notification.to_dict()), 200


@notifications_bp.route('/api/notifications/read-all', methods=['PUT'])
@jwt_required()
def mark_all_read():
    current_user_id = int(get_jwt_identity())
    Notification.query.filter_by(recipient_id=current_user_id, is_read=False)\
        .update({'is_read': True})
    db.session.commit()
    return jsonify({'message': 'All notifications marked as read'}), 200
