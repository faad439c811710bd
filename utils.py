from flask import current_app
from flask_jwt_extended import get_jwt_identity
from models import Notification, User, db
from extensions import socketio

def get_current_user():
    """ The User behind the JWT of the current request (None if deleted). """
    return db.session.get(User, int(get_jwt_identity()))


def add_notification(recipient_id, message, type='Info', priority='normal'):
    """ Stages a Notification on the session. The caller commits. """
    notification = Notification(
        recipient_id=recipient_id,
        message=message,
        type=type,
        priority=priority
    )
    db.session.add(notification)
    return notification


def push_notification(notification):
    """ Real-time push of a stored notification. Best effort. """
    try:
        socketio.emit('notification', {
            'user_id': notification.recipient_id,
            'message': notification.message,
            'type': notification.type
        })
    except Exception as e:
        current_app.logger.warning("Socket push to user %s failed: %s", notification.recipient_id, e)


def create_notification(recipient_id, message, type='Info', priority='normal'):
    """
    Stores a single Notification and pushes it over the socket.
    Fire-and-forget: a failure is logged and None is returned.
    """
    try:
        notification = add_notification(recipient_id, message, type, priority)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error("Notification to user %s failed: %s", recipient_id, e)
        return None

    push_notification(notification)
    return notification
