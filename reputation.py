"""
Automatic donor suspension based on delivery ratings.

A donor is banned when either
  1. the mean of their rated Delivered listings is below BAN_AVERAGE_THRESHOLD, or
  2. their BAN_RECENT_WINDOW most recent rated deliveries are all below
     BAN_RECENT_THRESHOLD.

Unrated deliveries (rating 0) are ignored by both rules. Comparisons are strict,
so an average of exactly 2.0 does not ban.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from flask import current_app
from sqlalchemy import func
from models import db, FoodListing, User

BAN_AVERAGE_THRESHOLD = 2.0
BAN_RECENT_WINDOW = 3
BAN_RECENT_THRESHOLD = 2.0

LOW_AVERAGE = 'Low Average Rating'
CONSECUTIVE_LOW = 'Consecutive Low Ratings'


@dataclass(frozen=True)
class Decided:
    should_ban: bool
    reason: str = ''


@dataclass(frozen=True)
class Indeterminate:
    """ The ratings could not be read. Never bans. """
    error: str
    should_ban: bool = False
    reason: str = ''


def _rated_deliveries(donor_id):
    return FoodListing.query.filter(
        FoodListing.donor_id == donor_id,
        FoodListing.status == 'Delivered',
        FoodListing.rating > 0
    )


def average_rating(donor_id):
    """ Mean rating over rated deliveries, or None if there are none. """
    avg = db.session.query(func.avg(FoodListing.rating)).filter(
        FoodListing.donor_id == donor_id,
        FoodListing.status == 'Delivered',
        FoodListing.rating > 0
    ).scalar()
    return float(avg) if avg is not None else None


def recent_rated_deliveries(donor_id, n):
    """ Ratings of the n newest rated deliveries, newest first. """
    rows = _rated_deliveries(donor_id).order_by(
        FoodListing.created_at.desc(), FoodListing.id.desc()
    ).limit(n).all()
    return [row.rating for row in rows]


def _setting(name, default):
    return current_app.config.get(name, default)


def check_ban_criteria(donor_id):
    """
    Decides whether a donor should be banned.
    Returns Decided, or Indeterminate when the ratings cannot be read.
    """
    avg_threshold = _setting('BAN_AVERAGE_THRESHOLD', BAN_AVERAGE_THRESHOLD)
    window = _setting('BAN_RECENT_WINDOW', BAN_RECENT_WINDOW)
    recent_threshold = _setting('BAN_RECENT_THRESHOLD', BAN_RECENT_THRESHOLD)

    try:
        avg = average_rating(donor_id)
        if avg is not None and avg < avg_threshold:
            return Decided(True, LOW_AVERAGE)

        recent = recent_rated_deliveries(donor_id, window)
        if len(recent) >= window and all(r < recent_threshold for r in recent):
            return Decided(True, CONSECUTIVE_LOW)

        return Decided(False)
    except Exception as e:
        db.session.rollback()
        current_app.logger.exception("Error checking ban criteria for donor %s", donor_id)
        return Indeterminate(str(e))


def apply_ban(user_id, reason, timestamp=None):
    """
    Marks the user as banned. Re-banning an already banned user rewrites the
    same fields. Returns False instead of raising when the write fails.
    """
    try:
        user = db.session.get(User, user_id)
        if user is None:
            current_app.logger.error("Cannot ban user %s: not found", user_id)
            return False

        user.is_banned = True
        user.ban_reason = reason
        user.banned_at = timestamp or datetime.now(timezone.utc)
        db.session.commit()
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Error applying ban to user %s", user_id)
        return False

    current_app.logger.warning("User %s banned. Reason: %s", user_id, reason)
    return True


def check_and_apply_ban(donor_id):
    """ Runs both rules and bans the donor if either fires. Returns the decision. """
    decision = check_ban_criteria(donor_id)
    if decision.should_ban:
        apply_ban(donor_id, decision.reason)
    return decision
