from flask import current_app
from sqlalchemy.orm import joinedload
from models import db, FoodListing, FoodNeed
from geo import haversine_km
from utils import add_notification, push_notification

MATCH_RADIUS_KM = 5.0

HIGH_PREFIX = 'HIGH PRIORITY MATCH: '
NORMAL_PREFIX = 'MATCH FOUND: '


def find_open_needs(category):
    """ Open needs of a category, with the owning NGO loaded. """
    return FoodNeed.query.options(joinedload(FoodNeed.ngo)).filter(
        FoodNeed.status == 'Open',
        FoodNeed.category == category
    ).order_by(FoodNeed.id).all()


def find_available_listings(category):
    """ Available listings of a category, with the donor loaded. """
    return FoodListing.query.options(joinedload(FoodListing.donor)).filter(
        FoodListing.status == 'Available',
        FoodListing.category == category
    ).order_by(FoodListing.id).all()


def is_high_priority(listing, need):
    return bool(listing.is_fresh or need.is_perishable or need.urgency == 'Immediate')


def _radius(radius_km):
    if radius_km is not None:
        return radius_km
    return current_app.config.get('MATCH_RADIUS_KM', MATCH_RADIUS_KM)


def _within(origin, candidates, radius_km):
    return [
        c for c in candidates
        if haversine_km(origin.lat, origin.lng, c.lat, c.lng) <= radius_km
    ]


def _emit_pair(ngo_note, donor_note):
    """
    Stores the NGO and donor notifications of one match in a single commit,
    so a failed write leaves neither half behind. Raises on failure.
    """
    pair = [add_notification(*ngo_note), add_notification(*donor_note)]
    db.session.commit()
    for notification in pair:
        push_notification(notification)


# ==========================================
#  1. NEW LISTING -> NEARBY NEEDS
# ==========================================
def check_matches_for_listing(listing, radius_km=None):
    """
    Notifies every NGO whose open need (same category, within the radius)
    fits a newly posted listing, and the donor once per match.
    Returns the number of matches. Never raises: a failed lookup or
    notification write counts as 0.
    """
    try:
        radius_km = _radius(radius_km)
        matches = _within(listing, find_open_needs(listing.category), radius_km)

        for need in matches:
            high = is_high_priority(listing, need)
            prefix = HIGH_PREFIX if high else NORMAL_PREFIX
            priority = 'high' if high else 'normal'

            _emit_pair(
                # Notify NGO
                (need.ngo_id,
                 f'{prefix}An item you requested ("{need.title}") was just donated nearby!',
                 'Success' if high else 'Info',
                 priority),
                # Notify Donor
                (listing.donor_id,
                 f'{prefix}Your donation of "{listing.title}" matches a request from {need.ngo.name} nearby!',
                 'Success',
                 priority)
            )

        current_app.logger.info("Listing %s matched %d open need(s)", listing.id, len(matches))
        return len(matches)

    except Exception:
        db.session.rollback()
        current_app.logger.exception("Matching engine (listing %s) error", getattr(listing, 'id', None))
        return 0


# ==========================================
#  2. NEW NEED -> NEARBY LISTINGS
# ==========================================
def check_matches_for_need(need, radius_km=None):
    """ Mirror of check_matches_for_listing for a newly posted need. """
    try:
        radius_km = _radius(radius_km)
        matches = _within(need, find_available_listings(need.category), radius_km)

        for listing in matches:
            high = is_high_priority(listing, need)
            prefix = HIGH_PREFIX if high else NORMAL_PREFIX
            priority = 'high' if high else 'normal'

            _emit_pair(
                # Notify NGO (requester)
                (need.ngo_id,
                 f'{prefix}A donation for "{need.title}" is already available nearby!',
                 'Success',
                 priority),
                # Notify Donor
                (listing.donor_id,
                 f'{prefix}Your donation of "{listing.title}" matches a new request from an NGO nearby!',
                 'Success' if high else 'Info',
                 priority)
            )

        current_app.logger.info("Need %s matched %d available listing(s)", need.id, len(matches))
        return len(matches)

    except Exception:
        db.session.rollback()
        current_app.logger.exception("Matching engine (need %s) error", getattr(need, 'id', None))
        return 0
