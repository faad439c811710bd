from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required
from models import db, FoodListing, ListingReport, CATEGORIES, LISTING_STATUSES
from matching import check_matches_for_listing
from reputation import check_and_apply_ban
from utils import get_current_user

listings_bp = Blueprint('listings', __name__)

# ==========================================
#  1. CREATE LISTING (+ matching)
# ==========================================
@listings_bp.route('/api/listings', methods=['POST'])
@jwt_required()
def create_listing():
    user = get_current_user()
    if not user:
        return jsonify({'error': 'User not found'}), 404

    # 1. Security Checks
    if user.role != 'donor':
        return jsonify({'error': 'Only Donors can post food.'}), 403

    if not user.is_verified:
        return jsonify({'error': 'Account verification pending. Please wait for admin approval.'}), 403

    if user.is_banned:
        return jsonify({
            'error': f'Your account has been suspended due to {user.ban_reason}. Please contact an administrator for assistance.'
        }), 403

    data = request.get_json() or {}

    # 2. Validation
    required_fields = ['title', 'quantity', 'category', 'lat', 'lng']
    if not all(field in data for field in required_fields):
        return jsonify({'error': 'Missing required fields'}), 400

    if data['category'] not in CATEGORIES:
        return jsonify({'error': f'Invalid category. Must be one of: {", ".join(CATEGORIES)}'}), 400

    try:
        quantity = float(data['quantity'])
        lat = float(data['lat'])
        lng = float(data['lng'])
    except (TypeError, ValueError):
        return jsonify({'error': 'Quantity and location must be numbers'}), 400

    if quantity <= 0:
        return jsonify({'error': 'Quantity must be positive.'}), 400

    new_listing = FoodListing(
        title=data['title'],
        description=data.get('description', ''),
        quantity=quantity,
        unit=data.get('unit', 'kg'),
        category=data['category'],
        is_fresh=bool(data.get('is_fresh', False)),
        lat=lat,
        lng=lng,
        donor_id=user.id,
        status='Available'
    )

    try:
        db.session.add(new_listing)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        return jsonify({'error': str(e)}), 500

    # 3. Matching never fails the post
    matches = check_matches_for_listing(new_listing)

    return jsonify({
        'message': 'Donation posted successfully!',
        'listing': new_listing.to_dict(),
        'matches': matches
    }), 201

# ==========================================
#  2. GET AVAILABLE LISTINGS (Feed)
# ==========================================
@listings_bp.route('/api/listings', methods=['GET'])
def get_listings():
    category = request.args.get('category')

    query = FoodListing.query.filter_by(status='Available')
    if category and category != 'All':
        query = query.filter_by(category=category)

    listings = query.order_by(FoodListing.created_at.desc()).all()
    return jsonify([l.to_dict() for l in listings]), 200

# ==========================================
#  3. UPDATE STATUS
# ==========================================
@listings_bp.route('/api/listings/<int:listing_id>/status', methods=['PUT'])
@jwt_required()
def update_status(listing_id):
    user = get_current_user()
    listing = db.session.get(FoodListing, listing_id)

    if not listing:
        return jsonify({'error': 'Listing not found'}), 404

    if not user or not user.is_verified:
        return jsonify({'error': 'Account verification pending. Please wait for admin approval.'}), 403

    data = request.get_json() or {}
    status = data.get('status')

    if status not in LISTING_STATUSES:
        return jsonify({'error': f'Invalid status. Must be one of: {", ".join(LISTING_STATUSES)}'}), 400

    if status == 'Cancelled':
        if listing.donor_id != user.id and user.role != 'admin':
            return jsonify({'error': 'Only the donor can cancel this listing.'}), 403
        listing.cancellation_reason = data.get('reason')

    listing.status = status
    db.session.commit()

    return jsonify(listing.to_dict()), 200

# ==========================================
#  4. RATE DONATION (+ auto-ban)
# ==========================================
@listings_bp.route('/api/listings/<int:listing_id>/rate', methods=['PUT'])
@jwt_required()
def rate_listing(listing_id):
    user = get_current_user()
    listing = db.session.get(FoodListing, listing_id)

    if not listing:
        return jsonify({'error': 'Listing not found'}), 404

    if not user or user.role != 'ngo':
        return jsonify({'error': 'Only NGOs can rate deliveries.'}), 403

    if listing.status != 'Delivered':
        return jsonify({'error': 'Only delivered donations can be rated.'}), 400

    data = request.get_json() or {}
    try:
        rating = float(data.get('rating'))
    except (TypeError, ValueError):
        return jsonify({'error': 'Rating must be a number'}), 400

    if not 1 <= rating <= 5:
        return jsonify({'error': 'Rating must be between 1 and 5'}), 400

    listing.rating = rating
    if data.get('feedback'):
        listing.feedback = data['feedback']

    try:
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        return jsonify({'error': str(e)}), 500

    # Auto-ban check after rating submission
    check_and_apply_ban(listing.donor_id)
    db.session.refresh(listing.donor)

    return jsonify({
        'listing': listing.to_dict(),
        'donor_banned': bool(listing.donor.is_banned)
    }), 200

# ==========================================
#  5. SAFETY REPORTS
# ==========================================
@listings_bp.route('/api/listings/<int:listing_id>/report', methods=['POST'])
@jwt_required()
def report_listing(listing_id):
    user = get_current_user()
    if not user:
        return jsonify({'error': 'User not found'}), 404

    listing = db.session.get(FoodListing, listing_id)
    if not listing:
        return jsonify({'error': 'Listing not found'}), 404

    data = request.get_json() or {}
    reason = data.get('reason')
    if not reason:
        return jsonify({'error': 'Missing fields'}), 400

    # 1. Prevent Duplicate Reporting
    existing = ListingReport.query.filter_by(reporter_id=user.id, listing_id=listing.id).first()
    if existing:
        return jsonify({'error': 'You have already reported this item.'}), 400

    db.session.add(ListingReport(reporter_id=user.id, listing_id=listing.id, reason=reason))
    db.session.commit()

    current_app.logger.info("User %s reported listing %s", user.id, listing.id)
    return jsonify({'message': 'Report submitted. Admin will review.'}), 201


@listings_bp.route('/api/listings/admin/reports', methods=['GET'])
@jwt_required()
def get_reported_listings():
    """ Listings with at least one report, newest report first within each. """
    user = get_current_user()
    if not user or user.role != 'admin':
        return jsonify({'error': 'Access Denied'}), 403

    listings = FoodListing.query.join(ListingReport).distinct().order_by(FoodListing.id).all()

    results = []
    for listing in listings:
        reports = sorted(listing.reports, key=lambda r: (r.created_at, r.id), reverse=True)
        results.append({
            'listing': listing.to_dict(),
            'donor_email': listing.donor.email,
            'reports': [{
                'id': r.id,
                'reason': r.reason,
                'reported_by': r.reporter.name,
                'created_at': r.created_at.strftime('%Y-%m-%d %H:%M')
            } for r in reports]
        })

    return jsonify(results), 200
