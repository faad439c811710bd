import pytest
from unittest.mock import patch
from models import FoodListing, ListingReport, Notification, User
from extensions import db

@pytest.fixture
def donor(user_factory):
    return user_factory('donor', name="Pro Kitchen")

@pytest.fixture
def ngo(user_factory):
    return user_factory('ngo', name="Save Lives NGO")

def _payload(**kwargs):
    payload = {
        "title": "Fresh Bread",
        "quantity": 20,
        "category": "Bakery",
        "lat": 6.5244,
        "lng": 3.3792
    }
    payload.update(kwargs)
    return payload

# ==========================================
#  1. CREATE LISTING
# ==========================================

def test_create_listing_runs_matching(client, donor, ngo, need_factory, login):
    need_factory(ngo, category="Bakery", lat=6.53, lng=3.38)

    response = client.post('/api/listings', json=_payload(is_fresh=True), headers=login(donor))

    assert response.status_code == 201
    data = response.get_json()
    assert data['matches'] == 1
    assert data['listing']['status'] == 'Available'
    assert Notification.query.count() == 2

def test_create_listing_without_matches(client, donor, login):
    response = client.post('/api/listings', json=_payload(), headers=login(donor))

    assert response.status_code == 201
    assert response.get_json()['matches'] == 0
    assert FoodListing.query.count() == 1

def test_matching_failure_does_not_block_post(client, donor, ngo, need_factory, login):
    need_factory(ngo, category="Bakery")

    with patch('matching.find_open_needs', side_effect=Exception("db down")):
        response = client.post('/api/listings', json=_payload(), headers=login(donor))

    assert response.status_code == 201
    assert response.get_json()['matches'] == 0
    assert FoodListing.query.count() == 1

def test_banned_donor_cannot_post(client, user_factory, login):
    donor = user_factory('donor')
    headers = login(donor)
    donor.is_banned = True
    donor.ban_reason = 'Low Average Rating'
    db.session.commit()

    response = client.post('/api/listings', json=_payload(), headers=headers)

    assert response.status_code == 403
    assert "suspended" in response.get_json()['error']

def test_unverified_donor_cannot_post(client, user_factory, login):
    donor = user_factory('donor', is_verified=False)
    response = client.post('/api/listings', json=_payload(), headers=login(donor))
    assert response.status_code == 403

def test_ngo_cannot_post_listing(client, ngo, login):
    response = client.post('/api/listings', json=_payload(), headers=login(ngo))
    assert response.status_code == 403

def test_invalid_quantity(client, donor, login):
    response = client.post('/api/listings', json=_payload(quantity=0), headers=login(donor))
    assert response.status_code == 400

def test_invalid_category(client, donor, login):
    response = client.post('/api/listings', json=_payload(category="Frozen"), headers=login(donor))
    assert response.status_code == 400

# ==========================================
#  2. FEED & STATUS
# ==========================================

def test_feed_filters_by_category(client, donor, listing_factory):
    listing_factory(donor, title="Rice", category="Cooked")
    listing_factory(donor, title="Yams", category="Raw")
    listing_factory(donor, title="Gone", category="Raw", status="Delivered")

    data = client.get('/api/listings?category=Raw').get_json()

    assert [l['title'] for l in data] == ["Yams"]

def test_cancel_listing(client, donor, listing_factory, login):
    listing = listing_factory(donor)

    response = client.put(f'/api/listings/{listing.id}/status',
                          json={"status": "Cancelled", "reason": "Spoiled"}, headers=login(donor))

    assert response.status_code == 200
    updated = db.session.get(FoodListing, listing.id)
    assert updated.status == "Cancelled"
    assert updated.cancellation_reason == "Spoiled"

def test_invalid_status(client, donor, listing_factory, login):
    listing = listing_factory(donor)
    response = client.put(f'/api/listings/{listing.id}/status', json={"status": "Eaten"}, headers=login(donor))
    assert response.status_code == 400

# ==========================================
#  3. RATING -> AUTO-BAN
# ==========================================

def test_rating_triggers_ban(client, donor, ngo, listing_factory, login):
    listing_factory(donor, status="Delivered", rating=1)
    listing_factory(donor, status="Delivered", rating=1)
    target = listing_factory(donor, status="Delivered")

    response = client.put(f'/api/listings/{target.id}/rate',
                          json={"rating": 1, "feedback": "Cold and late"}, headers=login(ngo))

    assert response.status_code == 200
    assert response.get_json()['donor_banned'] is True
    db.session.expire_all()
    assert db.session.get(User, donor.id).ban_reason == 'Low Average Rating'

def test_good_rating_keeps_donor_active(client, donor, ngo, listing_factory, login):
    target = listing_factory(donor, status="Delivered")

    response = client.put(f'/api/listings/{target.id}/rate', json={"rating": 5}, headers=login(ngo))

    assert response.status_code == 200
    assert response.get_json()['donor_banned'] is False
    assert response.get_json()['listing']['rating'] == 5

def test_reputation_failure_does_not_fail_rating(client, donor, ngo, listing_factory, login):
    target = listing_factory(donor, status="Delivered")

    with patch('reputation.average_rating', side_effect=Exception("db down")):
        response = client.put(f'/api/listings/{target.id}/rate', json={"rating": 1}, headers=login(ngo))

    assert response.status_code == 200
    assert response.get_json()['donor_banned'] is False

def test_cannot_rate_undelivered(client, donor, ngo, listing_factory, login):
    target = listing_factory(donor, status="Claimed")
    response = client.put(f'/api/listings/{target.id}/rate', json={"rating": 4}, headers=login(ngo))
    assert response.status_code == 400

def test_rating_out_of_range(client, donor, ngo, listing_factory, login):
    target = listing_factory(donor, status="Delivered")
    response = client.put(f'/api/listings/{target.id}/rate', json={"rating": 6}, headers=login(ngo))
    assert response.status_code == 400

# ==========================================
#  4. SAFETY REPORTS
# ==========================================

def test_report_listing(client, donor, ngo, listing_factory, login):
    listing = listing_factory(donor)

    response = client.post(f'/api/listings/{listing.id}/report', json={"reason": "Smelled off"}, headers=login(ngo))

    assert response.status_code == 201
    assert ListingReport.query.filter_by(listing_id=listing.id).count() == 1

def test_report_twice_rejected(client, donor, ngo, listing_factory, login):
    listing = listing_factory(donor)
    headers = login(ngo)
    client.post(f'/api/listings/{listing.id}/report', json={"reason": "Smelled off"}, headers=headers)

    response = client.post(f'/api/listings/{listing.id}/report', json={"reason": "Again"}, headers=headers)

    assert response.status_code == 400
    assert "already reported" in response.get_json()['error']

def test_report_needs_reason(client, donor, ngo, listing_factory, login):
    listing = listing_factory(donor)
    response = client.post(f'/api/listings/{listing.id}/report', json={}, headers=login(ngo))
    assert response.status_code == 400

def test_report_missing_listing(client, ngo, login):
    response = client.post('/api/listings/9999/report', json={"reason": "?"}, headers=login(ngo))
    assert response.status_code == 404

def test_admin_sees_reported_listings(client, donor, ngo, user_factory, listing_factory, login):
    admin = user_factory('admin')
    flagged = listing_factory(donor, title="Flagged")
    listing_factory(donor, title="Clean")
    client.post(f'/api/listings/{flagged.id}/report', json={"reason": "Smelled off"}, headers=login(ngo))

    response = client.get('/api/listings/admin/reports', headers=login(admin))

    assert response.status_code == 200
    data = response.get_json()
    assert [d['listing']['title'] for d in data] == ["Flagged"]
    assert data[0]['donor_email'] == donor.email
    assert data[0]['reports'][0]['reason'] == "Smelled off"
    assert data[0]['reports'][0]['reported_by'] == "Save Lives NGO"

def test_reported_listings_admin_only(client, ngo, login):
    response = client.get('/api/listings/admin/reports', headers=login(ngo))
    assert response.status_code == 403
