import math
from flask import Blueprint, jsonify
from sqlalchemy import func, desc
from models import db, User, FoodListing

stats_bp = Blueprint('stats', __name__)

# 1 meal is about 0.4 kg of food, 1 kg of food waste is about 2.5 kg of CO2
KG_PER_MEAL = 0.4
CO2_PER_KG = 2.5


@stats_bp.route('/api/stats', methods=['GET'])
def get_platform_stats():
    """ Global platform totals. Cancelled listings do not count. """
    valid = FoodListing.status != 'Cancelled'

    total_donations = FoodListing.query.filter(valid).count()
    total_kg = db.session.query(func.sum(FoodListing.quantity)).filter(valid).scalar() or 0

    return jsonify({
        'total_donations': total_donations,
        'meals_saved': math.floor(total_kg / KG_PER_MEAL),
        'co2_saved': math.floor(total_kg * CO2_PER_KG)
    }), 200


@stats_bp.route('/api/stats/leaderboard', methods=['GET'])
def get_leaderboard():
    """ Top 3 donors by number of non-cancelled listings. """
    rows = db.session.query(
        User.name,
        func.count(FoodListing.id).label('count')
    ).join(FoodListing, FoodListing.donor_id == User.id)\
        .filter(FoodListing.status != 'Cancelled')\
        .group_by(User.id, User.name)\
        .order_by(desc('count'))\
        .limit(3).all()

    return jsonify([{'name': name, 'count': count} for name, count in rows]), 200
