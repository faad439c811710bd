from werkzeug.security import generate_password_hash, check_password_hash
from datetime import datetime, timezone
from extensions import db

CATEGORIES = ['Cooked', 'Raw', 'Bakery', 'Cooked Meal', 'Raw Ingredients', 'Bakery Item']
LISTING_STATUSES = ['Available', 'Claimed', 'In Transit', 'Delivered', 'Cancelled']
URGENCY_LEVELS = ['Standard', 'Urgent', 'Immediate']

# ==========================================
#  1. USER MODEL
# ==========================================
class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(256), nullable=False)
    role = db.Column(db.String(20), nullable=False, default='donor') # donor, ngo, volunteer, admin

    # --- SECURITY ---
    is_verified = db.Column(db.Boolean, default=False)

    # --- SUSPENSION (written by the reputation check) ---
    is_banned = db.Column(db.Boolean, default=False)
    ban_reason = db.Column(db.String(100), nullable=True)
    banned_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

# ==========================================
#  2. FOOD LISTING MODEL (Donor side)
# ==========================================
class FoodListing(db.Model):
    __tablename__ = 'food_listings'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text)
    quantity = db.Column(db.Float, nullable=False)
    unit = db.Column(db.String(20), default='kg')
    category = db.Column(db.String(50), nullable=False, default='Cooked')
    is_fresh = db.Column(db.Boolean, default=False)

    # --- LOCATION ---
    lat = db.Column(db.Float, nullable=False)
    lng = db.Column(db.Float, nullable=False)

    donor_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    status = db.Column(db.String(20), default='Available')
    cancellation_reason = db.Column(db.String(255), nullable=True)

    # --- RATING (0 = not rated yet) ---
    rating = db.Column(db.Float, default=0)
    feedback = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    donor = db.relationship('User', backref='listings')

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'quantity': self.quantity,
            'unit': self.unit,
            'category': self.category,
            'is_fresh': self.is_fresh,
            'location': {'lat': self.lat, 'lng': self.lng},
            'donor_id': self.donor_id,
            'donor_name': self.donor.name if self.donor else None,
            'status': self.status,
            'rating': self.rating,
            'feedback': self.feedback,
            'created_at': self.created_at.strftime('%Y-%m-%d %H:%M:%S') if self.created_at else None
        }

# ==========================================
#  3. FOOD NEED MODEL (NGO side)
# ==========================================
class FoodNeed(db.Model):
    __tablename__ = 'food_needs'

    id = db.Column(db.Integer, primary_key=True)
    ngo_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    title = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text)
    category = db.Column(db.String(50), nullable=False)
    quantity = db.Column(db.Float, nullable=False)
    unit = db.Column(db.String(20), default='kg')
    urgency = db.Column(db.String(20), default='Standard')
    is_perishable = db.Column(db.Boolean, default=False)

    lat = db.Column(db.Float, nullable=False)
    lng = db.Column(db.Float, nullable=False)

    status = db.Column(db.String(20), default='Open')
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    ngo = db.relationship('User', backref='needs')

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'category': self.category,
            'quantity': self.quantity,
            'unit': self.unit,
            'urgency': self.urgency,
            'is_perishable': self.is_perishable,
            'location': {'lat': self.lat, 'lng': self.lng},
            'ngo_id': self.ngo_id,
            'ngo_name': self.ngo.name if self.ngo else None,
            'status': self.status,
            'created_at': self.created_at.strftime('%Y-%m-%d %H:%M:%S') if self.created_at else None
        }

# ==========================================
#  4. NOTIFICATION MODEL
# ==========================================
class Notification(db.Model):
    __tablename__ = 'notifications'

    id = db.Column(db.Integer, primary_key=True)
    recipient_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    message = db.Column(db.String(500), nullable=False)
    type = db.Column(db.String(20), default='Info') # Info, Alert, Success, Warning
    priority = db.Column(db.String(10), default='normal') # high, normal
    is_read = db.Column(db.Boolean, default=False)
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    recipient = db.relationship('User', backref='notifications')

    def to_dict(self):
        return {
            'id': self.id,
            'message': self.message,
            'type': self.type,
            'priority': self.priority,
            'is_read': self.is_read,
            'created_at': self.created_at.strftime('%Y-%m-%d %H:%M:%S') if self.created_at else None
        }

# ==========================================
#  5. LISTING REPORT MODEL (safety flags)
# ==========================================
class ListingReport(db.Model):
    __tablename__ = 'listing_reports'

    id = db.Column(db.Integer, primary_key=True)
    reporter_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    listing_id = db.Column(db.Integer, db.ForeignKey('food_listings.id'), nullable=False)
    reason = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    reporter = db.relationship('User', backref='reports_filed')
    listing = db.relationship('FoodListing', backref='reports')

    # One report per user per listing
    __table_args__ = (db.UniqueConstraint('reporter_id', 'listing_id', name='_reporter_listing_uc'),)
