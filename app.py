from flask import Flask
from flask_cors import CORS
import os
from dotenv import load_dotenv
import re
from datetime import timedelta

from extensions import db, migrate, jwt, socketio

load_dotenv()

def create_app(test_config=None):
    """
    The Application Factory.
    Creates and configures the app, but does not run it.
    """
    app = Flask(__name__)

    # --- CONFIGURATION ---
    app.config['SECRET_KEY'] = os.getenv('SECRET_KEY', 'default_secret_key')
    # Fix Postgres URL for SQLAlchemy
    database_url = os.getenv('DATABASE_URL', 'sqlite:///foodshare.db')
    if database_url.startswith("postgres://"):
        database_url = database_url.replace("postgres://", "postgresql://")
    app.config['SQLALCHEMY_DATABASE_URI'] = database_url

    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config['JWT_SECRET_KEY'] = os.getenv('JWT_SECRET_KEY', 'fallback-secret-key')
    app.config['JWT_ACCESS_TOKEN_EXPIRES'] = timedelta(hours=5)

    # --- MATCHING & REPUTATION ---
    # Fixed values, overridden only by tests
    app.config['MATCH_RADIUS_KM'] = 5.0
    app.config['BAN_AVERAGE_THRESHOLD'] = 2.0
    app.config['BAN_RECENT_WINDOW'] = 3
    app.config['BAN_RECENT_THRESHOLD'] = 2.0

    if test_config:
        app.config.update(test_config)

    # --- INITIALIZE EXTENSIONS ---
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    socketio.init_app(app)

    # --- CORS CONFIGURATION ---
    CORS(app, resources={
        r"/*": {
            "origins": [
                "http://localhost:3000",
                "http://localhost:5173",
                re.compile(r"^https://.*\.vercel\.app$")
            ],
            "methods": ["GET", "POST", "PATCH", "PUT", "DELETE", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization", "X-Requested-With"],
            "supports_credentials": True
        }
    })

    # --- REGISTER BLUEPRINTS ---
    # Import inside the function to avoid circular imports
    from routes.auth import auth_bp
    from routes.listings import listings_bp
    from routes.needs import needs_bp
    from routes.notifications import notifications_bp
    from routes.stats import stats_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(listings_bp)
    app.register_blueprint(needs_bp)
    app.register_blueprint(notifications_bp)
    app.register_blueprint(stats_bp)

    return app

# --- ENTRY POINT ---
# This only runs if you type 'python app.py'
if __name__ == "__main__":
    app = create_app()
    socketio.run(app, debug=True)
