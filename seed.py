import os
from app import create_app
from extensions import db
from models import User

def seed_admin():
    app = create_app()
    with app.app_context():
        db.create_all()

        email = os.getenv('ADMIN_EMAIL', 'admin@foodshare.org')

        # 1. Check if Admin exists
        if User.query.filter_by(email=email).first():
            print("✅ Admin user already exists. Skipping.")
            return

        # 2. Create Admin if not found
        print("🚀 Creating Admin User...")
        admin = User(
            name='Super Admin',
            email=email,
            role='admin',
            is_verified=True
        )
        admin.set_password(os.getenv('ADMIN_PASSWORD', 'password123'))

        db.session.add(admin)
        db.session.commit()
        print("✅ Admin Created Successfully!")

if __name__ == "__main__":
    seed_admin()
