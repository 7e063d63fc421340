#!/usr/bin/env python3
"""
Profile Bootstrap Script
Nam3Land Reservation Service

Identity is issued externally; this script creates a local profile row for
an admin, agent or customer and prints a bearer token for it, e.g. for
run_api_tests.py.

Usage:
    python utility_scripts/create_profile.py admin admin@example.com "Ada Admin"
    python utility_scripts/create_profile.py customer me@example.com --create-tables

Environment Variables (from .env file):
    - DATABASE_URL: PostgreSQL connection string
    - SECRET_KEY: must match the running server to produce usable tokens
"""

import argparse
import re
import sys
from datetime import timedelta
from pathlib import Path
from typing import Optional

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv()

from sqlalchemy.orm import Session

from app.core.database import SessionLocal, engine
from app.core.security import create_access_token
from app.models import Base, Profile
from app.utils.audit import audit_logger

ROLES = ("admin", "agent", "customer")


class ProfileInitializer:
    """Creates (or reuses) a profile and issues a token for it"""

    def __init__(self):
        self.db: Optional[Session] = None

    def __enter__(self):
        self.db = SessionLocal()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.db:
            self.db.close()

    def validate_email(self, email: str) -> bool:
        """Validate email format"""
        pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
        return re.match(pattern, email) is not None

    def create_database_tables(self):
        """Create all database tables (development only, production uses Alembic)"""
        print("🔧 Creating database tables...")
        Base.metadata.create_all(bind=engine)
        print("✅ Database tables created successfully")

    def get_or_create_profile(self, role: str, email: str, name: Optional[str]) -> Profile:
        existing = self.db.query(Profile).filter(Profile.email == email).first()
        if existing:
            if existing.role != role:
                raise ValueError(f"Profile {email} already exists with role {existing.role}")
            print(f"⚠️  Profile {email} already exists")
            return existing

        profile = Profile(email=email, name=name, role=role, is_active=True)
        self.db.add(profile)
        self.db.flush()  # Get the ID

        audit_logger.log_business_event(
            db=self.db,
            action="PROFILE_CREATED",
            user_id=profile.id,
            resource_type="profile",
            resource_id=profile.id,
            new_values={"email": email, "role": role}
        )

        self.db.commit()
        print(f"✅ Created {role} profile {email}")
        return profile

    def run(self, role: str, email: str, name: Optional[str], create_tables: bool, days: int) -> str:
        if not self.validate_email(email):
            raise ValueError("Invalid email format")

        if create_tables:
            self.create_database_tables()

        profile = self.get_or_create_profile(role, email.lower(), name)
        return create_access_token(
            {"sub": str(profile.id), "role": profile.role},
            expires_delta=timedelta(days=days)
        )


def main():
    parser = argparse.ArgumentParser(description="Create a profile and print a bearer token")
    parser.add_argument("role", choices=ROLES)
    parser.add_argument("email")
    parser.add_argument("name", nargs="?")
    parser.add_argument("--create-tables", action="store_true", help="create tables without Alembic")
    parser.add_argument("--days", type=int, default=7, help="token lifetime in days")
    args = parser.parse_args()

    try:
        with ProfileInitializer() as initializer:
            token = initializer.run(args.role, args.email, args.name, args.create_tables, args.days)
    except ValueError as e:
        print(f"❌ {e}")
        sys.exit(1)

    print(f"\nexport TEST_{args.role.upper()}_TOKEN={token}")


if __name__ == "__main__":
    main()
