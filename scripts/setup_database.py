#!/usr/bin/env python3
"""
Database Setup Script

Initializes the catalog database:
1. Creates all tables using SQLAlchemy models
2. Seeds the canonical options and the outlet variants
3. Validates connection and setup

Usage:
    python scripts/setup_database.py
"""

import os
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv
from sqlalchemy import inspect, select
from sqlalchemy.exc import SQLAlchemyError

from catalog_core.database.connection import check_connection, get_db_session, get_engine
from catalog_core.database.models import Base, Option, OptionVariant, create_all_tables
from catalog_core.database.operations import find_variant

# Load environment
load_dotenv()

CANONICAL_OPTIONS = [
    Option.APPAREL_SIZE,
    Option.CUP_SIZE,
    Option.FOOTWEAR_SIZE,
    Option.INSOLE_LENGTH,
    Option.HARDWARE_SIZE,
    Option.COLOR,
    Option.GENDER,
    Option.SPORT,
    Option.OUTLET,
    Option.KIND,
    Option.BRAND,
    Option.ORIGINAL_SIZE,
    Option.ORIGINAL_COLOR,
    Option.ORIGINAL_GENDER,
    Option.ORIGINAL_SPORT,
    Option.ORIGINAL_KIND,
    Option.WEIGHT,
    Option.LENGTH,
    Option.WIDTH,
    Option.HEIGHT,
]

OUTLET_VARIANTS = {
    OptionVariant.OUTLET_VARIANT_OUTLET: ("Аутлет", "Аутлет"),
    OptionVariant.OUTLET_VARIANT_REGULAR: ("Обычный", "Звичайний"),
}


def create_tables(engine):
    """Create all database tables"""
    print("\n🏗️  Creating database tables...")

    try:
        create_all_tables(engine)
        print("✅ All tables created successfully")
        return True
    except SQLAlchemyError as e:
        print(f"❌ Error creating tables: {e}")
        return False


def seed_reference_data(session):
    """
    Insert the options and variants the pipelines look up by code.

    Existing rows are left untouched, so the script can be re-run.

    Returns:
        Number of inserted rows
    """
    inserted = 0

    existing = set(session.execute(select(Option.code)).scalars())
    for code in CANONICAL_OPTIONS:
        if code not in existing:
            session.add(Option(code=code, name_ru=code, name_ua=code))
            inserted += 1
    session.flush()

    outlet = session.execute(
        select(Option).where(Option.code == Option.OUTLET)
    ).scalar_one()

    for slug, (value_ru, value_ua) in OUTLET_VARIANTS.items():
        if find_variant(session, outlet, slug) is None:
            session.add(
                OptionVariant(
                    option_id=outlet.id, slug=slug, value_ru=value_ru, value_ua=value_ua
                )
            )
            inserted += 1
    session.flush()

    return inserted


def validate_setup(engine):
    """Validate database connection and tables"""
    print("\n🔍 Validating database setup...")

    if not check_connection(engine):
        print("❌ Database connection failed")
        return False

    print("✅ Database connection successful")

    tables = set(inspect(engine).get_table_names())
    expected_tables = set(Base.metadata.tables)
    missing_tables = expected_tables - tables

    if missing_tables:
        print(f"❌ Missing tables: {', '.join(sorted(missing_tables))}")
        return False

    print(f"✅ All {len(expected_tables)} tables exist")
    return True


def main():
    """Main setup function"""
    print("=" * 60)
    print("Catalog Database Setup")
    print("=" * 60)

    # Check environment variables
    print("\n📋 Checking environment variables...")
    if not (os.getenv("CATALOG_DATABASE_URL") or os.getenv("DATABASE_URL")):
        required_vars = ["PGHOST", "PGPORT", "PGDATABASE", "PGUSER"]
        missing_vars = [var for var in required_vars if not os.getenv(var)]

        if missing_vars:
            print(f"❌ Missing environment variables: {', '.join(missing_vars)}")
            print("   Please check your .env file")
            sys.exit(1)

    print("✅ All required environment variables present")

    engine = get_engine()

    # Step 1: Create tables
    if not create_tables(engine):
        print("\n❌ Setup failed: Could not create tables")
        sys.exit(1)

    # Step 2: Seed reference data
    with get_db_session(engine) as session:
        inserted = seed_reference_data(session)
    print(f"✅ Seeded {inserted} reference row(s)")

    # Step 3: Validate
    if not validate_setup(engine):
        print("\n❌ Setup validation failed")
        sys.exit(1)

    print("\n" + "=" * 60)
    print("✅ Database setup complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()
