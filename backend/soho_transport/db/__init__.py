"""
Database seeding utilities.
"""
from soho_transport.db.seed_data import seed_all, seed_number_plates, create_school_admin

__all__ = ["seed_all", "seed_number_plates", "create_school_admin"]
