"""Authentication module for admin-only operations."""

from mosaic.auth.admin import AdminAuthorizer
from mosaic.auth.password import hash_password, verify_password
from mosaic.auth.brute_force import check_admin_attempts, record_failed_attempt, clear_failed_attempts

__all__ = [
    "AdminAuthorizer",
    "hash_password",
    "verify_password",
    "check_admin_attempts",
    "record_failed_attempt",
    "clear_failed_attempts",
]
