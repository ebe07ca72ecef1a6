"""Aggregate model imports for Alembic auto-detection."""

from fotolokashen.models.user import OnboardingStatus, User, UserRole  # noqa: F401
from fotolokashen.models.security_log import SecurityEvent, SecurityLog  # noqa: F401
