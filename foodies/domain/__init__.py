"""Domain package: all ORM models are imported here so Alembic autogenerate detects them.

Folder intent:
  application.py   : applicant submissions and their review state
  profile.py       : user profiles (role, organization, invite token)
  vendor.py        : vendor business rows, materialized at setup completion
  organization.py  : schools and the read-only orders table
  audit.py         : Immutable audit trail (never updated or deleted)
  enums.py         : Role / status string enums
  mixins.py        : Shared TimestampMixin
"""

from foodies.domain.application import Application
from foodies.domain.audit import AuditTrail
from foodies.domain.organization import Order, Organization
from foodies.domain.profile import Profile
from foodies.domain.vendor import Vendor

__all__ = [
    "Application",
    "AuditTrail",
    "Order",
    "Organization",
    "Profile",
    "Vendor",
]
