"""String enums shared by models, schemas, and services."""

from enum import Enum


class Role(str, Enum):
    SUPERADMIN = "superadmin"
    ADMIN = "admin"
    VENDOR = "vendor"
    DELIVERER = "deliverer"
    CUSTOMER = "customer"


# Roles an applicant may request through an Application
APPLICANT_ROLES = frozenset({Role.ADMIN, Role.VENDOR, Role.DELIVERER})

# Roles an org admin is allowed to see and manage
ORG_MANAGED_ROLES = (Role.CUSTOMER, Role.VENDOR, Role.DELIVERER)


class ApplicationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DECLINED = "declined"


class ProfileStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DECLINED = "declined"
    ACTIVE = "active"


class UserAction(str, Enum):
    DEACTIVATE = "deactivate"
    REACTIVATE = "reactivate"


class ApprovalStrategy(str, Enum):
    """How credentials are issued to an approved applicant."""

    IDENTITY_INVITE = "identity_invite"  # identity service sends its own invite email
    INVITE_TOKEN = "invite_token"  # we store a token and hand out a set-password link


class ImageKind(str, Enum):
    LOGO = "logo"
    HEADER = "header"
