"""Routers package: HTTP endpoint definitions, all mounted under ``/api``.

Files:
  deps.py          Shared dependencies (backend clients, bearer auth, role gates)
  applications.py  Intake, pending queue, approve / decline
  auth.py          Invite acceptance, set-password, setup completion
  admin.py         School admin users and settings
  superadmin.py    Platform-wide listings, lifecycle, admin password reset
  vendors.py       Vendor and deliverer management
  schools.py       Per-school report
  uploads.py       Branding image uploads
"""

from fastapi import APIRouter

from foodies.routers import admin, applications, auth, schools, superadmin, uploads, vendors

api_router = APIRouter(prefix="/api")
for _module in (applications, auth, admin, superadmin, vendors, schools, uploads):
    api_router.include_router(_module.router)
