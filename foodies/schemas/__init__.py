"""Pydantic schemas package.

Folder intent:
  common.py       CamelModel base, SuccessResponse, HealthResponse
  application.py  Application intake and review decisions
  auth.py         Invite acceptance, set-password, setup completion
  profile.py      Profiles, lifecycle actions, admin settings
  vendor.py       Vendors and deliverers
  school.py       Per-school report (snake_case keys)
  upload.py       Image upload result
"""
