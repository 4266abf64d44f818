"""Services package: all business logic lives here, never in routers.

Files:
  applications.py  Intake and the reviewer's pending queue
  approval.py      Provisioning state machine (approve / decline)
  accounts.py      Invite-token and metadata setup completion
  users.py         Deactivate / reactivate, listings, settings
  vendors.py       Vendor and deliverer toggles and listings
  schools.py       Per-school aggregation report
  uploads.py       Branding image uploads
  identity.py      Identity-service admin client (httpx)
  storage.py       Object storage client (httpx)
  mailer.py        Outbound mail (logged only)

Rule: routers call services, services call repositories, repositories call the DB.
      No SQLAlchemy queries in routers. No FastAPI imports in services.
"""
