import pytest

from foodies.core.config import settings
from foodies.domain.application import Application
from foodies.domain.organization import Organization
from foodies.domain.profile import Profile
from foodies.domain.vendor import Vendor
from foodies.repositories.application import ApplicationRepository


def _application(db, **fields):
    values = {
        "full_name": "Val Vendor",
        "email": "v@x.com",
        "role": "vendor",
        "organization": "Lincoln High",
        "business_name": "Val's Tacos",
        "menu_summary": "Tacos",
    }
    values.update(fields)
    return db.add(Application(**values))


# ---------------------------------------------------------------------------
# identity_invite (default)
# ---------------------------------------------------------------------------

def test_approve_vendor_invites_and_defers_vendor_row(client, db, identity, make_user):
    application = _application(db)
    admin, headers = make_user("admin")

    r = client.post("/api/approve-application", json={"applicationId": application.id}, headers=headers)
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["user"]["email"] == "v@x.com"
    assert body["user"]["role"] == "vendor"
    assert body["magicLink"].startswith("http://identity.test/verify")

    stored = db.get(Application, application.id)
    assert stored.status == "approved"
    assert stored.user_id == body["user"]["id"]
    assert stored.reviewed_by == admin.id
    assert stored.reviewed_at is not None

    assert db.all(Vendor) == []
    assert db.all(Profile, email="v@x.com") == []

    [invite] = identity.invites
    assert invite["email"] == "v@x.com"
    assert invite["data"]["role"] == "vendor"
    assert invite["data"]["organization"] == "Lincoln High"
    assert invite["data"]["business_name"] == "Val's Tacos"
    assert invite["redirect_to"] == "http://app.test/auth/callback"


def test_reapprove_is_rejected_without_side_effects(client, db, identity, make_user):
    application = _application(db)
    _, headers = make_user("superadmin", organization=None)

    first = client.post("/api/approve-application", json={"applicationId": application.id}, headers=headers)
    assert first.status_code == 200
    second = client.post("/api/approve-application", json={"applicationId": application.id}, headers=headers)
    assert second.status_code == 409
    assert second.json()["error"]["code"] == "CONFLICT"
    assert len(identity.invites) == 1


def test_declined_application_cannot_be_approved(client, db, identity, make_user):
    application = _application(db)
    _, headers = make_user("admin")

    r = client.post(
        "/api/decline-application",
        json={"applicationId": application.id, "reason": "Incomplete documents"},
        headers=headers,
    )
    assert r.status_code == 200
    assert r.json()["application"]["status"] == "declined"

    r = client.post("/api/approve-application", json={"applicationId": application.id}, headers=headers)
    assert r.status_code == 409
    assert db.get(Application, application.id).status == "declined"
    assert identity.invites == []


def test_decline_keeps_reason_and_has_no_identity_effects(client, db, identity, make_user):
    application = _application(db)
    admin, headers = make_user("admin")

    client.post(
        "/api/decline-application",
        json={"applicationId": application.id, "reason": "Incomplete documents"},
        headers=headers,
    )
    stored = db.get(Application, application.id)
    assert stored.notes == "Incomplete documents"
    assert stored.reviewed_by == admin.id
    assert identity.users.keys() == {admin.id}


def test_unknown_application_is_not_found(client, make_user):
    _, headers = make_user("admin")
    r = client.post("/api/approve-application", json={"applicationId": "missing"}, headers=headers)
    assert r.status_code == 404
    r = client.post("/api/decline-application", json={"applicationId": "missing"}, headers=headers)
    assert r.status_code == 404


def test_identity_failure_leaves_application_pending(client, db, identity, make_user):
    application = _application(db)
    _, headers = make_user("admin")
    identity.failing.add("invite_user_by_email")

    r = client.post("/api/approve-application", json={"applicationId": application.id}, headers=headers)
    assert r.status_code == 502
    assert r.json()["error"]["code"] == "IDENTITY_SERVICE_ERROR"
    assert db.get(Application, application.id).status == "pending"


def test_missing_fallback_link_still_approves(client, db, identity, make_user):
    application = _application(db)
    _, headers = make_user("admin")
    identity.failing.add("generate_link")

    r = client.post("/api/approve-application", json={"applicationId": application.id}, headers=headers)
    assert r.status_code == 200
    assert r.json()["magicLink"] is None
    assert db.get(Application, application.id).status == "approved"


def test_staff_placed_in_reviewing_admins_school(client, db, identity, make_user):
    application = _application(db, role="deliverer", vehicle_type="Bike")
    _, headers = make_user("admin", organization="Lincoln High")

    r = client.post("/api/approve-application", json={"applicationId": application.id}, headers=headers)
    assert r.status_code == 200
    assert r.json()["user"]["organization"] == "Lincoln High"
    assert identity.invites[0]["data"]["vehicle_type"] == "Bike"


# ---------------------------------------------------------------------------
# Authorization
# ---------------------------------------------------------------------------

def test_review_requires_staff(client, db, make_user):
    application = _application(db)
    assert client.post("/api/approve-application", json={"applicationId": application.id}).status_code == 401

    _, headers = make_user("vendor")
    r = client.post("/api/approve-application", json={"applicationId": application.id}, headers=headers)
    assert r.status_code == 403
    assert db.get(Application, application.id).status == "pending"


def test_admin_cannot_review_other_school(client, db, make_user):
    application = _application(db, organization="Roosevelt")
    _, headers = make_user("admin", organization="Lincoln High")

    r = client.post("/api/decline-application", json={"applicationId": application.id}, headers=headers)
    assert r.status_code == 403
    assert db.get(Application, application.id).status == "pending"


def test_admin_cannot_claim_application_without_school(client, db, identity, make_user):
    application = _application(db, organization=None)
    _, headers = make_user("admin", organization="Roosevelt")

    r = client.post("/api/approve-application", json={"applicationId": application.id}, headers=headers)
    assert r.status_code == 403
    r = client.post("/api/decline-application", json={"applicationId": application.id}, headers=headers)
    assert r.status_code == 403
    assert db.get(Application, application.id).status == "pending"
    assert identity.invites == []


def test_superadmin_places_unassigned_staff_by_application(client, db, make_user):
    application = _application(db, organization=None)
    _, headers = make_user("superadmin", organization=None)

    r = client.post("/api/approve-application", json={"applicationId": application.id}, headers=headers)
    assert r.status_code == 200
    assert r.json()["user"]["organization"] is None


def test_admin_cannot_review_admin_applications(client, db, make_user):
    application = _application(db, role="admin", email="head@lincoln.edu", notes="lincoln.edu")
    _, headers = make_user("admin")

    r = client.post("/api/approve-application", json={"applicationId": application.id}, headers=headers)
    assert r.status_code == 403


# ---------------------------------------------------------------------------
# invite_token
# ---------------------------------------------------------------------------

def test_approve_admin_application_issues_set_password_link(client, db, identity, make_user):
    application = _application(
        db, role="admin", full_name="Lincoln High", email="head@lincoln.edu",
        notes="lincoln.edu", business_name=None, menu_summary=None,
    )
    superadmin, headers = make_user("superadmin", organization=None)

    r = client.post("/api/approve-admin-application", json={"applicationId": application.id}, headers=headers)
    assert r.status_code == 200
    body = r.json()
    assert body["magicLink"].startswith("http://app.test/auth/set-password?token=")
    assert identity.invites == []

    [org] = db.all(Organization)
    assert org.slug == "lincoln-high"
    assert org.email_domains == ["lincoln.edu"]
    assert body["user"]["organizationId"] == org.id

    profile = db.get(Profile, body["user"]["id"])
    assert profile.status == "approved"
    assert profile.role == "admin"
    assert profile.organization_id == org.id
    assert body["magicLink"].endswith(profile.invite_token)
    assert profile.invite_token_expires is not None

    stored = db.get(Application, application.id)
    assert stored.user_id == profile.id
    assert stored.reviewed_by == superadmin.id


def test_second_admin_reuses_school_by_domain(client, db, make_user):
    first = _application(db, role="admin", full_name="Lincoln High", email="a@lincoln.edu", notes="lincoln.edu")
    second = _application(db, role="admin", full_name="Lincoln HS", email="b@lincoln.edu", organization="Lincoln HS")
    _, headers = make_user("superadmin", organization=None)

    client.post("/api/approve-admin-application", json={"applicationId": first.id}, headers=headers)
    r = client.post("/api/approve-admin-application", json={"applicationId": second.id}, headers=headers)
    assert r.status_code == 200
    assert len(db.all(Organization)) == 1
    assert r.json()["user"]["organization"] == "Lincoln High"


def test_approve_admin_application_only_accepts_admin_role(client, db, make_user):
    application = _application(db)
    _, headers = make_user("superadmin", organization=None)

    r = client.post("/api/approve-admin-application", json={"applicationId": application.id}, headers=headers)
    assert r.status_code == 404
    assert db.get(Application, application.id).status == "pending"


def test_configured_invite_token_strategy(client, db, identity, make_user, monkeypatch):
    monkeypatch.setattr(settings, "approval_strategy", "invite_token")
    application = _application(db)
    _, headers = make_user("admin")

    r = client.post("/api/approve-application", json={"applicationId": application.id}, headers=headers)
    assert r.status_code == 200
    assert "/auth/set-password?token=" in r.json()["magicLink"]
    assert identity.invites == []
    [profile] = db.all(Profile, email="v@x.com")
    assert profile.role == "vendor"
    assert db.all(Vendor) == []


def test_lost_race_rolls_back_profile(client, db, make_user, monkeypatch):
    application = _application(db, role="admin", full_name="Lincoln High", email="head@lincoln.edu", notes="lincoln.edu")
    _, headers = make_user("superadmin", organization=None)

    async def _lost(self, application_id, status, **values):
        return False

    monkeypatch.setattr(ApplicationRepository, "decide", _lost)
    r = client.post("/api/approve-admin-application", json={"applicationId": application.id}, headers=headers)
    assert r.status_code == 409
    assert db.all(Profile, email="head@lincoln.edu") == []
    assert db.all(Organization) == []


@pytest.mark.parametrize("notes, expected", [("lincoln.edu", "lincoln.edu"), ("@Lincoln.EDU", "lincoln.edu"), ("call me", "school.org")])
def test_school_domain_prefers_notes(notes, expected):
    from foodies.services.approval import school_domain_for

    application = Application(full_name="x", email="head@school.org", role="admin", notes=notes)
    assert school_domain_for(application) == expected
