from foodies.domain.application import Application


def _vendor_application(**overrides):
    body = {
        "full_name": "Val Vendor",
        "email": "v@x.com",
        "role": "vendor",
        "organization": "Lincoln High",
        "business_name": "Val's Tacos",
        "document_urls": [],
    }
    body.update(overrides)
    return body


def test_submit_application_stores_pending_row(client, db):
    r = client.post("/api/applications", json=_vendor_application())
    assert r.status_code == 200
    payload = r.json()
    assert payload["success"] is True
    assert payload["data"]["status"] == "pending"
    assert payload["data"]["businessName"] == "Val's Tacos"

    stored = db.get(Application, payload["data"]["id"])
    assert stored.status == "pending"
    assert stored.email == "v@x.com"
    assert stored.document_urls == []


def test_submit_application_requires_name_email_and_role(client, db):
    r = client.post("/api/applications", json=_vendor_application(full_name="  "))
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "VALIDATION_ERROR"

    r = client.post("/api/applications", json={"email": "a@b.com", "role": "vendor"})
    assert r.status_code == 400
    assert db.all(Application) == []


def test_submit_application_rejects_unknown_role(client):
    r = client.post("/api/applications", json=_vendor_application(role="superadmin"))
    assert r.status_code == 400


def test_submit_application_normalizes_role_and_single_document(client, db):
    r = client.post(
        "/api/applications",
        json=_vendor_application(role="Deliverer", documentUrls="http://docs.test/license.pdf"),
    )
    assert r.status_code == 200
    stored = db.get(Application, r.json()["data"]["id"])
    assert stored.role == "deliverer"
    assert stored.document_urls == ["http://docs.test/license.pdf"]


def test_resubmission_creates_another_pending_row(client, db):
    client.post("/api/applications", json=_vendor_application())
    client.post("/api/applications", json=_vendor_application())
    assert len(db.all(Application, email="v@x.com", status="pending")) == 2


def test_submit_admin_application_keeps_school_domain(client, db):
    r = client.post(
        "/api/submit-admin-application",
        json={"organization": "Lincoln High", "email": "head@lincoln.edu", "schoolDomain": "lincoln.edu"},
    )
    assert r.status_code == 200
    stored = db.get(Application, r.json()["data"]["id"])
    assert stored.role == "admin"
    assert stored.full_name == "Lincoln High"
    assert stored.notes == "lincoln.edu"


def test_list_applications_requires_bearer(client):
    assert client.get("/api/applications").status_code == 401
    r = client.get("/api/applications", headers={"Authorization": "Bearer nope"})
    assert r.status_code == 401


def test_list_applications_forbidden_for_vendor(client, make_user):
    _, headers = make_user("vendor")
    assert client.get("/api/applications", headers=headers).status_code == 403


def test_admin_sees_only_own_school_pending(client, db, make_user):
    db.add(
        Application(full_name="A", email="a@x.com", role="vendor", organization="Lincoln High"),
        Application(full_name="B", email="b@x.com", role="vendor", organization="Roosevelt"),
        Application(full_name="C", email="c@x.com", role="vendor", organization="Lincoln High", status="approved"),
    )
    _, headers = make_user("admin")

    r = client.get("/api/applications", headers=headers)
    assert r.status_code == 200
    assert [a["email"] for a in r.json()] == ["a@x.com"]


def test_superadmin_sees_all_pending_and_filters_by_role(client, db, make_user):
    db.add(
        Application(full_name="A", email="a@x.com", role="vendor", organization="Lincoln High"),
        Application(full_name="B", email="b@x.com", role="admin", organization="Roosevelt"),
    )
    _, headers = make_user("superadmin", organization=None)

    r = client.get("/api/applications", headers=headers)
    assert {a["email"] for a in r.json()} == {"a@x.com", "b@x.com"}

    r = client.get("/api/applications?role=admin", headers=headers)
    assert [a["email"] for a in r.json()] == ["b@x.com"]


def test_admin_queue_hides_admin_applications(client, db, make_user):
    db.add(
        Application(full_name="A", email="a@x.com", role="vendor", organization="Lincoln High"),
        Application(full_name="Lincoln High", email="head2@lincoln.edu", role="admin", organization="Lincoln High"),
    )
    _, headers = make_user("admin")

    r = client.get("/api/applications", headers=headers)
    assert [a["email"] for a in r.json()] == ["a@x.com"]
    assert client.get("/api/applications?role=admin", headers=headers).json() == []
    assert len(client.get("/api/applications?role=vendor", headers=headers).json()) == 1
