"""Admin Accounts & Settings — superadmin-only management endpoints.

Tests:
    - Admin CRUD is superadmin-only, lowercases emails, 404s on unknown emails
    - Deleting an unknown admin still leaves a success=False audit row
    - Bootstrap works only in development and only on an empty admins table
    - Settings are created on first read; updates keep unset keys and audit
"""

from sqlalchemy import select

from pecup.models.admin import Admin
from pecup.models.audit_log import AuditLog


async def test_admin_cannot_manage_admins(client, admin):
    res = await client.get("/api/v1/admin/admins", headers=admin)
    assert res.status_code == 403


async def test_anonymous_is_401(client):
    res = await client.get("/api/v1/admin/admins")
    assert res.status_code == 401


async def test_add_list_update_delete_admin(client, superadmin, test_db):
    created = await client.post(
        "/api/v1/admin/admins", headers=superadmin, json={"email": "New.Admin@PEC.edu"},
    )
    assert created.status_code == 201
    assert created.json()["email"] == "new.admin@pec.edu"
    assert created.json()["role"] == "admin"

    duplicate = await client.post(
        "/api/v1/admin/admins", headers=superadmin, json={"email": "new.admin@pec.edu"},
    )
    assert duplicate.status_code == 400
    assert duplicate.json()["error"]["message"] == "Admin already exists"

    listed = await client.get(
        "/api/v1/admin/admins", headers=superadmin, params={"sort": "email", "order": "asc"},
    )
    assert [a["email"] for a in listed.json()["data"]] == ["new.admin@pec.edu", "root@pec.edu"]

    promoted = await client.patch(
        "/api/v1/admin/admins/new.admin@pec.edu", headers=superadmin, json={"role": "superadmin"},
    )
    assert promoted.json()["role"] == "superadmin"

    removed = await client.delete("/api/v1/admin/admins/new.admin@pec.edu", headers=superadmin)
    assert removed.json() == {"success": True}
    remaining = (await test_db.execute(select(Admin.email))).scalars().all()
    assert remaining == ["root@pec.edu"]

    actions = (await test_db.execute(
        select(AuditLog.action).where(AuditLog.entity == "admin").order_by(AuditLog.created_at),
    )).scalars().all()
    assert actions == ["create", "update", "delete"]


async def test_add_admin_rejects_invalid_email_and_role(client, superadmin):
    bad_email = await client.post(
        "/api/v1/admin/admins", headers=superadmin, json={"email": "not-an-email"},
    )
    assert bad_email.status_code == 400

    bad_role = await client.post(
        "/api/v1/admin/admins", headers=superadmin, json={"email": "x@pec.edu", "role": "owner"},
    )
    assert bad_role.status_code == 400


async def test_delete_unknown_admin_audits_failure(client, superadmin, test_db):
    res = await client.delete("/api/v1/admin/admins/ghost@pec.edu", headers=superadmin)
    assert res.status_code == 404

    row = (await test_db.execute(
        select(AuditLog).where(AuditLog.entity == "admin"),
    )).scalar_one()
    assert row.success is False
    assert row.message == "Admin not found"


async def test_patch_unknown_admin_is_404(client, superadmin):
    res = await client.patch(
        "/api/v1/admin/admins/ghost@pec.edu", headers=superadmin, json={"role": "admin"},
    )
    assert res.status_code == 404


# ─── Bootstrap ─────────────────────────────────────────────────

async def test_bootstrap_forbidden_outside_development(client, headers_for):
    res = await client.post(
        "/api/v1/admin/bootstrap-superadmin", headers=headers_for("first@pec.edu"),
    )
    assert res.status_code == 403


async def test_bootstrap_creates_first_superadmin_once(client, headers_for, development, test_db):
    first = await client.post(
        "/api/v1/admin/bootstrap-superadmin", headers=headers_for("first@pec.edu"),
    )
    assert first.json() == {
        "ok": True, "bootstrapped": {"email": "first@pec.edu", "role": "superadmin"},
    }

    second = await client.post(
        "/api/v1/admin/bootstrap-superadmin", headers=headers_for("second@pec.edu"),
    )
    assert second.json() == {"ok": True, "message": "Admins table not empty; no changes"}
    emails = (await test_db.execute(select(Admin.email))).scalars().all()
    assert emails == ["first@pec.edu"]


# ─── Settings ──────────────────────────────────────────────────

async def test_settings_read_creates_row_and_audits(client, superadmin, test_db):
    res = await client.get("/api/v1/admin/settings", headers=superadmin)
    assert res.status_code == 200
    assert res.json()["pdf_to_drive"] is False
    assert res.json()["non_pdf_to_storage"] is True

    actions = (await test_db.execute(
        select(AuditLog.action).where(AuditLog.entity == "settings"),
    )).scalars().all()
    assert actions == ["read"]


async def test_settings_update_is_partial(client, superadmin):
    await client.put(
        "/api/v1/admin/settings", headers=superadmin, json={"storage_bucket": "notes"},
    )
    res = await client.put(
        "/api/v1/admin/settings", headers=superadmin, json={"pdf_to_drive": True},
    )
    assert res.status_code == 200
    assert res.json()["storage_bucket"] == "notes"
    assert res.json()["pdf_to_drive"] is True


async def test_settings_reject_null_flag(client, superadmin):
    res = await client.put(
        "/api/v1/admin/settings", headers=superadmin, json={"pdf_to_drive": None},
    )
    assert res.status_code == 400


async def test_settings_bucket_used_for_uploads(client, superadmin, fake_storage):
    await client.put(
        "/api/v1/admin/settings", headers=superadmin, json={"storage_bucket": "notes"},
    )
    res = await client.post(
        "/api/v1/admin/resources",
        headers=superadmin,
        data={"category": "notes", "subject": "os", "unit": "1", "name": "x"},
        files={"file": ("a.pdf", b"%PDF-1.7 body", "application/pdf")},
    )
    assert res.status_code == 201
    assert fake_storage.uploads[0][0] == "notes"
