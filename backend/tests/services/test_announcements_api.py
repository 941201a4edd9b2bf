"""Announcement Endpoints — public reminders/recent updates and admin CRUD.

Tests:
    - Public reminders validate year, default to the caller's profile, hide deleted rows
    - Recent updates capped at 10 and filtered only with both year and branch
    - Admin reminder CRUD writes audit rows; delete is permanent
    - Representatives post only inside their assignment
    - Exam delete is soft; recent-update delete is hard
"""

from datetime import date, datetime, timedelta, timezone

from sqlalchemy import select

from pecup.models.announcements import Exam, RecentUpdate, Reminder
from pecup.models.audit_log import AuditLog


async def _add(test_db, *rows):
    test_db.add_all(rows)
    await test_db.commit()
    return rows


async def _audit_actions(test_db, entity: str) -> list[tuple[str, bool]]:
    result = await test_db.execute(
        select(AuditLog.action, AuditLog.success)
        .where(AuditLog.entity == entity)
        .order_by(AuditLog.created_at),
    )
    return [tuple(row) for row in result.all()]


# ─── Public reads ───────────────────────────────────────────────

async def test_reminders_reject_non_numeric_year(client):
    res = await client.get("/api/v1/reminders", params={"year": "20x4"})
    assert res.status_code == 400
    assert res.json()["error"]["message"] == "Invalid year parameter"


async def test_reminders_sorted_by_due_date_and_hide_deleted(client, test_db):
    today = date.today()
    await _add(
        test_db,
        Reminder(title="Later", due_date=today + timedelta(days=5)),
        Reminder(title="Sooner", due_date=today + timedelta(days=1), status="open"),
        Reminder(title="Gone", due_date=today, deleted_at=datetime.now(timezone.utc)),
    )
    res = await client.get("/api/v1/reminders")
    body = res.json()
    assert [r["title"] for r in body] == ["Sooner", "Later"]
    assert body[1]["status"] == ""
    assert body[1]["description"] == ""


async def test_reminders_default_to_profile_year_and_branch(client, student, test_db):
    due = date.today()
    await _add(
        test_db,
        Reminder(title="Mine", due_date=due, year=2024, branch="CSE"),
        Reminder(title="Other branch", due_date=due, year=2024, branch="ECE"),
    )
    res = await client.get("/api/v1/reminders", headers=student)
    assert [r["title"] for r in res.json()] == ["Mine"]


async def test_reminders_filter_by_status(client, test_db):
    due = date.today()
    await _add(
        test_db,
        Reminder(title="Open", due_date=due, status="open"),
        Reminder(title="Done", due_date=due, status="done"),
    )
    res = await client.get("/api/v1/reminders", params={"status": "done"})
    assert [r["title"] for r in res.json()] == ["Done"]


async def test_recent_updates_capped_at_ten_newest_first(client, test_db):
    base = datetime.now(timezone.utc)
    await _add(test_db, *[
        RecentUpdate(title=f"Update {i}", created_at=base + timedelta(minutes=i))
        for i in range(12)
    ])
    res = await client.get("/api/v1/recent-updates")
    titles = [u["title"] for u in res.json()]
    assert len(titles) == 10
    assert titles[0] == "Update 11"


async def test_recent_updates_filter_needs_year_and_branch(client, test_db):
    await _add(
        test_db,
        RecentUpdate(title="CSE", year=2024, branch="CSE"),
        RecentUpdate(title="ECE", year=2024, branch="ECE"),
    )
    only_year = await client.get("/api/v1/recent-updates", params={"year": "2024"})
    assert len(only_year.json()) == 2

    both = await client.get(
        "/api/v1/recent-updates", params={"year": "2024", "branch": "ECE"},
    )
    assert [u["title"] for u in both.json()] == ["ECE"]


# ─── Admin reminders ────────────────────────────────────────────

async def test_admin_creates_reminder_with_audit(client, admin, test_db):
    res = await client.post(
        "/api/v1/admin/reminders",
        headers=admin,
        json={"title": " Fee payment ", "due_date": "2026-11-01", "year": "", "branch": ""},
    )
    assert res.status_code == 201
    body = res.json()
    assert body["title"] == "Fee payment"
    assert body["due_date"] == "2026-11-01"
    assert body["year"] is None
    assert await _audit_actions(test_db, "reminder") == [("create", True)]


async def test_create_reminder_rejects_bad_date(client, admin):
    res = await client.post(
        "/api/v1/admin/reminders",
        headers=admin,
        json={"title": "x", "due_date": "01/11/2026"},
    )
    assert res.status_code == 400
    assert "YYYY-MM-DD" in res.json()["error"]["message"]


async def test_student_cannot_create_reminder(client, student):
    res = await client.post(
        "/api/v1/admin/reminders",
        headers=student,
        json={"title": "x", "due_date": "2026-11-01"},
    )
    assert res.status_code == 403


async def test_representative_must_target_year_and_branch(client, representative):
    res = await client.post(
        "/api/v1/admin/reminders",
        headers=representative,
        json={"title": "x", "due_date": "2026-11-01"},
    )
    assert res.status_code == 400
    assert res.json()["error"]["message"] == "Representatives must specify year and branch"


async def test_representative_scope_enforced(client, representative):
    inside = await client.post(
        "/api/v1/admin/reminders",
        headers=representative,
        json={"title": "ok", "due_date": "2026-11-01", "year": 2024, "branch": "CSE"},
    )
    assert inside.status_code == 201

    outside = await client.post(
        "/api/v1/admin/reminders",
        headers=representative,
        json={"title": "no", "due_date": "2026-11-01", "year": 2023, "branch": "CSE"},
    )
    assert outside.status_code == 403

    unknown = await client.post(
        "/api/v1/admin/reminders",
        headers=representative,
        json={"title": "no", "due_date": "2026-11-01", "year": 2024, "branch": "XYZ"},
    )
    assert unknown.status_code == 400
    assert unknown.json()["error"]["message"] == "Invalid branch or year"


async def test_admin_list_sorts_and_paginates(client, admin, test_db):
    today = date.today()
    await _add(test_db, *[
        Reminder(title=f"R{i}", due_date=today + timedelta(days=i)) for i in range(3)
    ])
    res = await client.get(
        "/api/v1/admin/reminders",
        headers=admin,
        params={"sort": "due_date", "order": "desc", "limit": "2", "page": "1"},
    )
    body = res.json()
    assert [r["title"] for r in body["data"]] == ["R2", "R1"]
    assert body["meta"]["count"] == 3
    assert body["meta"]["order"] == "desc"


async def test_patch_reminder_rejects_null_title(client, admin, test_db):
    [reminder] = await _add(test_db, Reminder(title="t", due_date=date.today()))
    res = await client.patch(
        f"/api/v1/admin/reminders/{reminder.id}", headers=admin, json={"title": None},
    )
    assert res.status_code == 400
    assert "title cannot be null" in res.json()["error"]["message"]


async def test_patch_and_delete_reminder(client, admin, test_db):
    [reminder] = await _add(test_db, Reminder(title="t", due_date=date.today()))
    patched = await client.patch(
        f"/api/v1/admin/reminders/{reminder.id}", headers=admin, json={"status": "done"},
    )
    assert patched.json()["status"] == "done"
    assert patched.json()["title"] == "t"

    deleted = await client.delete(f"/api/v1/admin/reminders/{reminder.id}", headers=admin)
    assert deleted.json() == {"success": True}
    again = await client.delete(f"/api/v1/admin/reminders/{reminder.id}", headers=admin)
    assert again.status_code == 404
    assert await _audit_actions(test_db, "reminder") == [
        ("update", True), ("delete", True),
    ]


async def test_representative_cannot_patch_reminder(client, representative, test_db):
    [reminder] = await _add(test_db, Reminder(title="t", due_date=date.today()))
    res = await client.patch(
        f"/api/v1/admin/reminders/{reminder.id}", headers=representative, json={"title": "x"},
    )
    assert res.status_code == 403


# ─── Recent updates & exams ─────────────────────────────────────

async def test_recent_update_crud(client, admin, test_db):
    created = await client.post(
        "/api/v1/admin/recent-updates",
        headers=admin,
        json={"title": "Results out", "date": "Oct 18", "year": 2024, "branch": "CSE"},
    )
    assert created.status_code == 201
    update_id = created.json()["id"]

    listed = await client.get("/api/v1/admin/recent-updates", headers=admin)
    assert [u["id"] for u in listed.json()["data"]] == [update_id]

    deleted = await client.delete(f"/api/v1/admin/recent-updates/{update_id}", headers=admin)
    assert deleted.json() == {"success": True}
    remaining = (await test_db.execute(select(RecentUpdate.id))).all()
    assert remaining == []


async def test_exam_delete_is_soft(client, admin, test_db):
    created = await client.post(
        "/api/v1/admin/exams",
        headers=admin,
        json={"subject": "DBMS", "exam_date": "2026-12-01"},
    )
    assert created.status_code == 201
    exam_id = created.json()["id"]

    deleted = await client.delete(f"/api/v1/admin/exams/{exam_id}", headers=admin)
    assert deleted.status_code == 200

    listed = await client.get("/api/v1/admin/exams", headers=admin)
    assert listed.json()["data"] == []
    deleted_at = (await test_db.execute(select(Exam.deleted_at))).scalar_one()
    assert deleted_at is not None
    assert ("soft_delete", True) in await _audit_actions(test_db, "exam")


async def test_exam_patch_rejects_invalid_calendar_date(client, admin):
    created = await client.post(
        "/api/v1/admin/exams",
        headers=admin,
        json={"subject": "OS", "exam_date": "2026-12-01"},
    )
    res = await client.patch(
        f"/api/v1/admin/exams/{created.json()['id']}",
        headers=admin,
        json={"exam_date": "2026-02-30"},
    )
    assert res.status_code == 400
    assert "exam_date must be a valid date" in res.json()["error"]["message"]
