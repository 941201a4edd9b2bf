"""Academic Endpoints — year mappings and the academic calendar.

Tests:
    - GET mappings falls back to defaults and reports the student distribution
      and the program length
    - PUT validates strictly (duplicate levels, out-of-range years) and audits
    - promote/demote shift every level, saturating at 4 and 1
    - Calendar set validates the year/semester pair; progression rolls over
      to the next batch year and 400s when it does not exist
"""

from sqlalchemy import select

from pecup.core.year_mappings import DEFAULT_YEAR_MAPPINGS
from pecup.models.academic import AcademicConfig
from pecup.models.audit_log import AuditLog


async def test_year_mappings_default_and_distribution(client, admin, student):
    res = await client.get("/api/v1/admin/year-mappings", headers=admin)
    assert res.status_code == 200
    body = res.json()
    assert body["mappings"] == {str(k): v for k, v in sorted(DEFAULT_YEAR_MAPPINGS.items())}
    # the seeded student is batch 2024, level 2 under the defaults
    assert body["student_distribution"] == {"2": 1}
    assert body["total_students"] == 1
    assert body["program_length"] == 4


async def test_year_mappings_require_admin(client, student):
    res = await client.get("/api/v1/admin/year-mappings", headers=student)
    assert res.status_code == 403


async def test_put_year_mappings_requires_superadmin(client, admin):
    res = await client.put(
        "/api/v1/admin/year-mappings", headers=admin, json={"mappings": {"2024": 1}},
    )
    assert res.status_code == 403


async def test_put_year_mappings_stores_and_audits(client, superadmin, test_db):
    res = await client.put(
        "/api/v1/admin/year-mappings",
        headers=superadmin,
        json={"mappings": {"2025": 1, "2024": 2, "2023": 3, "2022": 4}},
    )
    assert res.status_code == 200
    assert res.json()["new_mappings"] == {"2022": 4, "2023": 3, "2024": 2, "2025": 1}

    stored = (await test_db.execute(
        select(AcademicConfig.config_value).where(AcademicConfig.config_key == "year_mappings"),
    )).scalar_one()
    assert stored["2022"] == 4

    actions = (await test_db.execute(
        select(AuditLog.action).where(AuditLog.entity == "year_mappings"),
    )).scalars().all()
    assert actions == ["update"]


async def test_put_year_mappings_rejects_duplicate_levels(client, superadmin):
    res = await client.put(
        "/api/v1/admin/year-mappings",
        headers=superadmin,
        json={"mappings": {"2024": 2, "2023": 2}},
    )
    assert res.status_code == 400
    assert res.json()["error"]["message"] == "Duplicate academic year: 2"


async def test_put_year_mappings_rejects_bad_batch_year(client, superadmin):
    res = await client.put(
        "/api/v1/admin/year-mappings",
        headers=superadmin,
        json={"mappings": {"abc": 1}},
    )
    assert res.status_code == 400
    assert res.json()["error"]["message"].startswith("Invalid batch year: abc")


async def test_promote_then_demote(client, superadmin):
    await client.put(
        "/api/v1/admin/year-mappings",
        headers=superadmin,
        json={"mappings": {"2025": 1, "2024": 2, "2023": 3, "2022": 4}},
    )

    promoted = await client.post("/api/v1/admin/year-mappings/promote", headers=superadmin)
    body = promoted.json()
    assert body["message"] == "All students promoted successfully"
    assert body["new_mappings"] == {"2022": 4, "2023": 4, "2024": 3, "2025": 2}
    assert {
        "batch_year": 2025, "old_academic_year": 1, "new_academic_year": 2,
    } in body["changes"]

    demoted = await client.post("/api/v1/admin/year-mappings/demote", headers=superadmin)
    assert demoted.json()["new_mappings"] == {"2022": 3, "2023": 3, "2024": 2, "2025": 1}


# ─── Calendar ──────────────────────────────────────────────────

async def test_calendar_empty_by_default(client):
    res = await client.get("/api/v1/academic-calendar")
    assert res.json() == {"calendar": None}


async def test_calendar_rejects_semester_of_other_year(client, admin, lookups):
    res = await client.post(
        "/api/v1/academic-calendar",
        headers=admin,
        json={
            "current_year_id": str(lookups["y2024"].id),
            "current_semester_id": str(lookups["y2023_s1"].id),
        },
    )
    assert res.status_code == 400
    assert res.json()["error"]["message"] == "Invalid year and semester combination"


async def test_calendar_set_and_progress(client, admin, superadmin, lookups):
    res = await client.post(
        "/api/v1/academic-calendar",
        headers=admin,
        json={
            "current_year_id": str(lookups["y2023"].id),
            "current_semester_id": str(lookups["y2023_s1"].id),
        },
    )
    assert res.status_code == 200
    assert res.json()["calendar"]["current_semester"]["semester_number"] == 1

    step = await client.put(
        "/api/v1/academic-calendar", headers=superadmin, json={"action": "progress_semester"},
    )
    calendar = step.json()["calendar"]
    assert calendar["current_year"]["batch_year"] == 2023
    assert calendar["current_semester_id"] == str(lookups["y2023_s2"].id)

    rollover = await client.put(
        "/api/v1/academic-calendar", headers=superadmin, json={"action": "progress_semester"},
    )
    calendar = rollover.json()["calendar"]
    assert calendar["current_year_id"] == str(lookups["y2024"].id)
    assert calendar["current_semester_id"] == str(lookups["y2024_s1"].id)
    assert calendar["updated_by"] == "root@pec.edu"

    fetched = await client.get("/api/v1/academic-calendar")
    assert fetched.json()["calendar"]["current_year"]["batch_year"] == 2024


async def test_progress_without_next_year_is_400(client, superadmin, lookups):
    await client.post(
        "/api/v1/academic-calendar",
        headers=superadmin,
        json={
            "current_year_id": str(lookups["y2024"].id),
            "current_semester_id": str(lookups["y2024_s2"].id),
        },
    )
    res = await client.put(
        "/api/v1/academic-calendar", headers=superadmin, json={"action": "progress_semester"},
    )
    assert res.status_code == 400
    assert res.json()["error"]["message"] == (
        "Next academic year not found. Please create it first."
    )


async def test_progress_without_calendar_is_404(client, superadmin):
    res = await client.put(
        "/api/v1/academic-calendar", headers=superadmin, json={"action": "progress_semester"},
    )
    assert res.status_code == 404
