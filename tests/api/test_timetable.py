import pytest
import httpx

from school_admin_backend.database import models as db_models

from tests.database import factories

from pprint import pp as pprint


def entry_payload(klass, subject, teacher, period, room=None, day="Monday") -> dict:
    return {
        "class_id": str(klass.id),
        "subject_id": str(subject.id),
        "teacher_id": str(teacher.id),
        "period_id": str(period.id),
        "room_id": str(room.id) if room else None,
        "day_of_week": day,
        "academic_year": "2025",
    }


@pytest.mark.anyio
class TestTimetableEntriesAPI:

    async def test_create_and_list_entries(
        self,
        client: httpx.AsyncClient,
        test_class_orm: db_models.Classes,
        test_subject_orm: db_models.Subjects,
        test_teacher_orm: db_models.Teachers,
        test_period_orm: db_models.Periods,
        test_room_orm: db_models.Rooms
    ):
        response = await client.post("/timetable/entries", json=entry_payload(
            test_class_orm, test_subject_orm, test_teacher_orm, test_period_orm, test_room_orm
        ))
        assert response.status_code == 201, response.json()
        created = response.json()
        pprint(created)
        assert created["day_of_week"] == "Monday"
        assert created["room_id"] == str(test_room_orm.id)

        response = await client.get("/timetable/entries", params={"class_id": str(test_class_orm.id)})
        assert response.status_code == 200
        assert [e["id"] for e in response.json()] == [created["id"]]

    async def test_room_double_booking_returns_400(
        self,
        db_session,
        client: httpx.AsyncClient,
        test_class_orm, test_subject_orm, test_teacher_orm, test_period_orm, test_room_orm
    ):
        response = await client.post("/timetable/entries", json=entry_payload(
            test_class_orm, test_subject_orm, test_teacher_orm, test_period_orm, test_room_orm
        ))
        assert response.status_code == 201

        other_class = factories.ClassFactory(name="Grade 8")
        other_teacher = factories.TeacherFactory()
        await db_session.flush()

        response = await client.post("/timetable/entries", json=entry_payload(
            other_class, test_subject_orm, other_teacher, test_period_orm, test_room_orm
        ))
        assert response.status_code == 400
        assert response.json() == {"detail": "Room already occupied at this time"}

    async def test_invalid_day_is_rejected(
        self,
        client: httpx.AsyncClient,
        test_class_orm, test_subject_orm, test_teacher_orm, test_period_orm
    ):
        response = await client.post("/timetable/entries", json=entry_payload(
            test_class_orm, test_subject_orm, test_teacher_orm, test_period_orm, day="Funday"
        ))
        assert response.status_code == 422

    async def test_delete_entry(
        self,
        client: httpx.AsyncClient,
        test_class_orm, test_subject_orm, test_teacher_orm, test_period_orm
    ):
        created = (await client.post("/timetable/entries", json=entry_payload(
            test_class_orm, test_subject_orm, test_teacher_orm, test_period_orm
        ))).json()

        response = await client.delete(f"/timetable/entries/{created['id']}")
        assert response.status_code == 204

        response = await client.get(f"/timetable/entries/{created['id']}")
        assert response.status_code == 404
        assert response.json()["detail"] == "Timetable entry not found"


@pytest.mark.anyio
class TestPeriodsAPI:

    async def test_create_period_with_inverted_times(self, client: httpx.AsyncClient):
        response = await client.post("/timetable/periods", json={
            "name": "Broken", "period_number": 9, "start_time": "10:00:00", "end_time": "09:00:00",
        })
        assert response.status_code == 422

    async def test_create_and_list_periods(self, client: httpx.AsyncClient):
        response = await client.post("/timetable/periods", json={
            "name": "Period 1", "period_number": 1, "start_time": "08:00:00", "end_time": "08:40:00",
        })
        assert response.status_code == 201, response.json()

        response = await client.get("/timetable/periods")
        assert [p["period_number"] for p in response.json()] == [1]
