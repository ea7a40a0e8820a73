import pytest
from uuid import uuid4
from datetime import date, time
from fastapi import HTTPException

from school_admin_backend.database import models as db_models
from school_admin_backend.database.db_enums import DayOfWeek
from school_admin_backend.models import timetable as timetable_models
from school_admin_backend.services.timetable_service import (
    TimeTableService, CLASS_CONFLICT, TEACHER_CONFLICT, ROOM_CONFLICT
)

from tests.database import factories

from pprint import pp as pprint


async def _scheduled_entry(db_session, **overrides) -> db_models.TimetableEntries:
    entry = factories.TimetableEntryFactory(**overrides)
    await db_session.flush()
    return entry


@pytest.mark.anyio
class TestCheckConflicts:

    async def test_free_slot_passes(self, timetable_service: TimeTableService):
        print("\n--- Testing conflict check on an empty timetable ---")
        await timetable_service.check_conflicts(
            class_id=uuid4(), teacher_id=uuid4(), room_id=uuid4(),
            period_id=uuid4(), day_of_week="Monday", academic_year="2025",
        )

    async def test_class_conflict(self, db_session, timetable_service: TimeTableService):
        existing = await _scheduled_entry(db_session)

        with pytest.raises(HTTPException) as e:
            await timetable_service.check_conflicts(
                class_id=existing.class_id, teacher_id=uuid4(), room_id=None,
                period_id=existing.period_id, day_of_week="Monday", academic_year="2025",
            )
        assert e.value.status_code == 400
        assert e.value.detail == CLASS_CONFLICT

    async def test_teacher_conflict(self, db_session, timetable_service: TimeTableService):
        existing = await _scheduled_entry(db_session)

        with pytest.raises(HTTPException) as e:
            await timetable_service.check_conflicts(
                class_id=uuid4(), teacher_id=existing.teacher_id, room_id=None,
                period_id=existing.period_id, day_of_week="Monday", academic_year="2025",
            )
        assert e.value.status_code == 400
        assert e.value.detail == TEACHER_CONFLICT

    async def test_room_conflict(self, db_session, timetable_service: TimeTableService):
        existing = await _scheduled_entry(db_session, room_id=uuid4())

        with pytest.raises(HTTPException) as e:
            await timetable_service.check_conflicts(
                class_id=uuid4(), teacher_id=uuid4(), room_id=existing.room_id,
                period_id=existing.period_id, day_of_week="Monday", academic_year="2025",
            )
        assert e.value.detail == ROOM_CONFLICT

    async def test_class_clash_is_reported_before_teacher_clash(
        self, db_session, timetable_service: TimeTableService
    ):
        """When several checks would fail, only the first one (class) is reported."""
        existing = await _scheduled_entry(db_session, room_id=uuid4())

        with pytest.raises(HTTPException) as e:
            await timetable_service.check_conflicts(
                class_id=existing.class_id, teacher_id=existing.teacher_id, room_id=existing.room_id,
                period_id=existing.period_id, day_of_week="Monday", academic_year="2025",
            )
        assert e.value.detail == CLASS_CONFLICT

    async def test_no_room_skips_room_check(self, db_session, timetable_service: TimeTableService):
        existing = await _scheduled_entry(db_session, room_id=uuid4())

        await timetable_service.check_conflicts(
            class_id=uuid4(), teacher_id=uuid4(), room_id=None,
            period_id=existing.period_id, day_of_week="Monday", academic_year="2025",
        )

    async def test_other_day_period_or_year_is_free(self, db_session, timetable_service: TimeTableService):
        existing = await _scheduled_entry(db_session)

        for day, period_id, year in (
            ("Tuesday", existing.period_id, "2025"),
            ("Monday", uuid4(), "2025"),
            ("Monday", existing.period_id, "2026"),
        ):
            await timetable_service.check_conflicts(
                class_id=existing.class_id, teacher_id=existing.teacher_id, room_id=None,
                period_id=period_id, day_of_week=day, academic_year=year,
            )

    async def test_exclude_id_ignores_the_entry_itself(self, db_session, timetable_service: TimeTableService):
        existing = await _scheduled_entry(db_session, room_id=uuid4())

        await timetable_service.check_conflicts(
            class_id=existing.class_id, teacher_id=existing.teacher_id, room_id=existing.room_id,
            period_id=existing.period_id, day_of_week="Monday", academic_year="2025",
            exclude_id=existing.id,
        )

    async def test_inactive_entries_do_not_block(self, db_session, timetable_service: TimeTableService):
        existing = await _scheduled_entry(db_session, is_active=False)

        await timetable_service.check_conflicts(
            class_id=existing.class_id, teacher_id=existing.teacher_id, room_id=None,
            period_id=existing.period_id, day_of_week="Monday", academic_year="2025",
        )


@pytest.mark.anyio
class TestTimetableEntries:

    def _entry_payload(self, klass, subject, teacher, period, room=None, **overrides):
        data = dict(
            class_id=klass.id,
            subject_id=subject.id,
            teacher_id=teacher.id,
            period_id=period.id,
            day_of_week=DayOfWeek.MONDAY,
            academic_year="2025",
            room_id=room.id if room else None,
        )
        data.update(overrides)
        return timetable_models.TimetableEntryCreate(**data)

    async def test_create_entry_happy_path(
        self,
        timetable_service: TimeTableService,
        test_class_orm, test_subject_orm, test_teacher_orm, test_period_orm, test_room_orm
    ):
        print("\n--- Testing create_entry (Happy Path) ---")
        entry = await timetable_service.create_entry(self._entry_payload(
            test_class_orm, test_subject_orm, test_teacher_orm, test_period_orm, test_room_orm
        ))

        assert entry.id is not None
        assert entry.is_active is True
        assert entry.day_of_week == "Monday"
        pprint(timetable_models.TimetableEntryRead.model_validate(entry).model_dump())

    async def test_create_entry_double_booked_teacher(
        self,
        db_session,
        timetable_service: TimeTableService,
        test_class_orm, test_subject_orm, test_teacher_orm, test_period_orm
    ):
        await timetable_service.create_entry(self._entry_payload(
            test_class_orm, test_subject_orm, test_teacher_orm, test_period_orm
        ))
        other_class = factories.ClassFactory(name="Grade 6")
        await db_session.flush()

        with pytest.raises(HTTPException) as e:
            await timetable_service.create_entry(self._entry_payload(
                other_class, test_subject_orm, test_teacher_orm, test_period_orm
            ))
        assert e.value.status_code == 400
        assert e.value.detail == TEACHER_CONFLICT
        print(f"--- Correctly raised HTTPException: {e.value.status_code} ---")

    async def test_create_entry_unknown_teacher(
        self,
        timetable_service: TimeTableService,
        test_class_orm, test_subject_orm, test_period_orm
    ):
        payload = timetable_models.TimetableEntryCreate(
            class_id=test_class_orm.id, subject_id=test_subject_orm.id, teacher_id=uuid4(),
            period_id=test_period_orm.id, day_of_week=DayOfWeek.MONDAY, academic_year="2025",
        )
        with pytest.raises(HTTPException) as e:
            await timetable_service.create_entry(payload)
        assert e.value.status_code == 404
        assert e.value.detail == "Teacher not found"

    async def test_update_entry_into_its_own_slot(
        self,
        timetable_service: TimeTableService,
        test_class_orm, test_subject_orm, test_teacher_orm, test_period_orm, test_room_orm
    ):
        """Re-submitting the same slot must not clash with the entry itself."""
        entry = await timetable_service.create_entry(self._entry_payload(
            test_class_orm, test_subject_orm, test_teacher_orm, test_period_orm, test_room_orm
        ))

        updated = await timetable_service.update_entry(
            entry.id,
            timetable_models.TimetableEntryUpdate(teacher_id=test_teacher_orm.id, room_id=test_room_orm.id),
        )
        assert updated.id == entry.id

    async def test_update_entry_into_taken_room(
        self,
        db_session,
        timetable_service: TimeTableService,
        test_class_orm, test_subject_orm, test_teacher_orm, test_period_orm, test_room_orm
    ):
        await timetable_service.create_entry(self._entry_payload(
            test_class_orm, test_subject_orm, test_teacher_orm, test_period_orm, test_room_orm
        ))
        other_class = factories.ClassFactory(name="Grade 6")
        other_teacher = factories.TeacherFactory()
        await db_session.flush()
        other = await timetable_service.create_entry(self._entry_payload(
            other_class, test_subject_orm, other_teacher, test_period_orm
        ))

        with pytest.raises(HTTPException) as e:
            await timetable_service.update_entry(
                other.id, timetable_models.TimetableEntryUpdate(room_id=test_room_orm.id)
            )
        assert e.value.detail == ROOM_CONFLICT

    @pytest.mark.parametrize("field, label", [
        ("teacher_id", "Teacher"),
        ("subject_id", "Subject"),
        ("period_id", "Period"),
        ("room_id", "Room"),
    ])
    async def test_update_entry_with_unknown_reference(
        self,
        field, label,
        timetable_service: TimeTableService,
        test_class_orm, test_subject_orm, test_teacher_orm, test_period_orm
    ):
        entry = await timetable_service.create_entry(self._entry_payload(
            test_class_orm, test_subject_orm, test_teacher_orm, test_period_orm
        ))
        before = getattr(entry, field)

        with pytest.raises(HTTPException) as e:
            await timetable_service.update_entry(
                entry.id, timetable_models.TimetableEntryUpdate(**{field: uuid4()})
            )
        assert e.value.status_code == 404
        assert e.value.detail == f"{label} not found"

        assert getattr(entry, field) == before

    async def test_update_entry_without_fields(
        self,
        timetable_service: TimeTableService,
    ):
        with pytest.raises(HTTPException) as e:
            await timetable_service.update_entry(uuid4(), timetable_models.TimetableEntryUpdate())
        assert e.value.status_code == 400
        assert e.value.detail == "No fields to update"

    async def test_deleted_entry_frees_the_slot(
        self,
        timetable_service: TimeTableService,
        test_class_orm, test_subject_orm, test_teacher_orm, test_period_orm
    ):
        payload = self._entry_payload(test_class_orm, test_subject_orm, test_teacher_orm, test_period_orm)
        entry = await timetable_service.create_entry(payload)

        await timetable_service.delete_entry(entry.id)

        with pytest.raises(HTTPException) as e:
            await timetable_service.get_entry(entry.id)
        assert e.value.status_code == 404

        replacement = await timetable_service.create_entry(payload)
        assert replacement.id != entry.id

    async def test_list_entries_ordered_by_day_then_period(
        self,
        db_session,
        timetable_service: TimeTableService,
        test_class_orm, test_subject_orm, test_teacher_orm
    ):
        first = factories.PeriodFactory(period_number=1)
        second = factories.PeriodFactory(
            period_number=2, start_time=time(8, 40), end_time=time(9, 20)
        )
        await db_session.flush()
        for day, period in (("Wednesday", first), ("Monday", second), ("Monday", first)):
            await timetable_service.create_entry(self._entry_payload(
                test_class_orm, test_subject_orm, test_teacher_orm, period,
                day_of_week=DayOfWeek(day),
            ))

        entries = await timetable_service.list_entries(
            timetable_models.TimetableFilters(class_id=test_class_orm.id)
        )
        assert [(e.day_of_week, e.period_id) for e in entries] == [
            ("Monday", first.id), ("Monday", second.id), ("Wednesday", first.id)
        ]


@pytest.mark.anyio
class TestPeriodsAndRooms:

    async def test_duplicate_period_number(self, timetable_service: TimeTableService, test_period_orm):
        with pytest.raises(HTTPException) as e:
            await timetable_service.create_period(timetable_models.PeriodCreate(
                name="Duplicate", period_number=test_period_orm.period_number,
                start_time=time(9, 0), end_time=time(9, 40),
            ))
        assert e.value.status_code == 400
        assert e.value.detail == "Period number already exists"

    async def test_update_period_rejects_inverted_times(self, timetable_service: TimeTableService, test_period_orm):
        with pytest.raises(HTTPException) as e:
            await timetable_service.update_period(
                test_period_orm.id, timetable_models.PeriodUpdate(end_time=time(7, 0))
            )
        assert e.value.status_code == 400

    async def test_duplicate_room_number(self, timetable_service: TimeTableService, test_room_orm):
        with pytest.raises(HTTPException) as e:
            await timetable_service.create_room(timetable_models.RoomCreate(room_number=test_room_orm.room_number))
        assert e.value.detail == "Room number already exists"

        rooms = await timetable_service.list_rooms()
        assert [r.room_number for r in rooms] == [test_room_orm.room_number]


@pytest.mark.anyio
class TestSubstitutions:

    async def _monday_entry(self, db_session, teacher):
        period = factories.PeriodFactory(period_number=3)
        entry = factories.TimetableEntryFactory(teacher_id=teacher.id, period_id=period.id)
        substitute = factories.TeacherFactory()
        await db_session.flush()
        return entry, substitute

    async def test_create_substitution_happy_path(
        self, db_session, timetable_service: TimeTableService, test_teacher_orm
    ):
        entry, substitute = await self._monday_entry(db_session, test_teacher_orm)

        substitution = await timetable_service.create_substitution(timetable_models.SubstitutionCreate(
            timetable_entry_id=entry.id,
            substitute_teacher_id=substitute.id,
            date=date(2025, 3, 3), # a Monday
            reason="Sick leave",
        ))

        assert substitution.original_teacher_id == test_teacher_orm.id
        assert substitution.period_id == entry.period_id
        assert substitution.status == "pending"

        listed = await timetable_service.list_substitutions(on=date(2025, 3, 3), teacher_id=substitute.id)
        assert [s.id for s in listed] == [substitution.id]

    async def test_substitution_on_wrong_weekday(
        self, db_session, timetable_service: TimeTableService, test_teacher_orm
    ):
        entry, substitute = await self._monday_entry(db_session, test_teacher_orm)

        with pytest.raises(HTTPException) as e:
            await timetable_service.create_substitution(timetable_models.SubstitutionCreate(
                timetable_entry_id=entry.id,
                substitute_teacher_id=substitute.id,
                date=date(2025, 3, 4), # a Tuesday
            ))
        assert e.value.status_code == 400

    async def test_substitute_already_teaching(
        self, db_session, timetable_service: TimeTableService, test_teacher_orm
    ):
        entry, substitute = await self._monday_entry(db_session, test_teacher_orm)
        factories.TimetableEntryFactory(teacher_id=substitute.id, period_id=entry.period_id)
        await db_session.flush()

        with pytest.raises(HTTPException) as e:
            await timetable_service.create_substitution(timetable_models.SubstitutionCreate(
                timetable_entry_id=entry.id,
                substitute_teacher_id=substitute.id,
                date=date(2025, 3, 3),
            ))
        assert e.value.detail == "Substitute teacher is not available at this time"

    async def test_update_status(self, db_session, timetable_service: TimeTableService, test_teacher_orm):
        entry, substitute = await self._monday_entry(db_session, test_teacher_orm)
        substitution = await timetable_service.create_substitution(timetable_models.SubstitutionCreate(
            timetable_entry_id=entry.id, substitute_teacher_id=substitute.id, date=date(2025, 3, 10),
        ))

        updated = await timetable_service.update_substitution_status(substitution.id, "approved")
        assert updated.status == "approved"

        with pytest.raises(HTTPException) as e:
            await timetable_service.update_substitution_status(substitution.id, "done")
        assert e.value.detail == "Invalid status"
