'''
Pytest configuration for the FastAPI application.

This file sets up fixtures for:
1. A fresh in-memory SQLite database (schema built from the ORM models) per test.
2. A database session bound to it, shared by factories, services and the API client.
3. Instances of all service classes, pre-injected with the test db session.
4. An httpx AsyncClient talking to the app with `get_db_session` overridden.
'''
import os

# Force test mode before any application code reads the settings.
os.environ["TEST_MODE"] = "True"

import pytest
import datetime
from typing import AsyncGenerator

import httpx
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from school_admin_backend.main import app
from school_admin_backend.common.config import settings
from school_admin_backend.database.engine import get_db_session
from school_admin_backend.database import models as db_models
from school_admin_backend.services.sequence_service import SequenceService
from school_admin_backend.services.communication_service import CommunicationService
from school_admin_backend.services.timetable_service import TimeTableService
from school_admin_backend.services.fee_service import FeeService
from school_admin_backend.services.user_service import ParentService, StudentService, TeacherService
from school_admin_backend.services.class_service import ClassService
from school_admin_backend.services.attendance_service import AttendanceService
from school_admin_backend.services.exam_service import ExamService

from tests.database import factories


@pytest.fixture(scope="session")
def anyio_backend():
    """
    Forces the backend to 'asyncio' and promotes the scope to 'session'.
    """
    return "asyncio"


# --- 1. Engine & Session ---

@pytest.fixture(scope="function")
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """
    A private in-memory database for one test. pysqlite's own transaction
    handling is disabled so SAVEPOINTs behave as on PostgreSQL.
    """
    assert settings.TEST_MODE is True, "TEST_MODE was not set to True!"

    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(test_engine.sync_engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(test_engine.sync_engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with test_engine.begin() as conn:
        await conn.run_sync(db_models.Base.metadata.create_all)

    yield test_engine
    await test_engine.dispose()


@pytest.fixture(scope="function")
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    session = session_factory()
    factories.test_db_session = session
    try:
        yield session
    finally:
        factories.test_db_session = None
        await session.rollback()
        await session.close()


@pytest.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[httpx.AsyncClient, None]:
    """
    Drives the app in-process. Every request reuses the test's session,
    so rows created by factories are visible to the endpoints and the
    effects of a request are visible to the test afterwards.
    """
    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db_session] = override_get_db_session
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as test_client:
        yield test_client
    app.dependency_overrides.clear()


# --- 2. SERVICE FIXTURES ---

@pytest.fixture(scope="function")
def sequence_service(db_session: AsyncSession) -> SequenceService:
    return SequenceService(db=db_session)

@pytest.fixture(scope="function")
def communication_service(db_session: AsyncSession) -> CommunicationService:
    return CommunicationService(db=db_session)

@pytest.fixture(scope="function")
def timetable_service(db_session: AsyncSession) -> TimeTableService:
    return TimeTableService(db=db_session)

@pytest.fixture(scope="function")
def fee_service(
    db_session: AsyncSession,
    sequence_service: SequenceService,
    communication_service: CommunicationService,
) -> FeeService:
    return FeeService(
        db=db_session,
        sequence_service=sequence_service,
        communication_service=communication_service,
    )

@pytest.fixture(scope="function")
def parent_service(db_session: AsyncSession) -> ParentService:
    return ParentService(db=db_session)

@pytest.fixture(scope="function")
def student_service(db_session: AsyncSession, sequence_service: SequenceService) -> StudentService:
    return StudentService(db=db_session, sequence_service=sequence_service)

@pytest.fixture(scope="function")
def teacher_service(db_session: AsyncSession, sequence_service: SequenceService) -> TeacherService:
    return TeacherService(db=db_session, sequence_service=sequence_service)

@pytest.fixture(scope="function")
def class_service(db_session: AsyncSession) -> ClassService:
    return ClassService(db=db_session)

@pytest.fixture(scope="function")
def attendance_service(
    db_session: AsyncSession, communication_service: CommunicationService
) -> AttendanceService:
    return AttendanceService(db=db_session, communication_service=communication_service)

@pytest.fixture(scope="function")
def exam_service(db_session: AsyncSession) -> ExamService:
    return ExamService(db=db_session)


# --- 3. DATA FIXTURES ---

@pytest.fixture(scope="function")
async def test_class_orm(db_session: AsyncSession) -> db_models.Classes:
    klass = factories.ClassFactory(name="Grade 5", section="A")
    await db_session.flush()
    return klass

@pytest.fixture(scope="function")
async def test_parent_orm(db_session: AsyncSession) -> db_models.Parents:
    parent = factories.ParentFactory()
    await db_session.flush()
    return parent

@pytest.fixture(scope="function")
async def test_student_orm(
    db_session: AsyncSession,
    test_class_orm: db_models.Classes,
    test_parent_orm: db_models.Parents,
) -> db_models.Students:
    student = factories.StudentFactory(
        class_id=test_class_orm.id, parent_id=test_parent_orm.id
    )
    await db_session.flush()
    return student

@pytest.fixture(scope="function")
async def test_teacher_orm(db_session: AsyncSession) -> db_models.Teachers:
    teacher = factories.TeacherFactory()
    await db_session.flush()
    return teacher

@pytest.fixture(scope="function")
async def test_subject_orm(db_session: AsyncSession) -> db_models.Subjects:
    subject = factories.SubjectFactory(name="Mathematics")
    await db_session.flush()
    return subject

@pytest.fixture(scope="function")
async def test_period_orm(db_session: AsyncSession) -> db_models.Periods:
    period = factories.PeriodFactory(
        period_number=1, start_time=datetime.time(8, 0), end_time=datetime.time(8, 40)
    )
    await db_session.flush()
    return period

@pytest.fixture(scope="function")
async def test_room_orm(db_session: AsyncSession) -> db_models.Rooms:
    room = factories.RoomFactory(room_number="101")
    await db_session.flush()
    return room
