import os

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

from novalearn.auth.passwords import hash_password  # noqa: E402
from novalearn.database import Base, init_db  # noqa: E402
from novalearn.models.course import Course, Lesson  # noqa: E402
from novalearn.models.user import ApplicationStatus, InstructorApplication, Role, User  # noqa: E402

DEFAULT_PASSWORD = 'correct-horse'


@pytest.fixture
def engine():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, 'connect')
    def enforce_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute('PRAGMA foreign_keys=ON')
        cursor.close()

    init_db(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db):
    counter = {'value': 0}

    def _make_user(role: Role = Role.STUDENT, email: str | None = None, application_status=None, **application):
        counter['value'] += 1
        user = User(
            name=f'User {counter["value"]}',
            email=email or f'user{counter["value"]}@example.edu',
            hashed_password=hash_password(DEFAULT_PASSWORD),
            role=Role(role).value,
        )
        if application_status is not None:
            user.application = InstructorApplication(
                status=ApplicationStatus(application_status).value,
                biography=application.get('biography'),
                expertise=application.get('expertise', []),
                documents=application.get('documents', []),
            )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_course(db, make_user):
    def _make_course(instructor: User | None = None, lesson_ids=('intro', 'basics', 'wrap-up'), title='Network Security'):
        instructor = instructor or make_user(Role.INSTRUCTOR, application_status=ApplicationStatus.APPROVED)
        course = Course(
            title=title,
            duration=90,
            instructor_id=instructor.id,
            materials=[],
            lessons=[
                Lesson(lesson_id=lesson_id, position=position, title=lesson_id.title())
                for position, lesson_id in enumerate(lesson_ids)
            ],
        )
        db.add(course)
        db.commit()
        db.refresh(course)
        return course

    return _make_course


@pytest.fixture
def default_password() -> str:
    return DEFAULT_PASSWORD
