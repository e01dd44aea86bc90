from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker

from novalearn.core import config


engine = create_engine(config.DATABASE_URL, echo=config.SQL_ECHO)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_uniqueness_checked = False

# Tables created before the unique constraints existed only get them through
# these indexes; create_all never alters an existing table.
UNIQUE_INDEXES = [
    ('enrollments', 'uq_enrollments_student_course', '(student_id, course_id)'),
    ('lesson_completions', 'uq_lesson_completions_student_lesson', '(student_id, course_id, lesson_id)'),
    ('instructor_applications', 'uq_instructor_applications_user', '(user_id)'),
    ('lessons', 'uq_lessons_course_lesson', '(course_id, lesson_id)'),
]


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None) -> None:
    from novalearn.models import course, enrollment, quiz, user  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


def ensure_uniqueness_schema(bind=None) -> None:
    global _uniqueness_checked

    if _uniqueness_checked and bind is None:
        return

    target = bind or engine

    with _schema_lock:
        if _uniqueness_checked and bind is None:
            return

        existing_tables = set(inspect(target).get_table_names())

        with target.begin() as connection:
            for table_name, index_name, columns in UNIQUE_INDEXES:
                if table_name not in existing_tables:
                    continue
                connection.execute(
                    text(f'CREATE UNIQUE INDEX IF NOT EXISTS {index_name} ON {table_name}{columns}')
                )

        if bind is None:
            _uniqueness_checked = True


_user_schema_checked = False


def ensure_user_schema(bind=None) -> None:
    global _user_schema_checked

    if _user_schema_checked and bind is None:
        return

    target = bind or engine

    with _schema_lock:
        if _user_schema_checked and bind is None:
            return

        inspector = inspect(target)

        if 'users' not in inspector.get_table_names():
            if bind is None:
                _user_schema_checked = True
            return

        existing_columns = {column['name'] for column in inspector.get_columns('users')}
        migration_steps = [
            ('reset_token_hash', 'ALTER TABLE users ADD COLUMN reset_token_hash VARCHAR'),
            ('reset_token_expires_at', 'ALTER TABLE users ADD COLUMN reset_token_expires_at TIMESTAMP WITH TIME ZONE'),
        ]

        with target.begin() as connection:
            for column_name, statement in migration_steps:
                if column_name not in existing_columns:
                    connection.execute(text(statement))

        if bind is None:
            _user_schema_checked = True
