import pytest
from pydantic import ValidationError as SchemaValidationError

from novalearn.core.errors import CourseNotFound, Forbidden, NotFound
from novalearn.models.course import Course
from novalearn.models.enrollment import Enrollment, LessonCompletion
from novalearn.models.quiz import Question, Quiz, QuizAttempt
from novalearn.models.user import ApplicationStatus, Role
from novalearn.schemas.courses import CourseCreateRequest, CourseUpdateRequest, LessonPayload, ReviewRequest
from novalearn.schemas.quizzes import QuestionPayload, QuizCreateRequest, QuizUpdateRequest
from novalearn.services import courses, enrollments, quiz_attempts, quizzes


@pytest.fixture
def instructor(make_user):
    return make_user(Role.INSTRUCTOR, application_status=ApplicationStatus.APPROVED)


def course_payload(**overrides) -> CourseCreateRequest:
    data = {
        'title': ' Incident Response ',
        'duration': 120,
        'lessons': [{'lesson_id': 'triage', 'title': 'Triage'}, {'title': 'Containment'}],
    }
    data.update(overrides)
    return CourseCreateRequest(**data)


def test_create_course_assigns_missing_lesson_ids(db, instructor) -> None:
    course = courses.create_course(db, instructor.id, course_payload())

    assert course.title == 'Incident Response'
    assert course.instructor_id == instructor.id
    assert course.lessons[0].lesson_id == 'triage'
    assert course.lessons[1].lesson_id


def test_update_keeps_existing_lesson_ids(db, instructor) -> None:
    course = courses.create_course(db, instructor.id, course_payload())
    generated = course.lessons[1].lesson_id

    updated = courses.update_owned_course(
        db,
        course.id,
        instructor.id,
        CourseUpdateRequest(
            lessons=[
                LessonPayload(lesson_id=generated, title='Containment and eradication'),
                LessonPayload(lesson_id='triage', title='Triage'),
            ]
        ),
    )

    assert [lesson.lesson_id for lesson in updated.lessons] == [generated, 'triage']
    assert updated.lessons[0].title == 'Containment and eradication'


def test_non_owner_cannot_modify_course(db, instructor, make_user) -> None:
    course = courses.create_course(db, instructor.id, course_payload())
    intruder = make_user(Role.INSTRUCTOR, application_status=ApplicationStatus.APPROVED)

    with pytest.raises(Forbidden):
        courses.update_owned_course(db, course.id, intruder.id, CourseUpdateRequest(title='Mine now'))
    with pytest.raises(Forbidden):
        courses.delete_owned_course(db, course.id, intruder.id)

    assert courses.get_course(db, course.id).title == 'Incident Response'


def test_missing_course_is_not_found(db, instructor) -> None:
    with pytest.raises(CourseNotFound):
        courses.update_owned_course(db, 404, instructor.id, CourseUpdateRequest(title='x'))


def test_owner_can_delete_course(db, instructor) -> None:
    course = courses.create_course(db, instructor.id, course_payload())

    courses.delete_owned_course(db, course.id, instructor.id)

    assert db.query(Course).count() == 0


def test_public_listing_searches_titles(db, instructor) -> None:
    courses.create_course(db, instructor.id, course_payload(title='Malware Analysis'))
    courses.create_course(db, instructor.id, course_payload(title='Cloud Basics'))

    items, total, _, _ = courses.list_public_courses(db, search='malware')

    assert total == 1
    assert items[0].title == 'Malware Analysis'


def test_add_review_appends_to_course(db, instructor, make_user) -> None:
    course = courses.create_course(db, instructor.id, course_payload())
    student = make_user()

    updated = courses.add_review(db, student.id, course.id, ReviewRequest(rating=4, comment=' Solid '))

    assert [(review.student_id, review.rating, review.comment) for review in updated.reviews] == [
        (student.id, 4, 'Solid')
    ]


@pytest.mark.parametrize('rating', [0, 6])
def test_review_rating_bounds(rating) -> None:
    with pytest.raises(SchemaValidationError):
        ReviewRequest(rating=rating)


def test_duplicate_lesson_ids_are_rejected() -> None:
    with pytest.raises(SchemaValidationError):
        course_payload(lessons=[{'lesson_id': 'a', 'title': 'A'}, {'lesson_id': 'a', 'title': 'B'}])


def quiz_payload(course_id: int, **overrides) -> QuizCreateRequest:
    data = {
        'course_id': course_id,
        'title': 'Checkpoint',
        'passing_score': 60,
        'questions': [
            {'text': 'Pick the hash', 'options': ['AES', 'SHA-256'], 'correct_answers': 'SHA-256'},
            {'text': 'Pick ciphers', 'options': ['AES', 'RSA', 'MD5'], 'correct_answers': ['AES', 'RSA'], 'points': 2},
        ],
    }
    data.update(overrides)
    return QuizCreateRequest(**data)


def test_create_quiz_for_owned_course(db, instructor) -> None:
    course = courses.create_course(db, instructor.id, course_payload())

    quiz = quizzes.create_quiz(db, instructor.id, quiz_payload(course.id))

    assert quiz.course_id == course.id
    assert [question.correct_answers for question in quiz.questions] == [['SHA-256'], ['AES', 'RSA']]
    assert [question.points for question in quiz.questions] == [1, 2]
    assert [item.id for item in quizzes.list_course_quizzes(db, course.id)] == [quiz.id]


def test_cannot_add_quiz_to_someone_elses_course(db, instructor, make_user) -> None:
    course = courses.create_course(db, instructor.id, course_payload())
    other = make_user(Role.INSTRUCTOR, application_status=ApplicationStatus.APPROVED)

    with pytest.raises(Forbidden):
        quizzes.create_quiz(db, other.id, quiz_payload(course.id))

    assert db.query(Quiz).count() == 0


def test_correct_answers_must_be_options() -> None:
    with pytest.raises(SchemaValidationError):
        QuestionPayload(text='Q', options=['A', 'B'], correct_answers=['C'])


def test_repeated_correct_answers_are_collapsed() -> None:
    question = QuestionPayload(text='Q', options=['A', 'B'], correct_answers=['B', 'A', 'B'])

    assert question.correct_answers == ['B', 'A']


def test_update_quiz_can_clear_passing_score(db, instructor) -> None:
    course = courses.create_course(db, instructor.id, course_payload())
    quiz = quizzes.create_quiz(db, instructor.id, quiz_payload(course.id))

    updated = quizzes.update_owned_quiz(db, quiz.id, instructor.id, QuizUpdateRequest(passing_score=None))

    assert updated.passing_score is None
    assert updated.title == 'Checkpoint'


def test_quiz_ownership_is_enforced(db, instructor, make_user) -> None:
    course = courses.create_course(db, instructor.id, course_payload())
    quiz = quizzes.create_quiz(db, instructor.id, quiz_payload(course.id))
    other = make_user(Role.INSTRUCTOR, application_status=ApplicationStatus.APPROVED)

    with pytest.raises(Forbidden):
        quizzes.delete_owned_quiz(db, quiz.id, other.id)
    with pytest.raises(NotFound):
        quizzes.delete_owned_quiz(db, quiz.id + 100, instructor.id)

    quizzes.delete_owned_quiz(db, quiz.id, instructor.id)
    assert db.query(Quiz).count() == 0


def test_admin_hard_delete(db, instructor) -> None:
    course = courses.create_course(db, instructor.id, course_payload())
    quiz = quizzes.create_quiz(db, instructor.id, quiz_payload(course.id))

    quizzes.hard_delete_quiz(db, quiz.id)

    with pytest.raises(NotFound):
        quizzes.get_quiz(db, quiz.id)


def course_with_activity(db, instructor, student):
    course = courses.create_course(db, instructor.id, course_payload())
    quiz = quizzes.create_quiz(db, instructor.id, quiz_payload(course.id))
    enrollments.enroll(db, student.id, course.id)
    enrollments.mark_lesson_completed(db, student.id, course.id, 'triage')
    quiz_attempts.submit(db, student.id, quiz.id, [])
    return course


def assert_course_gone(db, course_id: int) -> None:
    assert db.query(Course).filter(Course.id == course_id).count() == 0
    for model in (Quiz, Question, QuizAttempt, Enrollment, LessonCompletion):
        assert db.query(model).count() == 0


def test_owner_can_delete_course_with_quiz_attempts(db, instructor, make_user) -> None:
    course = course_with_activity(db, instructor, make_user())

    courses.delete_owned_course(db, course.id, instructor.id)

    assert_course_gone(db, course.id)


def test_admin_removes_course_and_its_activity(db, instructor, make_user) -> None:
    course = course_with_activity(db, instructor, make_user())

    courses.hard_delete_course(db, course.id)

    assert_course_gone(db, course.id)
    with pytest.raises(CourseNotFound):
        courses.hard_delete_course(db, course.id)
