"""Public catalogue: courses and quizzes are readable without signing in.

Quiz views here never include the correct answers.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from novalearn.database import get_db
from novalearn.schemas.courses import CoursePage, CourseResponse
from novalearn.schemas.quizzes import QuizResponse
from novalearn.services import courses, quizzes

router = APIRouter(tags=['courses'])
quiz_router = APIRouter(tags=['quizzes'])


@router.get('', response_model=CoursePage)
def list_courses(
    search: str | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int | None = Query(default=None, ge=1),
    db: Session = Depends(get_db),
):
    items, total, page, limit = courses.list_public_courses(db, search=search, page=page, limit=limit)
    return CoursePage(page=page, limit=limit, total=total, items=items)


@router.get('/{course_id}', response_model=CourseResponse)
def get_course(course_id: int, db: Session = Depends(get_db)):
    return courses.get_course(db, course_id)


@router.get('/{course_id}/quizzes', response_model=list[QuizResponse])
def list_course_quizzes(course_id: int, db: Session = Depends(get_db)):
    courses.get_course(db, course_id)
    return quizzes.list_course_quizzes(db, course_id)


@quiz_router.get('/{quiz_id}', response_model=QuizResponse)
def get_quiz(quiz_id: int, db: Session = Depends(get_db)):
    return quizzes.get_quiz(db, quiz_id)
