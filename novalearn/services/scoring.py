"""Quiz grading.

Answers are correlated to questions by question id, never by position. A
question earns its points only when the set of submitted keys equals the set
of correct keys (case-sensitive). Order and repeated keys are ignored; a
missing or extra key earns nothing, there is no partial credit.

Scores are always expressed as a percentage of the quiz's total points, and a
quiz's ``passing_score`` is read on the same 0-100 scale. A quiz without a
passing score passes every attempt.

``grade`` holds no state and only reads its arguments, so it is safe to call
concurrently from any number of requests.
"""

from collections.abc import Sequence

from novalearn.core.errors import ValidationError
from novalearn.models.quiz import Quiz
from novalearn.schemas.quizzes import GradeResult, QuestionResult, SubmittedAnswer

DEFAULT_QUESTION_POINTS = 1


def answers_match(correct: Sequence[str], submitted: Sequence[str]) -> bool:
    return set(correct) == set(submitted)


def index_submission(quiz: Quiz, submitted: Sequence[SubmittedAnswer]) -> dict[int, list[str]]:
    known_ids = {question.id for question in quiz.questions}
    by_question: dict[int, list[str]] = {}

    for answer in submitted:
        if answer.question_id not in known_ids:
            raise ValidationError(f'Question {answer.question_id} is not part of this quiz.')
        if answer.question_id in by_question:
            raise ValidationError(f'Question {answer.question_id} was answered more than once.')
        by_question[answer.question_id] = list(answer.answers)

    return by_question


def percentage(earned: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return earned / total * 100


def grade(quiz: Quiz, submitted: Sequence[SubmittedAnswer]) -> GradeResult:
    by_question = index_submission(quiz, submitted)

    earned_points = 0
    total_points = 0
    results: list[QuestionResult] = []

    for question in quiz.questions:
        points = question.points if question.points is not None else DEFAULT_QUESTION_POINTS
        total_points += points

        given = by_question.get(question.id, [])
        correct = bool(given) and answers_match(question.correct_answers or [], given)
        awarded = points if correct else 0
        earned_points += awarded

        results.append(
            QuestionResult(
                question_id=question.id,
                correct=correct,
                points_awarded=awarded,
                points_possible=points,
            )
        )

    score = percentage(earned_points, total_points)
    passing_score = quiz.passing_score or 0

    return GradeResult(
        score=score,
        passed=score >= passing_score,
        earned_points=earned_points,
        total_points=total_points,
        results=results,
    )
