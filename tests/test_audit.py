import pytest

from db.models.grades import QuizGrade
from db.models.quizzes import QuizQuestion
from grading.attempts import submit_once
from grading.audit import audit, audit_grade
from grading.exceptions import GradeNotFoundError
from grading.scoring import Question
from grading.store import AssessmentKind, GradeRecord, GradeStore, QuestionReader


def submit(db, student_id, quiz_id, answers):
    questions = QuestionReader(db).get_questions(AssessmentKind.QUIZ, quiz_id)
    return submit_once(GradeStore(db, AssessmentKind.QUIZ), student_id, quiz_id, questions, answers)


def test_audit_matches_stored_grade(db, make_user, make_quiz):
    student = make_user()
    quiz_id, (q1, q2, q3) = make_quiz([1, 2, 0])
    record = submit(db, student.id, quiz_id, {q1: 1, q2: 0})

    result = audit_grade(db, AssessmentKind.QUIZ, record.id)

    assert result.is_calculation_correct
    assert result.percentage_delta == 0
    assert result.score_delta == 0
    assert result.submission_valid
    assert result.calculated_results.percentage == 33
    assert result.summary.total_questions == 3
    assert result.summary.correct_answers == 1
    assert result.summary.incorrect_answers == 2
    assert result.summary.unanswered == 1

    first = result.questions_audit[0]
    assert first.question_id == q1
    assert first.question == "Question 1"
    assert first.student_answer == 1
    assert first.is_correct
    assert first.points_earned == 1

    third = result.questions_audit[2]
    assert not third.answered
    assert third.student_answer is None
    assert third.points_earned == 0


def test_audit_reports_drift_after_question_edit(db, make_user, make_quiz):
    student = make_user()
    quiz_id, (q1, q2) = make_quiz([1, 2])
    record = submit(db, student.id, quiz_id, {q1: 1, q2: 2})
    assert record.percentage == 100

    question = db.query(QuizQuestion).filter(QuizQuestion.id == q2).first()
    question.correct_answer = 3
    db.commit()

    result = audit_grade(db, AssessmentKind.QUIZ, record.id)

    assert not result.is_calculation_correct
    assert result.stored_results.percentage == 100
    assert result.calculated_results.percentage == 50
    assert result.percentage_delta == -50
    assert result.score_delta == -1

    # audit never writes
    stored = db.query(QuizGrade).filter(QuizGrade.id == record.id).first()
    assert (stored.score, stored.percentage) == (2, 100)


def test_audit_malformed_submission_is_surfaced(db, make_user, make_quiz):
    student = make_user()
    quiz_id, _ = make_quiz([0, 0])
    row = QuizGrade(
        student_id=student.id,
        quiz_id=quiz_id,
        score=2,
        max_score=2,
        percentage=100,
        attempt_number=1,
        student_answers="{not json",
    )
    db.add(row)
    db.commit()

    result = audit_grade(db, AssessmentKind.QUIZ, row.id)

    assert not result.submission_valid
    assert result.calculated_results.earned == 0
    assert result.summary.unanswered == 2
    assert not result.is_calculation_correct


def test_audit_accepts_structured_submission():
    grade = GradeRecord(
        id=1,
        kind=AssessmentKind.WORKSHOP,
        student_id=1,
        assessment_id=1,
        score=1,
        max_score=2,
        percentage=50,
        attempt_number=1,
        student_answers={"10": "A", "11": "C"},
    )
    questions = [
        Question(id=10, prompt="first", correct_answer="A"),
        Question(id=11, prompt="second", correct_answer="B"),
    ]

    result = audit(grade, questions)

    assert result.is_calculation_correct
    assert [q.is_correct for q in result.questions_audit] == [True, False]
    assert result.summary.unanswered == 0


def test_audit_without_questions_does_not_divide_by_zero():
    grade = GradeRecord(
        id=1, kind=AssessmentKind.QUIZ, student_id=1, assessment_id=1,
        score=0, max_score=0, percentage=0, attempt_number=1, student_answers="{}",
    )

    result = audit(grade, [])

    assert result.calculated_results.percentage == 0
    assert result.is_calculation_correct
    assert result.summary.total_questions == 0


def test_audit_unknown_grade(db):
    with pytest.raises(GradeNotFoundError):
        audit_grade(db, AssessmentKind.QUIZ, 999)
