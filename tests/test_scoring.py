import pytest
from pydantic import ValidationError as ModelValidationError

from grading.scoring import Question, coerce_answer, compute_percentage, is_correct, score


def q(question_id, correct, points=1):
    return Question(id=question_id, prompt=f"Q{question_id}", correct_answer=correct, points=points)


def test_example_half_correct():
    questions = [q(1, 1), q(2, 2)]

    result = score(questions, {"1": 1, "2": 3})

    assert (result.earned, result.max_score, result.percentage) == (1, 2, 50)
    assert result.correct_count == 1


def test_int_keyed_submission_is_accepted():
    result = score([q(1, 1), q(2, 2)], {1: 1, 2: 2})
    assert result.percentage == 100


def test_empty_question_set_scores_zero():
    result = score([], {"1": 1})
    assert (result.earned, result.max_score, result.percentage) == (0, 0, 0)


def test_unanswered_questions_never_count():
    questions = [q(1, 0, points=3), q(2, 1, points=2)]

    result = score(questions, {"2": 1})

    assert result.earned == 2
    assert result.max_score == 5
    assert result.percentage == 40


def test_points_are_weighted():
    questions = [q(1, 0, points=5), q(2, 0, points=1)]
    assert score(questions, {"1": 0}).percentage == 83


@pytest.mark.parametrize("correct,answer", [
    ("B", 1),
    ("B", "b"),
    ("b", "B"),
    (1, "B"),
    (3, "D"),
    (2, "2"),
    (0, " A "),
])
def test_letters_and_indices_compare_equal(correct, answer):
    assert is_correct(q(1, correct), answer)


@pytest.mark.parametrize("answer", [None, "", "banana", "E", True, [], {}, 1.5])
def test_invalid_answers_are_incorrect_without_raising(answer):
    assert not is_correct(q(1, 1), answer)


def test_invalid_correct_answer_never_matches():
    assert not is_correct(q(1, "Z"), None)
    assert not is_correct(q(1, "Z"), "Z")


def test_coerce_answer():
    assert coerce_answer(" 2 ") == 2
    assert coerce_answer("d") == 3
    assert coerce_answer(2.0) == 2
    assert coerce_answer(2.5) is None
    assert coerce_answer(False) is None
    assert coerce_answer(object()) is None


def test_percentage_rounds_half_up():
    assert compute_percentage(1, 8) == 13  # 12.5
    assert compute_percentage(1, 3) == 33
    assert compute_percentage(2, 3) == 67
    assert compute_percentage(0, 0) == 0


def test_percentage_bounds_and_formula():
    for max_points in range(1, 13):
        questions = [q(i, 0) for i in range(1, max_points + 1)]
        for answered in range(0, max_points + 1):
            submission = {str(i): 0 for i in range(1, answered + 1)}
            result = score(questions, submission)

            assert 0 <= result.percentage <= 100
            assert result.earned == answered
            assert result.percentage == compute_percentage(answered, max_points)
            assert abs(result.percentage - answered / max_points * 100) <= 0.5


@pytest.mark.parametrize("points", [0, -1])
def test_question_points_must_be_positive(points):
    with pytest.raises(ModelValidationError):
        Question(id=1, correct_answer=0, points=points)
