import logging
from typing import Iterable, Optional

from pydantic import BaseModel
from sqlalchemy.orm import Session

from .exceptions import MissingQuestionsError
from .scoring import score
from .store import AssessmentKind, GradeStore, QuestionReader
from .submissions import load_submission

logger = logging.getLogger(__name__)


class ReconcileReport(BaseModel):
    inspected: int = 0
    corrected: int = 0
    unchanged: int = 0
    errored: int = 0


def _reconcile_one(store: GradeStore, reader: QuestionReader, row) -> bool:
    """Recompute one grade, overwrite it when it drifted. Returns True if corrected."""
    assessment_id = getattr(row, store.tables.foreign_key)

    submission = load_submission(row.student_answers)
    questions = reader.get_questions(store.kind, assessment_id)
    if not questions:
        raise MissingQuestionsError(f"No questions found for {store.kind.value} {assessment_id}")

    result = score(questions, submission)

    if (result.earned, result.max_score, result.percentage) == (row.score, row.max_score, row.percentage):
        return False

    logger.info(
        "Correcting %s grade %s (student %s): %s/%s (%s%%) -> %s/%s (%s%%)",
        store.kind.value, row.id, row.student_id,
        row.score, row.max_score, row.percentage,
        result.earned, result.max_score, result.percentage,
    )
    store.update_score(row, result)
    return True


def reconcile_all(db: Session, kinds: Optional[Iterable[AssessmentKind]] = None) -> ReconcileReport:
    """
    Recompute every grade that kept its submission and fix the ones that drifted.

    Each record is its own unit of work: a failure is logged, rolled back and
    counted, and the batch moves on to the next record.
    """
    report = ReconcileReport()
    reader = QuestionReader(db)

    for kind in kinds or list(AssessmentKind):
        store = GradeStore(db, kind)

        for row in store.with_submissions():
            report.inspected += 1
            grade_id = row.id
            try:
                if _reconcile_one(store, reader, row):
                    report.corrected += 1
                else:
                    report.unchanged += 1
            except Exception:
                db.rollback()
                report.errored += 1
                logger.exception("Failed to reconcile %s grade %s", kind.value, grade_id)

    logger.info(
        "Reconciliation finished: %s inspected, %s corrected, %s unchanged, %s errored",
        report.inspected, report.corrected, report.unchanged, report.errored,
    )
    return report
