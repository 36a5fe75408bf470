"""
Recompute every stored quiz/workshop grade from its retained answers and
overwrite the ones that no longer match the current questions.

    python recalculate_grades.py              # quizzes and workshops
    python recalculate_grades.py quiz         # one kind only
"""

import logging
import sys

from db.database import Base, SessionLocal, engine
from grading.config import LOG_LEVEL
from grading.reconcile import reconcile_all
from grading.store import AssessmentKind

logger = logging.getLogger("recalculate_grades")


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else argv

    try:
        kinds = [AssessmentKind(arg) for arg in argv] or None
    except ValueError:
        print(f"Usage: python recalculate_grades.py [{' | '.join(k.value for k in AssessmentKind)}]")
        return 2

    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        logger.info("Starting grade recalculation...")
        report = reconcile_all(db, kinds)
    finally:
        db.close()

    print("Recalculation finished:")
    print(f"   inspected: {report.inspected}")
    print(f"   corrected: {report.corrected}")
    print(f"   unchanged: {report.unchanged}")
    print(f"   errored:   {report.errored}")
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(message)s")
    sys.exit(main())
