#!/usr/bin/env python3
"""Recount reaction counters that drifted from the reaction ledger."""
import logging
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.core.config import settings
from app.core.database import SessionLocal
from app.models import TargetType
from app.services.reaction_service import ReactionService

logger = logging.getLogger("reconcile_reaction_counts")


def reconcile():
    """Recount drifted posts and comments. Returns the number corrected."""
    db = SessionLocal()
    try:
        service = ReactionService(db)
        corrected = 0
        for target_type in TargetType:
            fixed = service.reconcile_all(target_type)
            logger.info("%s: %s counter(s) corrected", target_type.value, fixed)
            corrected += fixed
        return corrected
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level=settings.LOG_LEVEL, format="%(levelname)s [%(name)s] %(message)s")
    total = reconcile()
    print(f"Reconciliation finished: {total} counter(s) corrected")
