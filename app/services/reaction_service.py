"""Reaction ledger service."""
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import ConflictError, NotFoundError
from app.models.reaction import Reaction, TargetType
from app.repositories.reaction_repository import ReactionRepository
from app.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


class ReactionService:
    """
    Reaction business logic.

    A reaction row and the matching reaction_count delta are always written
    in the same transaction; ``recount`` rebuilds a counter from the ledger.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = ReactionRepository(db)
        self.notifier = NotificationService(db)

    def _ensure_target(self, target_type: TargetType, target_id: int) -> None:
        if self.repo.get_counter(target_type, target_id) is None:
            raise NotFoundError(f"{target_type.value.capitalize()} not found")

    def toggle_reaction(self, target_type: TargetType, target_id: int, user_id: int,
                        kind: str = "like", verify_target: bool = False) -> dict:
        """
        Add the user's reaction, or remove it if one already exists.

        Returns ``{"action": "added" | "removed", "reaction": Reaction | None}``.

        Raises:
            NotFoundError: If the target does not exist
            ConflictError: If a concurrent toggle by the same user won the race
        """
        if verify_target:
            self._ensure_target(target_type, target_id)

        existing = self.repo.get(target_type, target_id, user_id)
        try:
            if existing is not None:
                # Zero rows deleted means a concurrent remover already
                # applied the decrement.
                if self.repo.remove(existing.id):
                    if not self.repo.adjust_counter(target_type, target_id, -1):
                        raise NotFoundError(f"{target_type.value.capitalize()} not found")
                self.db.commit()
                return {"action": "removed", "reaction": None}

            reaction = self.repo.add(target_type, target_id, user_id, kind)
            if not self.repo.adjust_counter(target_type, target_id, 1):
                raise NotFoundError(f"{target_type.value.capitalize()} not found")
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.info(
                "Concurrent reaction toggle on %s:%s by user %s", target_type.value, target_id, user_id
            )
            raise ConflictError("Reaction was changed concurrently, please retry")
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(reaction)
        self.notifier.reaction_added(reaction)
        return {"action": "added", "reaction": reaction}

    def remove_reaction(self, target_type: TargetType, target_id: int, user_id: int) -> None:
        """
        Remove the user's reaction unconditionally.

        Raises:
            NotFoundError: If the user has no reaction on the target
        """
        reaction = self.repo.get(target_type, target_id, user_id)
        if reaction is None:
            raise NotFoundError("Reaction not found")
        try:
            if not self.repo.remove(reaction.id):
                raise NotFoundError("Reaction not found")
            self.repo.adjust_counter(target_type, target_id, -1)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def get_user_reaction(self, target_type: TargetType, target_id: int,
                          user_id: int) -> Optional[Reaction]:
        return self.repo.get(target_type, target_id, user_id)

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    def recount(self, target_type: TargetType, target_id: int) -> int:
        """
        Reset a target's reaction_count to its live ledger count.

        Safe to run at any time. Returns the new count.

        Raises:
            NotFoundError: If the target does not exist
        """
        try:
            if not self.repo.recount(target_type, target_id):
                raise NotFoundError(f"{target_type.value.capitalize()} not found")
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return self.repo.get_counter(target_type, target_id)

    def reconcile_all(self, target_type: TargetType) -> int:
        """Recount every drifted target of a kind. Returns how many were corrected."""
        drifted = self.repo.find_drifted(target_type)
        for target_id, stored, live in drifted:
            logger.warning(
                "Counter drift on %s:%s (stored=%s, live=%s)", target_type.value, target_id, stored, live
            )
            self.recount(target_type, target_id)
        return len(drifted)
