"""Reaction ledger repository.

Nothing here commits: the reaction row and its counter delta belong to one
unit of work owned by ``ReactionService``.
"""
from typing import Optional, List, Tuple
from sqlalchemy.orm import Session
from sqlalchemy import select, update, func

from app.models.post import Post, Comment
from app.models.reaction import Reaction, TargetType

# Entity holding the reaction_count for each target kind
COUNTER_MODELS = {
    TargetType.POST: Post,
    TargetType.COMMENT: Comment,
}


class ReactionRepository:
    """Reaction data access layer."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, target_type: TargetType, target_id: int, user_id: int) -> Optional[Reaction]:
        """Live reaction of a user on a target, if any."""
        return (
            self.db.query(Reaction)
            .filter(
                Reaction.target_type == target_type,
                Reaction.target_id == target_id,
                Reaction.user_id == user_id,
            )
            .first()
        )

    def add(self, target_type: TargetType, target_id: int, user_id: int, kind: str) -> Reaction:
        """Stage a reaction row. Raises IntegrityError if the triple already exists."""
        reaction = Reaction(target_type=target_type, target_id=target_id, user_id=user_id, type=kind)
        self.db.add(reaction)
        self.db.flush()
        return reaction

    def remove(self, reaction_id: int) -> bool:
        """Delete a reaction row. False when another writer already removed it."""
        deleted = (
            self.db.query(Reaction)
            .filter(Reaction.id == reaction_id)
            .delete(synchronize_session=False)
        )
        return deleted == 1

    def adjust_counter(self, target_type: TargetType, target_id: int, delta: int) -> bool:
        """Atomic ``reaction_count = reaction_count + delta``. False when the target is missing."""
        model = COUNTER_MODELS[target_type]
        updated = (
            self.db.query(model)
            .filter(model.id == target_id)
            .update({model.reaction_count: model.reaction_count + delta}, synchronize_session=False)
        )
        return updated == 1

    def get_counter(self, target_type: TargetType, target_id: int) -> Optional[int]:
        model = COUNTER_MODELS[target_type]
        return self.db.query(model.reaction_count).filter(model.id == target_id).scalar()

    def count_live(self, target_type: TargetType, target_id: int) -> int:
        return (
            self.db.query(func.count(Reaction.id))
            .filter(Reaction.target_type == target_type, Reaction.target_id == target_id)
            .scalar() or 0
        )

    def recount(self, target_type: TargetType, target_id: int) -> bool:
        """Overwrite the counter with the live ledger count in a single statement."""
        model = COUNTER_MODELS[target_type]
        live = (
            select(func.count(Reaction.id))
            .where(Reaction.target_type == target_type, Reaction.target_id == target_id)
            .scalar_subquery()
        )
        result = self.db.execute(
            update(model)
            .where(model.id == target_id)
            .values(reaction_count=live)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def find_drifted(self, target_type: TargetType) -> List[Tuple[int, int, int]]:
        """(target_id, stored_count, live_count) for every target whose counter drifted."""
        model = COUNTER_MODELS[target_type]
        live_counts = (
            select(Reaction.target_id, func.count(Reaction.id).label("live"))
            .where(Reaction.target_type == target_type)
            .group_by(Reaction.target_id)
            .subquery()
        )
        live = func.coalesce(live_counts.c.live, 0)
        rows = (
            self.db.query(model.id, model.reaction_count, live)
            .outerjoin(live_counts, live_counts.c.target_id == model.id)
            .filter(model.reaction_count != live)
            .order_by(model.id.asc())
            .all()
        )
        return [(row[0], row[1], row[2]) for row in rows]

    def get_target_author_id(self, target_type: TargetType, target_id: int) -> Optional[int]:
        model = COUNTER_MODELS[target_type]
        return self.db.query(model.author_id).filter(model.id == target_id).scalar()

    def get_comment_post_id(self, comment_id: int) -> Optional[int]:
        return self.db.query(Comment.post_id).filter(Comment.id == comment_id).scalar()
