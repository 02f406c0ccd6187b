"""Group service."""
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import ConflictError, NotFoundError
from app.models.group import Group, GroupMember, GroupVisibility, MemberStatus
from app.repositories.group_repository import GroupRepository
from app.schemas.group import GroupCreate
from app.services.notification_service import NotificationService


class GroupService:
    """Group business logic."""

    def __init__(self, db: Session):
        self.db = db
        self.group_repo = GroupRepository(db)
        self.notifier = NotificationService(db)

    def create_group(self, data: GroupCreate, owner_id: int) -> Group:
        """
        Create a group owned by the caller.

        Raises:
            ConflictError: If the slug is taken
        """
        if self.group_repo.exists_by_slug(data.slug):
            raise ConflictError("Group slug already exists")
        try:
            return self.group_repo.create(
                name=data.name,
                slug=data.slug,
                owner_id=owner_id,
                description=data.description,
                visibility=data.visibility,
                post_approval_required=data.post_approval_required,
            )
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("Group slug already exists")

    def get_group(self, slug: str) -> Group:
        group = self.group_repo.get_by_slug(slug)
        if not group:
            raise NotFoundError("Group not found")
        return group

    def join_group(self, slug: str, user_id: int) -> GroupMember:
        """
        Join a group. Public groups admit immediately, others leave the
        membership pending. The owner is notified either way.

        Raises:
            NotFoundError: If the group does not exist
            ConflictError: If the user is already a member
        """
        group = self.get_group(slug)
        if self.group_repo.get_membership(group.id, user_id):
            raise ConflictError("Already a member of this group")

        status = MemberStatus.ACTIVE if group.visibility == GroupVisibility.PUBLIC else MemberStatus.PENDING
        try:
            membership = self.group_repo.add_member(group.id, user_id, status)
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("Already a member of this group")

        self.notifier.group_join(group, user_id, status)
        return membership
