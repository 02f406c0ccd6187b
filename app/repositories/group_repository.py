"""Group repository."""
from typing import Optional, List
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import or_

from app.models.group import Group, GroupMember, GroupVisibility, MemberRole, MemberStatus


class GroupRepository:
    """Group and membership data access layer."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, name: str, slug: str, owner_id: int,
               description: Optional[str] = None,
               visibility: GroupVisibility = GroupVisibility.PUBLIC,
               post_approval_required: bool = False) -> Group:
        """Create a group with its owner as first active member."""
        group = Group(
            name=name,
            slug=slug,
            owner_id=owner_id,
            description=description,
            visibility=visibility,
            post_approval_required=post_approval_required,
        )
        group.members.append(
            GroupMember(user_id=owner_id, role=MemberRole.OWNER, status=MemberStatus.ACTIVE)
        )
        self.db.add(group)
        self.db.commit()
        self.db.refresh(group)
        return group

    def get_by_id(self, group_id: int) -> Optional[Group]:
        return self.db.query(Group).filter(Group.id == group_id).first()

    def get_by_slug(self, slug: str) -> Optional[Group]:
        return self.db.query(Group).filter(Group.slug == slug).first()

    def exists_by_slug(self, slug: str) -> bool:
        return self.db.query(Group.id).filter(Group.slug == slug).first() is not None

    def search(self, q: str, skip: int = 0, limit: int = 20) -> List[Group]:
        return (
            self.db.query(Group)
            .filter(
                Group.is_active == True,  # noqa: E712
                or_(Group.name.icontains(q, autoescape=True), Group.description.icontains(q, autoescape=True)),
            )
            .order_by(Group.created_at.desc(), Group.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    def get_membership(self, group_id: int, user_id: int) -> Optional[GroupMember]:
        return (
            self.db.query(GroupMember)
            .filter(GroupMember.group_id == group_id, GroupMember.user_id == user_id)
            .first()
        )

    def add_member(self, group_id: int, user_id: int, status: MemberStatus) -> GroupMember:
        """Add a membership. Raises IntegrityError on duplicate (group, user)."""
        membership = GroupMember(
            group_id=group_id,
            user_id=user_id,
            role=MemberRole.MEMBER,
            status=status,
        )
        self.db.add(membership)
        self.db.commit()
        self.db.refresh(membership)
        return membership

    def get_active_member_ids(self, group_id: int, exclude_user_id: Optional[int] = None) -> List[int]:
        query = self.db.query(GroupMember.user_id).filter(
            GroupMember.group_id == group_id,
            GroupMember.status == MemberStatus.ACTIVE,
        )
        if exclude_user_id is not None:
            query = query.filter(GroupMember.user_id != exclude_user_id)
        return [row.user_id for row in query.all()]

    def get_members(self, group_id: int, limit: int = 10) -> List[GroupMember]:
        return (
            self.db.query(GroupMember)
            .options(joinedload(GroupMember.user))
            .filter(GroupMember.group_id == group_id)
            .order_by(GroupMember.joined_at.desc(), GroupMember.id.desc())
            .limit(limit)
            .all()
        )
