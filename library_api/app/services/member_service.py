"""
Business logic for members.

The ``MemberService`` keeps members in a repository keyed by
``member_id`` and assigns ids from a monotonic counter when the caller
does not supply one.
"""

import copy
import logging
from typing import Any, Dict, List, Optional

from ..core.exceptions import ConflictError, ValidationFailedError
from ..core.repository import InMemoryRepository, Repository
from ..models.member import Member

logger = logging.getLogger(__name__)


class MemberService:
    """CRUD operations for library members."""

    def __init__(self, repository: Optional[Repository] = None) -> None:
        self.repository: Repository = repository if repository is not None else InMemoryRepository()
        self._next_id = 1

    def clear(self) -> None:
        self.repository.clear()
        self._next_id = 1

    def _allocate_id(self) -> int:
        while self._next_id in self.repository:
            self._next_id += 1
        member_id = self._next_id
        self._next_id += 1
        return member_id

    def create_member(self, data: Dict[str, Any]) -> Member:
        """Validate and store a new member.

        Raises ``ConflictError`` when an explicit ``member_id`` is already
        taken and ``ValidationFailedError`` listing every failing field.
        Nothing is stored when either is raised.
        """
        member_id = data.get("member_id")
        if member_id is not None and member_id in self.repository:
            raise ConflictError(f"member with id: {member_id} already exists")

        member = Member.from_dict(data)
        errors = member.validate()
        if errors:
            raise ValidationFailedError(errors)

        if member.member_id is None:
            member.member_id = self._allocate_id()
        self.repository.add(member.member_id, member)
        logger.info("Created member %s (%s)", member.member_id, member.name)
        return member

    def get_member(self, member_id: int) -> Optional[Member]:
        return self.repository.get(member_id)

    def get_all_members(self) -> List[Member]:
        return self.repository.values()

    def member_exists(self, member_id: int) -> bool:
        return member_id in self.repository

    def update_member(self, member_id: int, data: Dict[str, Any]) -> Optional[Member]:
        """Apply a partial update; returns ``None`` if the member does not exist.

        The update is validated on a copy first, so a rejected update
        leaves the stored member unchanged.
        """
        member = self.repository.get(member_id)
        if member is None:
            return None
        staged = copy.deepcopy(member)
        staged.update(data)
        errors = staged.validate()
        if errors:
            raise ValidationFailedError(errors)
        member.update(data)
        return member

    def delete_member(self, member_id: int) -> bool:
        deleted = self.repository.remove(member_id)
        if deleted:
            logger.info("Deleted member %s", member_id)
        return deleted
