"""
Job role mapping: the ordered list of job titles that may fill each role.

Priorities inside a (location, role) group are renumbered to a dense 1..N
sequence on every reorder. Deleting a title leaves a gap until the next
reorder.
"""
import asyncio
import logging
from collections import defaultdict
from typing import Any, Dict, List, Optional, Sequence, TypeVar

from sqlalchemy.ext.asyncio import async_sessionmaker

from backoffice.exceptions import ValidationError
from backoffice.models.job_role import JobRole, JobRoleMapping
from backoffice.schemas.rota import JobRoleResponse, RoleMappingResponse
from backoffice.services.record_store import RecordStore
from backoffice.utils.validators import validate_job_title

logger = logging.getLogger(__name__)

COMMON_JOB_TITLES = [
    "General Manager",
    "Assistant Manager",
    "Bar Supervisor",
    "FOH Supervisor",
    "Bar Team",
    "FOH Team",
    "Head Chef",
    "Sous Chef",
    "Chef de Partie",
    "Commis Chef",
    "KP",
    "Runner",
    "Owner",
]

MappingT = TypeVar("MappingT", bound=RoleMappingResponse)


def ordered_group(mappings: Sequence[MappingT], role_id: int) -> List[MappingT]:
    return sorted(
        (m for m in mappings if m.job_role_id == role_id),
        key=lambda m: (m.priority, m.id),
    )


def grouped_by_role(mappings: Sequence[MappingT]) -> Dict[int, List[MappingT]]:
    groups: Dict[int, List[MappingT]] = defaultdict(list)
    for mapping in sorted(mappings, key=lambda m: (m.priority, m.id)):
        groups[mapping.job_role_id].append(mapping)
    return dict(groups)


def reorder(
    mappings: Sequence[MappingT], role_id: int, from_index: int, to_index: int
) -> List[MappingT]:
    """
    Move one title within a role's ordered list and renumber that list 1..N.

    Entries of other roles are returned unchanged and in place; the role's
    entries fill their original slots in the new order.
    """
    group = ordered_group(mappings, role_id)
    if not 0 <= from_index < len(group):
        raise ValidationError("from_index", f"from_index {from_index} is out of range")
    if not 0 <= to_index < len(group):
        raise ValidationError("to_index", f"to_index {to_index} is out of range")

    moved = group.pop(from_index)
    group.insert(to_index, moved)
    renumbered = iter([m.model_copy(update={"priority": i}) for i, m in enumerate(group, start=1)])
    return [next(renumbered) if m.job_role_id == role_id else m for m in mappings]


def next_priority(group: Sequence[RoleMappingResponse]) -> int:
    return max((m.priority for m in group), default=0) + 1


class RoleMappingService:

    def __init__(self, session_factory: async_sessionmaker):
        self.roles = RecordStore(session_factory, JobRole, JobRoleResponse)
        self.mappings = RecordStore(session_factory, JobRoleMapping, RoleMappingResponse)

    # --- roles ---

    async def list_roles(self, location_id: int) -> List[JobRoleResponse]:
        return await self.roles.list(order_by=("department", "name"), location_id=location_id)

    async def create_role(self, data: Dict[str, Any]) -> JobRoleResponse:
        if not (data.get("name") or "").strip():
            raise ValidationError("name", "Job role name is required")
        return await self.roles.create({**data, "name": data["name"].strip()})

    # --- mappings ---

    async def list_mappings(
        self, location_id: int, role_id: Optional[int] = None
    ) -> List[RoleMappingResponse]:
        return await self.mappings.list(
            order_by=("priority", "id"), location_id=location_id, job_role_id=role_id
        )

    async def _check_role(self, location_id: int, role_id: int) -> None:
        role = await self.roles.find(role_id)
        if role is None:
            raise ValidationError("job_role_id", f"Job role {role_id} does not exist")
        if role.location_id != location_id:
            raise ValidationError(
                "job_role_id", f"Job role {role_id} does not belong to location {location_id}"
            )

    async def add_job_title(self, location_id: int, role_id: int, title: str) -> RoleMappingResponse:
        title = validate_job_title(title)
        await self._check_role(location_id, role_id)

        group = await self.list_mappings(location_id, role_id)
        if any(m.job_title.casefold() == title.casefold() for m in group):
            raise ValidationError("job_title", f"'{title}' is already mapped to this role")

        mapping = await self.mappings.create({
            "location_id": location_id,
            "job_role_id": role_id,
            "job_title": title,
            "priority": next_priority(group),
        })
        logger.info(f"Mapped '{title}' to role {role_id} at priority {mapping.priority}")
        return mapping

    async def delete_mapping(self, mapping_id: int) -> None:
        await self.mappings.delete(mapping_id)

    async def reorder_role(
        self, location_id: int, role_id: int, from_index: int, to_index: int
    ) -> List[RoleMappingResponse]:
        """
        Persist a reorder. Every renumbered row is written concurrently and all
        writes are awaited; if any fails the error is raised and the caller
        should re-fetch with list_mappings to resync.
        """
        await self._check_role(location_id, role_id)
        current = await self.list_mappings(location_id, role_id)
        updated = reorder(current, role_id, from_index, to_index)

        results = await asyncio.gather(
            *[self.mappings.update(m.id, {"priority": m.priority}) for m in updated],
            return_exceptions=True,
        )
        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            logger.warning(
                f"{len(failures)} of {len(updated)} priority updates failed for role {role_id}; "
                "re-fetch to resync"
            )
            raise failures[0]
        return ordered_group(results, role_id)
