"""
Shift rule registry: recurring staffing slots with archive/restore and a
two-step (confirmed) permanent delete.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence

from sqlalchemy.ext.asyncio import async_sessionmaker

from backoffice.exceptions import ConfirmationRequired, ValidationError
from backoffice.models.enums import DayOfWeek
from backoffice.models.job_role import JobRole
from backoffice.models.shift_rule import ShiftRule, ShiftTrough
from backoffice.schemas.rota import JobRoleResponse, ShiftRuleResponse, ShiftTroughResponse
from backoffice.services.record_store import RecordStore
from backoffice.utils.validators import validate_shift_rule, validate_troughs

logger = logging.getLogger(__name__)

ALL_DAYS = "all"

RULE_FIELDS = (
    "job_role_id", "name", "day_of_week", "start_time", "end_time",
    "min_staff", "max_staff", "priority", "revenue_to_staff_ratio",
)


def _matches_day(rule: ShiftRuleResponse, day) -> bool:
    if day is None or day == ALL_DAYS:
        return True
    try:
        wanted = DayOfWeek(day)
    except ValueError:
        raise ValidationError("day_of_week", f"Unknown day '{day}'; use a weekday name or '{ALL_DAYS}'")
    return rule.day_of_week == wanted


def active_shifts(rules: Iterable[ShiftRuleResponse], day=None) -> List[ShiftRuleResponse]:
    return [r for r in rules if not r.archived and _matches_day(r, day)]


def archived_shifts(rules: Iterable[ShiftRuleResponse], day=None) -> List[ShiftRuleResponse]:
    return [r for r in rules if r.archived and _matches_day(r, day)]


class ShiftRuleService:

    def __init__(self, session_factory: async_sessionmaker):
        self.rules = RecordStore(session_factory, ShiftRule, ShiftRuleResponse, eager=("troughs",))
        self.troughs = RecordStore(session_factory, ShiftTrough, ShiftTroughResponse)
        self.roles = RecordStore(session_factory, JobRole, JobRoleResponse)

    async def list_rules(self, location_id: int) -> List[ShiftRuleResponse]:
        rules = await self.rules.list(order_by=("start_time", "id"), location_id=location_id)
        week = list(DayOfWeek)
        return sorted(rules, key=lambda r: week.index(r.day_of_week))

    async def get_rule(self, rule_id: int) -> ShiftRuleResponse:
        return await self.rules.get(rule_id)

    async def _validate(self, data: Dict[str, Any], troughs: Sequence[Dict[str, Any]]) -> None:
        validate_shift_rule(data)
        validate_troughs(troughs, data)
        if await self.roles.find(data["job_role_id"]) is None:
            raise ValidationError("job_role_id", f"Job role {data['job_role_id']} does not exist")

    async def _replace_troughs(self, rule_id: int, troughs: Sequence[Dict[str, Any]]) -> None:
        await self.troughs.delete_where(shift_rule_id=rule_id)
        for trough in troughs:
            await self.troughs.create({**trough, "shift_rule_id": rule_id})

    async def create_rule(
        self, data: Dict[str, Any], troughs: Sequence[Dict[str, Any]] = ()
    ) -> ShiftRuleResponse:
        await self._validate(data, troughs)
        rule = await self.rules.create(data)
        if troughs:
            await self._replace_troughs(rule.id, troughs)
            rule = await self.rules.get(rule.id)
        logger.info(f"Created shift rule {rule.id} for {rule.day_of_week.value} {rule.start_time}-{rule.end_time}")
        return rule

    async def update_rule(
        self,
        rule_id: int,
        patch: Dict[str, Any],
        troughs: Optional[Sequence[Dict[str, Any]]] = None,
    ) -> ShiftRuleResponse:
        """Apply a patch; when troughs are given they replace the stored ones"""
        current = await self.rules.get(rule_id)
        merged = {**current.model_dump(include=set(RULE_FIELDS)), **patch}
        if troughs is None:
            check_troughs = [t.model_dump(include={"start_time", "end_time", "max_staff_override"})
                             for t in current.troughs]
        else:
            check_troughs = list(troughs)
        await self._validate(merged, check_troughs)

        await self.rules.update(rule_id, {**patch, "marked_for_deletion": False})
        if troughs is not None:
            await self._replace_troughs(rule_id, troughs)
        return await self.rules.get(rule_id)

    async def archive(self, rule_id: int) -> ShiftRuleResponse:
        rule = await self.rules.update(rule_id, {"archived": True, "marked_for_deletion": False})
        logger.info(f"Archived shift rule {rule_id}")
        return rule

    async def restore(self, rule_id: int) -> ShiftRuleResponse:
        rule = await self.rules.update(rule_id, {"archived": False, "marked_for_deletion": False})
        logger.info(f"Restored shift rule {rule_id}")
        return rule

    async def delete(self, rule_id: int, confirm: bool = False) -> None:
        """
        Permanently delete a rule.

        Without confirm, the first call only marks the rule and raises
        ConfirmationRequired; a second call (or confirm=True) deletes it.
        """
        rule = await self.rules.get(rule_id)
        if not confirm and not rule.marked_for_deletion:
            await self.rules.update(rule_id, {"marked_for_deletion": True})
            raise ConfirmationRequired(
                f"Deleting shift rule {rule_id} cannot be undone; confirm to proceed",
                record_id=rule_id,
            )
        await self.troughs.delete_where(shift_rule_id=rule_id)
        await self.rules.delete(rule_id)
        logger.info(f"Deleted shift rule {rule_id}")
