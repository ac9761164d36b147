"""
Shift rule registry tests
"""
import pytest

from backoffice.exceptions import ConfirmationRequired, RecordNotFound, ValidationError
from backoffice.models.enums import DayOfWeek
from backoffice.services.shift_rules import ShiftRuleService, active_shifts, archived_shifts


def rule_data(seed_data, **overrides):
    data = {
        "location_id": seed_data["location"].id,
        "job_role_id": seed_data["bartender"].id,
        "name": "Evening bar",
        "day_of_week": DayOfWeek.FRIDAY,
        "start_time": "17:00",
        "end_time": "23:00",
        "min_staff": 1,
        "max_staff": 3,
        "priority": 4,
    }
    data.update(overrides)
    return data


async def test_create_rule_with_troughs(session_factory, seed_data):
    service = ShiftRuleService(session_factory)
    rule = await service.create_rule(
        rule_data(seed_data),
        [{"start_time": "20:00", "end_time": "21:00", "max_staff_override": 1}],
    )

    assert rule.id is not None
    assert rule.archived is False
    assert len(rule.troughs) == 1
    assert rule.troughs[0].max_staff_override == 1


@pytest.mark.parametrize("overrides, field", [
    ({"start_time": "9:00"}, "start_time"),
    ({"start_time": "23:00", "end_time": "17:00"}, "end_time"),
    ({"min_staff": 0}, "min_staff"),
    ({"min_staff": 4, "max_staff": 3}, "min_staff"),
    ({"priority": 6}, "priority"),
])
async def test_invalid_rule_is_rejected(session_factory, seed_data, overrides, field):
    service = ShiftRuleService(session_factory)
    with pytest.raises(ValidationError) as exc:
        await service.create_rule(rule_data(seed_data, **overrides))
    assert exc.value.field == field
    assert await service.list_rules(seed_data["location"].id) == []


async def test_unknown_job_role_is_rejected(session_factory, seed_data):
    service = ShiftRuleService(session_factory)
    with pytest.raises(ValidationError) as exc:
        await service.create_rule(rule_data(seed_data, job_role_id=999))
    assert exc.value.field == "job_role_id"


async def test_trough_must_fit_inside_shift(session_factory, seed_data):
    service = ShiftRuleService(session_factory)
    with pytest.raises(ValidationError) as exc:
        await service.create_rule(
            rule_data(seed_data),
            [{"start_time": "16:00", "end_time": "18:00", "max_staff_override": 1}],
        )
    assert exc.value.field == "troughs[0].start_time"

    with pytest.raises(ValidationError) as exc:
        await service.create_rule(
            rule_data(seed_data),
            [{"start_time": "18:00", "end_time": "19:00", "max_staff_override": 5}],
        )
    assert exc.value.field == "troughs[0].max_staff_override"


async def test_update_replaces_troughs(session_factory, seed_data):
    service = ShiftRuleService(session_factory)
    rule = await service.create_rule(
        rule_data(seed_data),
        [{"start_time": "20:00", "end_time": "21:00", "max_staff_override": 1}],
    )

    updated = await service.update_rule(rule.id, {"max_staff": 4})
    assert updated.max_staff == 4
    assert len(updated.troughs) == 1

    updated = await service.update_rule(rule.id, {}, troughs=[])
    assert updated.troughs == []


async def test_list_rules_sorted_by_weekday(session_factory, seed_data):
    service = ShiftRuleService(session_factory)
    await service.create_rule(rule_data(seed_data, day_of_week=DayOfWeek.SUNDAY))
    await service.create_rule(rule_data(seed_data, day_of_week=DayOfWeek.MONDAY))
    await service.create_rule(rule_data(seed_data, day_of_week=DayOfWeek.WEDNESDAY))

    rules = await service.list_rules(seed_data["location"].id)
    assert [r.day_of_week for r in rules] == [DayOfWeek.MONDAY, DayOfWeek.WEDNESDAY, DayOfWeek.SUNDAY]


async def test_archive_and_restore(session_factory, seed_data):
    service = ShiftRuleService(session_factory)
    friday = await service.create_rule(rule_data(seed_data))
    monday = await service.create_rule(rule_data(seed_data, day_of_week=DayOfWeek.MONDAY))

    await service.archive(friday.id)
    rules = await service.list_rules(seed_data["location"].id)
    assert [r.id for r in active_shifts(rules)] == [monday.id]
    assert [r.id for r in archived_shifts(rules, "all")] == [friday.id]
    assert archived_shifts(rules, "monday") == []

    restored = await service.restore(friday.id)
    assert restored.archived is False


async def test_delete_needs_two_steps(session_factory, seed_data):
    service = ShiftRuleService(session_factory)
    rule = await service.create_rule(
        rule_data(seed_data),
        [{"start_time": "20:00", "end_time": "21:00", "max_staff_override": 1}],
    )

    with pytest.raises(ConfirmationRequired):
        await service.delete(rule.id)
    marked = await service.get_rule(rule.id)
    assert marked.marked_for_deletion is True

    await service.delete(rule.id)
    with pytest.raises(RecordNotFound):
        await service.get_rule(rule.id)


async def test_editing_clears_delete_mark(session_factory, seed_data):
    service = ShiftRuleService(session_factory)
    rule = await service.create_rule(rule_data(seed_data))

    with pytest.raises(ConfirmationRequired):
        await service.delete(rule.id)
    updated = await service.update_rule(rule.id, {"name": "Late bar"})
    assert updated.marked_for_deletion is False

    with pytest.raises(ConfirmationRequired):
        await service.delete(rule.id)


async def test_confirmed_delete(session_factory, seed_data):
    service = ShiftRuleService(session_factory)
    rule = await service.create_rule(rule_data(seed_data))

    await service.delete(rule.id, confirm=True)
    assert await service.list_rules(seed_data["location"].id) == []

    with pytest.raises(RecordNotFound):
        await service.delete(rule.id, confirm=True)


@pytest.mark.parametrize("patch, field", [
    ({"min_staff": None}, "min_staff"),
    ({"start_time": None}, "start_time"),
    ({"day_of_week": None}, "day_of_week"),
    ({"priority": None}, "priority"),
])
async def test_update_rejects_null_required_field(session_factory, seed_data, patch, field):
    service = ShiftRuleService(session_factory)
    rule = await service.create_rule(rule_data(seed_data))

    with pytest.raises(ValidationError) as exc:
        await service.update_rule(rule.id, patch)
    assert exc.value.field == field
    assert (await service.get_rule(rule.id)).min_staff == 1


async def test_day_filter_rejects_unknown_day(session_factory, seed_data):
    service = ShiftRuleService(session_factory)
    await service.create_rule(rule_data(seed_data))
    rules = await service.list_rules(seed_data["location"].id)

    assert len(active_shifts(rules, "friday")) == 1
    assert active_shifts(rules, "all") == rules
    with pytest.raises(ValidationError) as exc:
        active_shifts(rules, "funday")
    assert exc.value.field == "day_of_week"
