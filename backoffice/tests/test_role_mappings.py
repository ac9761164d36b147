"""
Job role mapping tests: ordering, reorder and concurrent persistence
"""
import logging
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from backoffice.exceptions import ValidationError
from backoffice.schemas.rota import RoleMappingResponse
from backoffice.services.role_mapping import RoleMappingService, grouped_by_role, reorder
from backoffice.tests.helpers import add_location


def mapping(id, role_id, title, priority):
    return RoleMappingResponse(id=id, location_id=1, job_role_id=role_id, job_title=title, priority=priority)


def test_reorder_moves_item_and_renumbers():
    mappings = [
        mapping(1, 10, "A", 1),
        mapping(2, 10, "B", 2),
        mapping(9, 20, "Head Chef", 1),
        mapping(3, 10, "C", 3),
    ]
    result = reorder(mappings, 10, from_index=2, to_index=0)

    group = [m for m in result if m.job_role_id == 10]
    assert [m.job_title for m in group] == ["C", "A", "B"]
    assert [m.priority for m in group] == [1, 2, 3]
    # Other roles are untouched and stay in place
    assert result[2] == mappings[2]
    # Inputs are not mutated
    assert mappings[3].priority == 3


def test_reorder_uses_priority_then_id_order():
    mappings = [mapping(5, 10, "Late", 4), mapping(2, 10, "Tied", 2), mapping(1, 10, "First", 2)]
    result = reorder(mappings, 10, from_index=0, to_index=2)
    ordered = sorted(result, key=lambda m: m.priority)
    assert [m.job_title for m in ordered] == ["Tied", "Late", "First"]


@pytest.mark.parametrize("from_index, to_index, field", [
    (3, 0, "from_index"),
    (-1, 0, "from_index"),
    (0, 3, "to_index"),
])
def test_reorder_rejects_out_of_range(from_index, to_index, field):
    mappings = [mapping(1, 10, "A", 1), mapping(2, 10, "B", 2), mapping(3, 10, "C", 3)]
    with pytest.raises(ValidationError) as exc:
        reorder(mappings, 10, from_index, to_index)
    assert exc.value.field == field


def test_grouped_by_role():
    groups = grouped_by_role([mapping(1, 10, "B", 2), mapping(2, 20, "X", 1), mapping(3, 10, "A", 1)])
    assert [m.job_title for m in groups[10]] == ["A", "B"]
    assert [m.job_title for m in groups[20]] == ["X"]


async def add_titles(service, seed_data, *titles):
    role_id = seed_data["bartender"].id
    return [await service.add_job_title(seed_data["location"].id, role_id, t) for t in titles]


async def test_add_job_title_appends_priority(session_factory, seed_data):
    service = RoleMappingService(session_factory)
    added = await add_titles(service, seed_data, "Bar Team", "Bar Supervisor", "  Runner  ")

    assert [m.priority for m in added] == [1, 2, 3]
    assert added[2].job_title == "Runner"


async def test_add_job_title_rejects_blank_and_duplicates(session_factory, seed_data):
    service = RoleMappingService(session_factory)
    location_id = seed_data["location"].id
    role_id = seed_data["bartender"].id
    await add_titles(service, seed_data, "Bar Team")

    with pytest.raises(ValidationError) as exc:
        await service.add_job_title(location_id, role_id, "   ")
    assert exc.value.field == "job_title"

    with pytest.raises(ValidationError):
        await service.add_job_title(location_id, role_id, "bar team")

    # The same title may serve a different role
    other = await service.add_job_title(location_id, seed_data["chef"].id, "Bar Team")
    assert other.priority == 1

    with pytest.raises(ValidationError) as exc:
        await service.add_job_title(location_id, 999, "KP")
    assert exc.value.field == "job_role_id"


async def test_reorder_role_persists_dense_priorities(session_factory, seed_data):
    service = RoleMappingService(session_factory)
    location_id = seed_data["location"].id
    role_id = seed_data["bartender"].id
    await add_titles(service, seed_data, "A", "B", "C")

    result = await service.reorder_role(location_id, role_id, from_index=2, to_index=0)
    assert [m.job_title for m in result] == ["C", "A", "B"]

    stored = await service.list_mappings(location_id, role_id)
    assert [(m.job_title, m.priority) for m in stored] == [("C", 1), ("A", 2), ("B", 3)]


async def test_delete_leaves_gap_until_reorder(session_factory, seed_data):
    service = RoleMappingService(session_factory)
    location_id = seed_data["location"].id
    role_id = seed_data["bartender"].id
    a, b, c = await add_titles(service, seed_data, "A", "B", "C")

    await service.delete_mapping(b.id)
    stored = await service.list_mappings(location_id, role_id)
    assert [m.priority for m in stored] == [1, 3]

    d = await service.add_job_title(location_id, role_id, "D")
    assert d.priority == 4

    await service.reorder_role(location_id, role_id, from_index=0, to_index=0)
    stored = await service.list_mappings(location_id, role_id)
    assert [m.priority for m in stored] == [1, 2, 3]


async def test_reorder_role_raises_when_a_write_fails(session_factory, seed_data, caplog):
    service = RoleMappingService(session_factory)
    await add_titles(service, seed_data, "A", "B")
    failing = AsyncMock(side_effect=OperationalError("UPDATE", {}, Exception("database is locked")))

    with patch.object(service.mappings, "update", failing), caplog.at_level(logging.WARNING):
        with pytest.raises(OperationalError):
            await service.reorder_role(seed_data["location"].id, seed_data["bartender"].id, 1, 0)

    assert failing.await_count == 2
    assert "re-fetch to resync" in caplog.text


async def test_list_roles(session_factory, seed_data):
    service = RoleMappingService(session_factory)
    roles = await service.list_roles(seed_data["location"].id)
    assert {r.name for r in roles} == {"Bartender", "Line Chef"}

    with pytest.raises(ValidationError):
        await service.create_role({"location_id": seed_data["location"].id, "name": " ", "department": "kp"})


async def test_role_from_another_location_is_rejected(session_factory, seed_data):
    service = RoleMappingService(session_factory)
    location_id = seed_data["location"].id
    _, waiter = await add_location(session_factory)

    with pytest.raises(ValidationError) as exc:
        await service.add_job_title(location_id, waiter.id, "Waiting Staff")
    assert exc.value.field == "job_role_id"

    with pytest.raises(ValidationError) as exc:
        await service.reorder_role(location_id, waiter.id, 0, 0)
    assert exc.value.field == "job_role_id"
    assert await service.list_mappings(location_id) == []
