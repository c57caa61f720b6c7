"""
HomeStock Backend — Stock Repository Tests
=============================================

What:  CRUD tests for StockRepository against in-memory SQLite.
Why:   The repository owns every query: lookups, partial merges, owner
       resolution and the not-found contract.
How:   Each test gets a fresh database (see conftest.py).
"""

import pytest
from sqlalchemy import func, select

from homestock.exceptions import NotFoundError, ValidationError
from homestock.models.stock import StockItem
from homestock.repositories.stock_repository import StockRepository
from homestock.schemas.stock import StockCreate, StockUpdate, parse_fields

MISSING_ID = "0" * 24


def apples(user_id, **overrides):
    fields = {
        "name": "Apples",
        "category": "Fruits",
        "quantity": "5",
        "unit": "kg",
        "user": user_id,
    }
    fields.update(overrides)
    return parse_fields(StockCreate, fields)


class TestCreate:

    @pytest.mark.asyncio
    async def test_create_assigns_id_and_added_date(self, db_session, users):
        repo = StockRepository(db_session)
        item = await repo.create(apples(users[0].id))

        assert len(item.id) == 24
        int(item.id, 16)
        assert item.added_date is not None
        assert item.image is None
        assert item.user.name == "Alice"

    @pytest.mark.asyncio
    async def test_created_item_is_fetchable(self, db_session, users):
        repo = StockRepository(db_session)
        created = await repo.create(apples(users[0].id, notes="from the market"))
        await db_session.commit()

        fetched = await repo.get_by_id(created.id)
        assert fetched.name == "Apples"
        assert fetched.category == "Fruits"
        assert fetched.quantity == 5.0
        assert fetched.unit == "kg"
        assert fetched.notes == "from the market"
        assert fetched.user_id == users[0].id

    @pytest.mark.asyncio
    async def test_unit_defaults_to_units(self, db_session, users):
        repo = StockRepository(db_session)
        data = parse_fields(
            StockCreate,
            {"name": "Rice", "category": "Grains", "quantity": "2", "user": users[1].id},
        )
        item = await repo.create(data)
        assert item.unit == "units"

    @pytest.mark.asyncio
    async def test_unknown_user_rejected(self, db_session, users):
        repo = StockRepository(db_session)
        with pytest.raises(ValidationError, match="No user with ID"):
            await repo.create(apples(MISSING_ID))

        count = await db_session.scalar(select(func.count()).select_from(StockItem))
        assert count == 0

    @pytest.mark.asyncio
    async def test_each_item_gets_a_distinct_id(self, db_session, users):
        repo = StockRepository(db_session)
        first = await repo.create(apples(users[0].id))
        second = await repo.create(apples(users[0].id))
        assert first.id != second.id


class TestRead:

    @pytest.mark.asyncio
    async def test_list_empty(self, db_session):
        assert await StockRepository(db_session).list_all() == []

    @pytest.mark.asyncio
    async def test_list_resolves_owners_in_insertion_order(self, db_session, users):
        repo = StockRepository(db_session)
        await repo.create(apples(users[0].id))
        await repo.create(apples(users[1].id, name="Milk", category="Dairy", unit="liters"))
        await db_session.commit()

        items = await repo.list_all()
        assert [i.name for i in items] == ["Apples", "Milk"]
        assert [i.user.email for i in items] == ["alice@example.com", "bob@example.com"]

    @pytest.mark.asyncio
    async def test_get_missing_raises_not_found(self, db_session):
        with pytest.raises(NotFoundError) as exc_info:
            await StockRepository(db_session).get_by_id(MISSING_ID)
        assert exc_info.value.resource_id == MISSING_ID
        assert exc_info.value.message == "Stock item not found"


class TestUpdate:

    @pytest.mark.asyncio
    async def test_partial_update_keeps_other_fields(self, db_session, users):
        repo = StockRepository(db_session)
        item = await repo.create(apples(users[0].id, notes="green"))
        added = item.added_date

        updated = await repo.update_by_id(item.id, parse_fields(StockUpdate, {"quantity": "3"}))

        assert updated.quantity == 3.0
        assert updated.name == "Apples"
        assert updated.unit == "kg"
        assert updated.notes == "green"
        assert updated.added_date == added

    @pytest.mark.asyncio
    async def test_change_owner(self, db_session, users):
        repo = StockRepository(db_session)
        item = await repo.create(apples(users[0].id))

        updated = await repo.update_by_id(
            item.id, parse_fields(StockUpdate, {"user": users[1].id})
        )
        assert updated.user_id == users[1].id
        assert updated.user.name == "Bob"

    @pytest.mark.asyncio
    async def test_change_to_unknown_owner_rejected(self, db_session, users):
        repo = StockRepository(db_session)
        item = await repo.create(apples(users[0].id))

        with pytest.raises(ValidationError, match="user"):
            await repo.update_by_id(item.id, parse_fields(StockUpdate, {"user": MISSING_ID}))

    @pytest.mark.asyncio
    async def test_clear_notes(self, db_session, users):
        repo = StockRepository(db_session)
        item = await repo.create(apples(users[0].id, notes="green"))

        updated = await repo.update_by_id(item.id, parse_fields(StockUpdate, {"notes": None}))
        assert updated.notes is None

    @pytest.mark.asyncio
    async def test_update_missing_raises_not_found(self, db_session, users):
        with pytest.raises(NotFoundError):
            await StockRepository(db_session).update_by_id(
                MISSING_ID, parse_fields(StockUpdate, {"quantity": "1"})
            )


class TestDelete:

    @pytest.mark.asyncio
    async def test_delete_removes_row(self, db_session, users):
        repo = StockRepository(db_session)
        item = await repo.create(apples(users[0].id))
        await db_session.commit()

        await repo.delete_by_id(item.id)
        await db_session.commit()

        with pytest.raises(NotFoundError):
            await repo.get_by_id(item.id)

    @pytest.mark.asyncio
    async def test_delete_missing_raises_not_found(self, db_session):
        with pytest.raises(NotFoundError):
            await StockRepository(db_session).delete_by_id(MISSING_ID)
