"""Tests for the database wrapper."""

from __future__ import annotations

import pytest
from sqlalchemy import select
from sqlalchemy.pool import StaticPool

from portal.persistence import Database
from portal.persistence.tables import StudentTable


class TestDatabase:
    def test_in_memory_sqlite_shares_one_connection(self) -> None:
        database = Database("sqlite+aiosqlite:///:memory:")
        assert isinstance(database.engine.pool, StaticPool)

    @pytest.mark.asyncio
    async def test_ping(self, database: Database) -> None:
        assert await database.ping() is True

    @pytest.mark.asyncio
    async def test_transaction_commits(self, database: Database) -> None:
        async with database.transaction() as session:
            session.add(StudentTable(student_id="SV001", full_name="An Nguyen"))

        async with database.sessions() as session:
            ids = (await session.execute(select(StudentTable.student_id))).scalars().all()
        assert ids == ["SV001"]

    @pytest.mark.asyncio
    async def test_transaction_rolls_back_on_error(self, database: Database) -> None:
        with pytest.raises(RuntimeError):
            async with database.transaction() as session:
                session.add(StudentTable(student_id="SV001", full_name="An Nguyen"))
                await session.flush()
                raise RuntimeError("boom")

        async with database.sessions() as session:
            ids = (await session.execute(select(StudentTable.student_id))).scalars().all()
        assert ids == []
