"""Simultaneous decisions against a file-backed database.

Each session here holds its own connection, so both deciders really run at
the same time instead of taking turns on one shared in-memory connection.
"""

import asyncio

import pytest
from sqlalchemy.ext.asyncio import create_async_engine

from kitchzero.db.base import Base
from kitchzero.db.models import ApprovalRequestRow, InventoryAdjustmentRow
from kitchzero.errors.exceptions import InvalidStateError
from kitchzero.services.approval.engine import ApprovalService

REQUEST = {
    "type": "INVENTORY_ADJUSTMENT",
    "title": "Freezer failure",
    "request_data": {
        "inventory_item_id": "itm_tomato",
        "adjustment_type": "DAMAGED",
        "quantity": 25,
        "reason": "Freezer failure overnight",
    },
}


@pytest.fixture
async def db_engine(tmp_path):
    """Override: a SQLite file so every session gets its own connection."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'approvals.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def pending(session_factory, seeded, clock):
    async with session_factory() as session:
        view = await ApprovalService(session, clock=clock).create_approval_request(
            REQUEST, "usr_chef", "tn_pasta"
        )
        session.add(
            InventoryAdjustmentRow(
                adjustment_id="adj_freezer", branch_id="br_downtown", inventory_item_id="itm_tomato",
                adjustment_type="DAMAGED", quantity=25, reason="Freezer failure overnight",
                status="PENDING", approval_id=view.approval_request_id, created_by="usr_chef",
            )
        )
        await session.commit()
    return view.approval_request_id


async def _decide(session_factory, clock, approval_id: str, user_id: str, status: str):
    async with session_factory() as session:
        try:
            view = await ApprovalService(session, clock=clock).process_approval_decision(
                approval_id, {"status": status, "reason": f"{user_id} says {status}"}, user_id, "tn_pasta"
            )
        except InvalidStateError as exc:
            return exc
        return view.status


@pytest.mark.asyncio
async def test_concurrent_decisions_have_one_winner(session_factory, pending, clock):
    results = await asyncio.gather(
        _decide(session_factory, clock, pending, "usr_owner", "APPROVED"),
        _decide(session_factory, clock, pending, "usr_owner2", "REJECTED"),
    )

    winners = [r for r in results if not isinstance(r, InvalidStateError)]
    losers = [r for r in results if isinstance(r, InvalidStateError)]
    assert len(winners) == 1 and len(losers) == 1
    winner = str(winners[0])
    assert losers[0].current_status == winner

    async with session_factory() as check:
        row = await check.get(ApprovalRequestRow, pending)
        child = await check.get(InventoryAdjustmentRow, "adj_freezer")
    assert row.status == winner
    assert child.status == winner
    if winner == "APPROVED":
        assert (row.approved_by, row.rejected_by, row.rejection_reason) == ("usr_owner", None, None)
    else:
        assert (row.approved_by, row.rejected_by, row.approval_reason) == (None, "usr_owner2", None)
