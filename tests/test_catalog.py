import asyncio
import pytest
from sqlalchemy import update

from shared.database import connection
from shared.database.models import Show
from shared.utils.errors import ShowNotFound, SeatOutOfRange, ConcurrentUpdateConflict
from services.catalog.services.show_service import ShowService, DAMAGED_SEATS_MAX_ATTEMPTS


async def test_set_damaged_seats_mark_and_unmark(session, make_show):
    show = await make_show(damaged_seats=["A-1"])
    show_id = show.id

    show = await ShowService.set_damaged_seats(session, show_id, mark=["B-2", "C-3"], unmark=["A-1"])
    assert show.damaged_seats == ["B-2", "C-3"]
    assert show.version == 1

    with pytest.raises(SeatOutOfRange):
        await ShowService.set_damaged_seats(session, show_id, mark=["R-35"], unmark=[])
    with pytest.raises(ShowNotFound):
        await ShowService.set_damaged_seats(session, "missing", mark=["A-1"], unmark=[])


async def test_write_between_read_and_update_is_not_lost(session, make_show, monkeypatch):
    show = await make_show()
    show_id = show.id
    real_get_show = ShowService.get_show
    competing_writes = []

    async def get_show_then_competing_write(db, requested_id):
        found = await real_get_show(db, requested_id)
        if not competing_writes:
            # Otro admin confirma su cambio justo después de nuestra lectura
            competing_writes.append("C-1")
            async with connection.async_session_maker() as other:
                await ShowService.set_damaged_seats(other, show_id, mark=["C-1"], unmark=[])
        return found

    monkeypatch.setattr(ShowService, "get_show", staticmethod(get_show_then_competing_write))

    updated = await ShowService.set_damaged_seats(session, show_id, mark=["C-2"], unmark=[])

    assert competing_writes == ["C-1"]
    assert set(updated.damaged_seats) == {"C-1", "C-2"}
    assert updated.version == 2


async def test_concurrent_admins_keep_every_mark(session, make_show):
    show = await make_show()
    show_id = show.id
    seats = ["D-1", "D-2", "D-3", "D-4"]

    async def mark(seat_label):
        async with connection.async_session_maker() as s:
            await ShowService.set_damaged_seats(s, show_id, mark=[seat_label], unmark=[])

    await asyncio.gather(*[mark(seat) for seat in seats])

    show = await ShowService.get_show(session, show_id)
    assert show.damaged_seats == seats
    assert show.version == len(seats)


async def test_gives_up_after_repeated_conflicts(session, make_show, monkeypatch):
    show = await make_show()
    show_id = show.id
    real_get_show = ShowService.get_show

    async def get_show_always_stale(db, requested_id):
        found = await real_get_show(db, requested_id)
        # Cada lectura queda obsoleta antes de escribir
        async with connection.async_session_maker() as other:
            await other.execute(
                update(Show)
                .where(Show.id == show_id)
                .values(version=Show.version + 1)
            )
            await other.commit()
        return found

    monkeypatch.setattr(ShowService, "get_show", staticmethod(get_show_always_stale))

    with pytest.raises(ConcurrentUpdateConflict):
        await ShowService.set_damaged_seats(session, show_id, mark=["E-1"], unmark=[])

    monkeypatch.undo()
    show = await ShowService.get_show(session, show_id)
    assert show.damaged_seats == []
    assert show.version == DAMAGED_SEATS_MAX_ATTEMPTS
