"""Integration tests for the SQL event repository."""

from dataclasses import replace
from datetime import timedelta

import pytest
from sqlalchemy import update
from uuid_extensions import uuid7

from src.domain.enums import EventStatus, RoundStatus
from src.infrastructure.persistence.models import EventModel
from tests.conftest import BASE_TIME, make_event, make_registration, make_round


@pytest.mark.integration
class TestEventRepository:
    """Event persistence."""

    async def test_round_trip_keeps_rounds_and_timezones(self, sql_repos):
        """Test an event with rounds loads back equal, UTC-aware."""
        event = make_event(eligible_years=[2, 3])
        event.rounds = [make_round(event, "Prelims"), make_round(event, "Finals")]
        await sql_repos.events.save(event)

        loaded = await sql_repos.events.find_by_id(event.id)

        assert loaded.title == event.title
        assert loaded.start_date_time == event.start_date_time
        assert loaded.start_date_time.tzinfo is not None
        assert loaded.eligible_years == [2, 3]
        assert [r.name for r in loaded.rounds] == ["Prelims", "Finals"]

    async def test_save_updates_editable_fields_only(self, sql_repos):
        """Test an edit does not overwrite the status or the counter."""
        event = make_event()
        await sql_repos.events.save(event)
        await sql_repos.registrations.add([make_registration(event)], capacity=None)
        stale = await sql_repos.events.find_by_id(event.id)
        await sql_repos.events.transition_status(
            event.id, expected=EventStatus.PUBLISHED, target=EventStatus.ONGOING, now=BASE_TIME
        )

        stale.title = "Renamed"
        stale.registered_count = 0
        await sql_repos.events.save(stale)

        loaded = await sql_repos.events.find_by_id(event.id)
        assert loaded.title == "Renamed"
        assert loaded.status == EventStatus.ONGOING
        assert loaded.registered_count == 1

    async def test_transition_status_is_compare_and_set(self, sql_repos):
        """Test a transition from a stale status is refused."""
        event = make_event()
        await sql_repos.events.save(event)
        kwargs = {
            "expected": EventStatus.PUBLISHED,
            "target": EventStatus.ONGOING,
            "now": BASE_TIME,
        }

        assert await sql_repos.events.transition_status(event.id, **kwargs) is True
        assert await sql_repos.events.transition_status(event.id, **kwargs) is False

    async def test_due_queries(self, sql_repos):
        """Test start and completion queries follow the event window."""
        starting = make_event()
        ending = make_event(
            status=EventStatus.ONGOING, end_date_time=BASE_TIME + timedelta(days=10, hours=1)
        )
        for event in (starting, ending):
            await sql_repos.events.save(event)
        now = BASE_TIME + timedelta(days=10, hours=2)

        due_start = await sql_repos.events.find_due_to_start(now)
        due_complete = await sql_repos.events.find_due_to_complete(now)

        assert [e.id for e in due_start] == [starting.id]
        assert [e.id for e in due_complete] == [ending.id]

    async def test_round_transition_is_compare_and_set(self, sql_repos):
        """Test round activation persists once and raises the current round."""
        event = make_event(status=EventStatus.ONGOING)
        event.rounds = [make_round(event)]
        await sql_repos.events.save(event)
        round_id = event.rounds[0].id

        due = await sql_repos.events.find_with_due_rounds(event.start_date_time)
        assert [e.id for e in due] == [event.id]

        kwargs = {
            "expected": RoundStatus.UPCOMING,
            "target": RoundStatus.ACTIVE,
            "now": event.start_date_time,
        }
        assert await sql_repos.events.transition_round(event.id, round_id, **kwargs) is True
        assert await sql_repos.events.transition_round(event.id, round_id, **kwargs) is False

        reloaded = await sql_repos.events.find_by_id(event.id)
        assert reloaded.rounds[0].status == RoundStatus.ACTIVE
        assert reloaded.current_round == 1
        assert await sql_repos.events.find_with_due_rounds(event.start_date_time) == []

    async def test_add_round_keeps_existing_rounds(self, sql_repos):
        """Test a round added to a stale copy does not drop stored changes."""
        event = make_event()
        event.rounds = [make_round(event, "Prelims")]
        await sql_repos.events.save(event)
        await sql_repos.events.transition_round(
            event.id,
            event.rounds[0].id,
            expected=RoundStatus.UPCOMING,
            target=RoundStatus.ACTIVE,
            now=event.start_date_time,
        )

        number = await sql_repos.events.add_round(event.id, make_round(event, "Finals"))

        loaded = await sql_repos.events.find_by_id(event.id)
        assert number == 2
        assert [r.name for r in loaded.rounds] == ["Prelims", "Finals"]
        assert loaded.rounds[0].status == RoundStatus.ACTIVE
        assert await sql_repos.events.add_round(uuid7(), make_round(event)) is None

    async def test_update_round_requires_expected_status(self, sql_repos):
        """Test an edit is refused once the round has left the expected status."""
        event = make_event()
        event.rounds = [make_round(event, "Prelims")]
        await sql_repos.events.save(event)
        edited = replace(event.rounds[0], name="Qualifier")

        assert await sql_repos.events.update_round(
            event.id, edited, expected_status=RoundStatus.UPCOMING
        )
        await sql_repos.events.transition_round(
            event.id,
            edited.id,
            expected=RoundStatus.UPCOMING,
            target=RoundStatus.ACTIVE,
            now=event.start_date_time,
        )
        assert not await sql_repos.events.update_round(
            event.id, replace(edited, name="Late"), expected_status=RoundStatus.UPCOMING
        )

        loaded = await sql_repos.events.find_by_id(event.id)
        assert loaded.rounds[0].name == "Qualifier"
        assert loaded.rounds[0].status == RoundStatus.ACTIVE

    async def test_recount_repairs_drift(self, sql_repos, database):
        """Test recount rewrites a drifted counter."""
        event = make_event()
        await sql_repos.events.save(event)
        await sql_repos.registrations.add([make_registration(event)], capacity=None)
        async with database.get_session() as session:
            await session.execute(
                update(EventModel).where(EventModel.id == event.id).values(registered_count=9)
            )

        assert await sql_repos.events.recount(event.id) == (9, 1)
        assert (await sql_repos.events.find_by_id(event.id)).registered_count == 1

    async def test_delete(self, sql_repos):
        """Test a deleted event is gone."""
        event = make_event(status=EventStatus.DRAFT)
        await sql_repos.events.save(event)

        await sql_repos.events.delete(event.id)

        assert await sql_repos.events.find_by_id(event.id) is None
        assert event.id not in await sql_repos.events.find_ids()
