from datetime import datetime, timedelta
from unittest.mock import patch

from leadpilot.core.errors import PersistenceError
from leadpilot.models import Activity, Lead
from leadpilot.services.lead_agent import LeadAgent
from leadpilot.workers.agent import batch_runner
from leadpilot.workers.agent.batch_runner import (
    run_agent_batch,
    run_exclusive,
    run_pending_leads,
)

BASE_TIME = datetime(2026, 1, 1, 9, 0, 0)


def _seed_pipeline(make_lead):
    """10 open leads with increasing updated_at, plus 3 finalized ones updated last."""
    eligible = [
        make_lead(name=f"Open {i}", stage="new", updated_at=BASE_TIME + timedelta(minutes=i))
        for i in range(10)
    ]
    terminal = [
        make_lead(name=f"Closed {i}", stage=stage, updated_at=BASE_TIME + timedelta(hours=1, minutes=i))
        for i, stage in enumerate(["won", "lost", "won"])
    ]
    return [l.id for l in eligible], [l.id for l in terminal]


class TestRunPendingLeads:

    def test_processes_most_recently_updated_open_leads(self, store, db, make_lead):
        eligible_ids, terminal_ids = _seed_pipeline(make_lead)

        processed = run_pending_leads(store, 5)

        assert processed == 5

        advanced = {l.id for l in db.query(Lead).filter(Lead.stage == "outreached").all()}
        assert advanced == set(eligible_ids[5:])

        untouched = db.query(Lead).filter(Lead.id.in_(eligible_ids[:5])).all()
        assert all(l.stage == "new" for l in untouched)

        finalized = db.query(Lead).filter(Lead.id.in_(terminal_ids)).all()
        assert sorted(l.stage for l in finalized) == ["lost", "won", "won"]
        assert db.query(Activity).count() == 5

    def test_selection_order_is_newest_first(self, store, make_lead):
        eligible_ids, _ = _seed_pipeline(make_lead)

        selected = batch_runner.select_pending_leads(store, 3)

        assert [l.id for l in selected] == list(reversed(eligible_ids))[:3]

    def test_non_positive_limit_falls_back_to_default(self, store, make_lead):
        _seed_pipeline(make_lead)

        assert run_pending_leads(store, 0) == 5

    def test_limit_is_capped(self, store, make_lead, monkeypatch):
        _seed_pipeline(make_lead)
        monkeypatch.setattr(batch_runner.settings, "AGENT_BATCH_MAX", 2)

        assert run_pending_leads(store, 8) == 2

    def test_one_failing_lead_does_not_stop_the_batch(self, store, db, make_lead):
        eligible_ids, _ = _seed_pipeline(make_lead)
        bad_id = eligible_ids[-1]
        real_run = LeadAgent.run

        def flaky_run(self, lead_id):
            if lead_id == bad_id:
                raise PersistenceError("row locked")
            return real_run(self, lead_id)

        with patch.object(LeadAgent, "run", flaky_run):
            processed = run_pending_leads(store, 5)

        assert processed == 4
        assert db.get(Lead, bad_id).stage == "new"
        assert db.query(Lead).filter(Lead.stage == "outreached").count() == 4

    def test_half_written_failure_is_discarded_before_the_next_lead(self, store, db, make_lead):
        eligible_ids, _ = _seed_pipeline(make_lead)
        bad_id = eligible_ids[-1]
        real_run = LeadAgent.run

        def crash_after_write(self, lead_id):
            if lead_id == bad_id:
                # flushed but never committed
                self.store.update(self.store.get(Lead, lead_id), stage="lost")
                raise RuntimeError("crashed mid-step")
            return real_run(self, lead_id)

        with patch.object(LeadAgent, "run", crash_after_write):
            processed = run_pending_leads(store, 5)

        assert processed == 4
        db.expire_all()
        assert db.get(Lead, bad_id).stage == "new"

    def test_empty_pipeline(self, store):
        assert run_pending_leads(store, 5) == 0


class TestBatchGuard:

    def test_overlapping_batch_is_skipped(self, store, make_lead):
        make_lead()

        assert batch_runner._batch_lock.acquire(blocking=False)
        try:
            assert run_exclusive(store, 5) is None
        finally:
            batch_runner._batch_lock.release()

        assert run_exclusive(store, 5) == 1

    def test_scheduler_entry_point_uses_its_own_session(self, session_factory, make_lead, db):
        make_lead()
        make_lead(name="Second Lead")

        assert run_agent_batch(session_factory) == 2
        assert db.query(Lead).filter(Lead.stage == "outreached").count() == 2

    def test_scheduler_entry_point_never_raises(self, session_factory):
        with patch.object(batch_runner, "run_pending_leads", side_effect=RuntimeError("db down")):
            assert run_agent_batch(session_factory) == 0

        # the lock is released even after a failure
        assert batch_runner._batch_lock.acquire(blocking=False)
        batch_runner._batch_lock.release()
