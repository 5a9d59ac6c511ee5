import pytest
from unittest.mock import patch

from leadpilot.core.errors import PersistenceError, ValidationError
from leadpilot.models import Account, Lead
from leadpilot.schemas.ingestion import LeadCandidate
from leadpilot.workers.ingestion import reconciler
from leadpilot.workers.ingestion.reconciler import (
    dedupe_candidates,
    domain_from_website,
    reconcile,
    upsert_account_by_name,
)


def candidate(**fields):
    fields.setdefault("full_name", "Layla Haddad")
    fields.setdefault("company_name", "Noon")
    return LeadCandidate(**fields)


class TestDomainFromWebsite:

    @pytest.mark.parametrize(
        "site, expected",
        [
            ("https://www.example.com/path", "example.com"),
            ("", ""),
            ("   ", ""),
            ("www.Shop.AE", "shop.ae"),
            ("http://store.example:8080/x?y=1", "store.example"),
            ("noon.example", "noon.example"),
            ("http://[::1", ""),
        ],
    )
    def test_domain(self, site, expected):
        assert domain_from_website(site) == expected


class TestDedupe:

    def test_same_email_different_case_collapses(self):
        first = candidate(email="Layla@Noon.example", job_title="CEO")
        second = candidate(email="layla@noon.EXAMPLE ", job_title="Founder")

        assert dedupe_candidates([first, second]) == [first]

    def test_name_and_company_key_without_email(self):
        a = candidate(full_name="Omar Saeed", company_name="Careem")
        b = candidate(full_name="omar saeed", company_name="CAREEM")
        c = candidate(full_name="Omar Saeed", company_name="Talabat")

        assert dedupe_candidates([a, b, c]) == [a, c]

    def test_email_and_name_keys_do_not_mix(self):
        with_email = candidate(email="layla@noon.example")
        without_email = candidate()

        assert dedupe_candidates([with_email, without_email]) == [with_email, without_email]

    def test_fully_blank_candidates_are_kept_for_skipping(self):
        blank = LeadCandidate()

        assert len(dedupe_candidates([blank, LeadCandidate()])) == 2


class TestReconcile:

    def test_creates_account_and_lead(self, store, db):
        report = reconcile(store, [candidate(
            email="layla@noon.example",
            job_title="CEO",
            phone="+971500000001",
            linkedin="https://linkedin.com/in/layla",
            company_website="https://www.noon.example/about",
        )])

        assert (report.created, report.updated, report.skipped, report.total) == (1, 0, 0, 1)

        account = db.query(Account).one()
        assert account.name == "Noon"
        assert account.domain == "noon.example"

        lead = db.query(Lead).one()
        assert lead.name == "Layla Haddad"
        assert lead.email == "layla@noon.example"
        assert lead.company == "Noon"
        assert lead.account_id == account.id
        assert lead.stage == "new"
        assert lead.score == 0
        assert lead.job_title == "CEO"

    def test_duplicates_collapse_before_writes(self, store, db):
        report = reconcile(store, [
            candidate(email="layla@noon.example", job_title="CEO"),
            candidate(email="LAYLA@noon.example", job_title="Founder"),
        ])

        assert (report.created, report.updated, report.total) == (1, 0, 1)
        assert db.query(Lead).one().job_title == "CEO"

    def test_blank_name_or_company_is_skipped(self, store, db):
        report = reconcile(store, [
            candidate(full_name="  ", email="ghost@noon.example"),
            candidate(company_name="", email="nocompany@example.org"),
            LeadCandidate(),
        ])

        assert (report.created, report.updated, report.skipped, report.total) == (0, 0, 3, 3)
        assert db.query(Account).count() == 0
        assert db.query(Lead).count() == 0

    def test_reimport_updates_without_erasing(self, store, db):
        reconcile(store, [candidate(email="layla@noon.example", phone="+971500000001", job_title="CEO")])

        report = reconcile(store, [candidate(
            email="layla@noon.example",
            full_name="Layla H. Haddad",
            phone="",
            job_title="Chief Executive Officer",
        )])

        assert (report.created, report.updated) == (0, 1)
        lead = db.query(Lead).one()
        assert lead.name == "Layla H. Haddad"
        assert lead.phone == "+971500000001"
        assert lead.job_title == "Chief Executive Officer"

    def test_reimport_keeps_pipeline_stage(self, store, db, make_lead):
        make_lead(name="Layla Haddad", company="Noon", email="layla@noon.example", stage="proposal", score=80)

        reconcile(store, [candidate(email="layla@noon.example")])

        lead = db.query(Lead).one()
        assert lead.stage == "proposal"
        assert lead.score == 80

    def test_match_by_name_and_company_without_email(self, store, db):
        reconcile(store, [candidate(full_name="Omar Saeed", company_name="Careem")])
        report = reconcile(store, [candidate(full_name="Omar Saeed", company_name="Careem", linkedin="in/omar")])

        assert (report.created, report.updated) == (0, 1)
        assert db.query(Lead).one().linkedin == "in/omar"

    def test_account_match_is_exact_and_case_sensitive(self, store, db):
        reconcile(store, [
            candidate(full_name="A One", company_name="Acme"),
            candidate(full_name="B Two", company_name="Acme"),
            candidate(full_name="C Three", company_name="acme"),
        ])

        assert sorted(a.name for a in db.query(Account).all()) == ["Acme", "acme"]

    def test_existing_account_is_not_modified(self, store, db):
        reconcile(store, [candidate(full_name="A One", company_website="first.example")])
        reconcile(store, [candidate(full_name="B Two", company_website="second.example")])

        assert db.query(Account).one().domain == "first.example"

    def test_storage_error_aborts_but_keeps_earlier_candidates(self, store, db):
        real_upsert = reconciler.upsert_lead
        calls = []

        def failing_second(store_, account_id, c):
            calls.append(c.full_name)
            if len(calls) == 2:
                raise PersistenceError("disk full")
            return real_upsert(store_, account_id, c)

        with patch.object(reconciler, "upsert_lead", side_effect=failing_second):
            with pytest.raises(PersistenceError):
                reconcile(store, [
                    candidate(full_name="First", company_name="Alpha"),
                    candidate(full_name="Second", company_name="Beta"),
                    candidate(full_name="Third", company_name="Gamma"),
                ])

        assert calls == ["First", "Second"]
        assert [l.name for l in db.query(Lead).all()] == ["First"]
        # Beta's account was part of the failed candidate and rolled back with it
        assert [a.name for a in db.query(Account).all()] == ["Alpha"]


class TestUpsertAccount:

    def test_blank_name_is_rejected(self, store):
        with pytest.raises(ValidationError):
            upsert_account_by_name(store, "   ", "example.com")

    def test_unparseable_website_means_no_domain(self, store):
        account, created = upsert_account_by_name(store, "Weird Co", "http://[broken")

        assert created is True
        assert account.domain is None
