"""
Tests for the service layer: typed errors, cache invalidation, transfers
"""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import event
from sqlalchemy.exc import OperationalError

from app.db.cache import ReadThroughCache
from app.db.records import PhoneType
from app.errors import ConstraintViolation, NotFoundError, UniqueConstraintError
from app.repositories.invoices import InvoiceRepository
from app.services.customers import CustomerService
from app.services.invoices import InvoiceService
from app.services.telephone_numbers import TelephoneNumberService
from app.services.transfers import TransferService


@pytest.fixture
def customers(engine):
    return CustomerService(engine, retry_delay=0)


@pytest.fixture
def invoices(engine):
    return InvoiceService(engine, retry_delay=0)


@pytest.fixture
def phones(engine):
    return TelephoneNumberService(engine, retry_delay=0)


@pytest.fixture
def transfers(engine):
    return TransferService(engine, retry_delay=0)


class TestCustomerService:
    def test_end_to_end_balance(self, customers, invoices):
        acme = customers.create_customer("Acme", "a@x.com")
        invoices.create_invoice(acme.id, "INV-1", date(2024, 1, 1), Decimal("100"))

        loaded = customers.get_customer(acme.id, include_related=True)

        assert loaded.balance == Decimal("100")
        assert len(loaded.invoices) == 1

    def test_duplicate_email(self, customers):
        customers.create_customer("Acme", "a@x.com")
        with pytest.raises(UniqueConstraintError):
            customers.create_customer("Other", "a@x.com")

    def test_update_keeping_own_email(self, customers):
        acme = customers.create_customer("Acme", "a@x.com")
        updated = customers.update_customer(acme.id, "Acme Group", "a@x.com")
        assert updated.name == "Acme Group"

    def test_update_to_taken_email(self, customers):
        customers.create_customer("Acme", "a@x.com")
        bravo = customers.create_customer("Bravo", "b@x.com")
        with pytest.raises(UniqueConstraintError):
            customers.update_customer(bravo.id, "Bravo", "a@x.com")

    def test_missing_customer(self, customers):
        with pytest.raises(NotFoundError):
            customers.get_customer(404)
        with pytest.raises(NotFoundError):
            customers.update_customer(404, "X", "x@x.com")
        assert customers.delete_customer(404) is False

    def test_list_customers(self, customers):
        for i in range(3):
            customers.create_customer(f"C{i}", f"c{i}@x.com")
        items, total = customers.list_customers(page=1, page_size=2)
        assert total == 3
        assert len(items) == 2

    def test_search(self, customers):
        customers.create_customer("Acme", "a@x.com")
        customers.create_customer("Bravo", "b@x.com")
        assert [c.name for c in customers.search_customers(name="rav")] == ["Bravo"]

    def test_writes_invalidate_cached_list(self, engine):
        service = CustomerService(engine, cache=ReadThroughCache(ttl_seconds=60))

        assert service.list_all_customers() == []
        service.create_customer("Acme", "a@x.com")

        assert [c.name for c in service.list_all_customers()] == ["Acme"]

    def test_email_race_is_unique_violation(self, customers, monkeypatch):
        customers.create_customer("Acme", "a@x.com")
        # Both requests passed the pre-check; the index decides
        monkeypatch.setattr(customers.repo, "email_exists", lambda *a, **kw: False)

        with pytest.raises(UniqueConstraintError) as excinfo:
            customers.create_customer("Other", "a@x.com")

        assert excinfo.value.field == "Email"

    def test_update_of_deleted_customer(self, customers, monkeypatch):
        acme = customers.create_customer("Acme", "a@x.com")
        monkeypatch.setattr(customers.repo, "update", lambda customer: False)

        with pytest.raises(NotFoundError):
            customers.update_customer(acme.id, "Acme", "a@x.com")

    def test_upsert_inserts_then_updates(self, customers):
        created = customers.upsert_customer("Acme", "a@x.com")
        updated = customers.upsert_customer("Acme Group", "group@x.com", customer_id=created.id)

        assert updated.id == created.id
        assert updated.name == "Acme Group"
        assert [c.email for c in customers.list_all_customers()] == ["group@x.com"]

    def test_upsert_with_unknown_id_inserts(self, customers):
        saved = customers.upsert_customer("Acme", "a@x.com", customer_id=42)
        assert saved.id == 42
        assert customers.get_customer(42).name == "Acme"

    def test_upsert_to_taken_email(self, customers):
        customers.create_customer("Acme", "a@x.com")
        bravo = customers.create_customer("Bravo", "b@x.com")
        with pytest.raises(UniqueConstraintError):
            customers.upsert_customer("Bravo", "a@x.com", customer_id=bravo.id)

    def test_customer_with_stats(self, customers, invoices, phones):
        acme = customers.create_customer("Acme", "a@x.com")
        invoices.create_invoice(acme.id, "INV-1", date(2024, 1, 1), Decimal("10"))
        invoices.create_invoice(acme.id, "INV-2", date(2024, 3, 1), Decimal("30"))
        phones.create_telephone_number(acme.id, PhoneType.WORK, "1")

        customer, stats = customers.get_customer_with_stats(acme.id)

        assert len(customer.invoices) == 2
        assert len(customer.phone_numbers) == 1
        assert stats.invoice_count == 2
        assert stats.total_amount == Decimal("40")
        assert stats.average_amount == Decimal("20")
        assert stats.last_invoice_date == date(2024, 3, 1)

    def test_customer_with_stats_no_invoices(self, customers):
        acme = customers.create_customer("Acme", "a@x.com")
        _, stats = customers.get_customer_with_stats(acme.id)
        assert stats.invoice_count == 0
        assert stats.average_amount == Decimal("0")
        assert stats.last_invoice_date is None
        with pytest.raises(NotFoundError):
            customers.get_customer_with_stats(404)

    def test_customer_summaries(self, customers, invoices):
        acme = customers.create_customer("Acme", "a@x.com")
        customers.create_customer("Bravo", "b@x.com")
        invoices.create_invoice(acme.id, "INV-1", date(2024, 1, 1), Decimal("10"))
        invoices.create_invoice(acme.id, "INV-2", date(2024, 6, 1), Decimal("15"))

        summary = {s.name: s for s in customers.customer_summaries()}

        assert summary["Acme"].invoice_count == 2
        assert summary["Acme"].total_amount == Decimal("25")
        assert summary["Acme"].last_invoice_date == date(2024, 6, 1)
        assert summary["Bravo"].invoice_count == 0
        assert summary["Bravo"].total_amount == Decimal("0")
        assert summary["Bravo"].last_invoice_date is None


class TestInvoiceService:
    def test_unknown_customer(self, invoices):
        with pytest.raises(NotFoundError):
            invoices.create_invoice(99, "INV-1", date(2024, 1, 1), Decimal("1"))
        with pytest.raises(NotFoundError):
            invoices.list_for_customer(99)

    def test_duplicate_invoice_number(self, customers, invoices):
        acme = customers.create_customer("Acme", "a@x.com")
        invoices.create_invoice(acme.id, "INV-1", date(2024, 1, 1), Decimal("1"))
        with pytest.raises(UniqueConstraintError):
            invoices.create_invoice(acme.id, "INV-1", date(2024, 1, 2), Decimal("2"))

    def test_update_keeping_own_number(self, customers, invoices):
        acme = customers.create_customer("Acme", "a@x.com")
        invoice = invoices.create_invoice(acme.id, "INV-1", date(2024, 1, 1), Decimal("1"))

        updated = invoices.update_invoice(invoice.id, "INV-1", date(2024, 2, 1), Decimal("5"))

        assert updated.amount == Decimal("5")
        assert invoices.get_invoice_by_number("INV-1").invoice_date == date(2024, 2, 1)

    def test_negative_amount_is_constraint_violation(self, customers, invoices):
        acme = customers.create_customer("Acme", "a@x.com")
        with pytest.raises(ConstraintViolation):
            invoices.create_invoice(acme.id, "INV-1", date(2024, 1, 1), Decimal("-5"))

    def test_invoice_number_race_is_unique_violation(self, customers, invoices, monkeypatch):
        acme = customers.create_customer("Acme", "a@x.com")
        invoices.create_invoice(acme.id, "INV-1", date(2024, 1, 1), Decimal("1"))
        monkeypatch.setattr(invoices.repo, "invoice_number_exists", lambda *a, **kw: False)

        with pytest.raises(UniqueConstraintError) as excinfo:
            invoices.create_invoice(acme.id, "INV-1", date(2024, 1, 2), Decimal("2"))

        assert excinfo.value.field == "Invoice number"

    def test_update_of_deleted_invoice(self, customers, invoices, monkeypatch):
        acme = customers.create_customer("Acme", "a@x.com")
        invoice = invoices.create_invoice(acme.id, "INV-1", date(2024, 1, 1), Decimal("1"))
        real_get = invoices.repo.get_by_id

        def get_then_delete(invoice_id):
            found = real_get(invoice_id)
            invoices.repo.delete(invoice_id)
            return found

        monkeypatch.setattr(invoices.repo, "get_by_id", get_then_delete)

        with pytest.raises(NotFoundError):
            invoices.update_invoice(invoice.id, "INV-1", date(2024, 2, 1), Decimal("5"))

    def test_adjust_all_amounts(self, customers, invoices):
        acme = customers.create_customer("Acme", "a@x.com")
        invoices.create_invoice(acme.id, "INV-1", date(2024, 1, 1), Decimal("100.00"))
        invoices.create_invoice(acme.id, "INV-2", date(2024, 1, 2), Decimal("19.99"))

        assert invoices.adjust_all_amounts(Decimal("10")) == 2

        amounts = sorted(i.amount for i in invoices.list_invoices())
        assert amounts == [Decimal("21.99"), Decimal("110.00")]

    def test_adjust_below_zero_is_constraint_violation(self, customers, invoices):
        acme = customers.create_customer("Acme", "a@x.com")
        invoices.create_invoice(acme.id, "INV-1", date(2024, 1, 1), Decimal("100.00"))

        with pytest.raises(ConstraintViolation):
            invoices.adjust_all_amounts(Decimal("-150"))

        assert invoices.get_invoice_by_number("INV-1").amount == Decimal("100.00")

    def test_monthly_revenue_with_growth(self, customers, invoices):
        acme = customers.create_customer("Acme", "a@x.com")
        invoices.create_invoice(acme.id, "INV-1", date(2024, 1, 5), Decimal("60"))
        invoices.create_invoice(acme.id, "INV-2", date(2024, 1, 20), Decimal("40"))
        invoices.create_invoice(acme.id, "INV-3", date(2024, 2, 1), Decimal("150"))
        invoices.create_invoice(acme.id, "INV-4", date(2024, 3, 1), Decimal("75"))
        invoices.create_invoice(acme.id, "INV-5", date(2023, 12, 1), Decimal("999"))

        months = invoices.monthly_revenue(2024)

        assert [m.month for m in months] == [1, 2, 3]
        assert [m.revenue for m in months] == [Decimal("100"), Decimal("150"), Decimal("75")]
        assert months[0].previous_month_revenue is None
        assert months[1].previous_month_revenue == Decimal("100")
        assert [m.growth_percentage for m in months] == [
            Decimal("0"),
            Decimal("50"),
            Decimal("-50"),
        ]

    def test_monthly_revenue_empty_year(self, invoices):
        assert invoices.monthly_revenue(2024) == []

    def test_statistics(self, customers, invoices):
        acme = customers.create_customer("Acme", "a@x.com")
        invoices.create_invoice(acme.id, "INV-1", date(2023, 5, 1), Decimal("10"))
        invoices.create_invoice(acme.id, "INV-2", date(2024, 1, 1), Decimal("20"))
        invoices.create_invoice(acme.id, "INV-3", date(2024, 2, 1), Decimal("40"))

        stats = invoices.invoice_statistics()

        assert [s.year for s in stats] == [2023, 2024]
        assert stats[1].invoice_count == 2
        assert stats[1].total_revenue == Decimal("60")
        assert stats[1].average_amount == Decimal("30")
        assert stats[1].min_amount == Decimal("20")
        assert stats[1].max_amount == Decimal("40")


class TestTelephoneNumberService:
    def test_create_and_list(self, customers, phones):
        acme = customers.create_customer("Acme", "a@x.com")
        phones.create_telephone_number(acme.id, PhoneType.MOBILE, "07700 900000")
        assert len(phones.list_for_customer(acme.id)) == 1

    def test_unknown_customer(self, phones):
        with pytest.raises(NotFoundError):
            phones.create_telephone_number(5, PhoneType.WORK, "1")

    def test_invalid_type_is_constraint_violation(self, customers, phones):
        acme = customers.create_customer("Acme", "a@x.com")
        with pytest.raises(ConstraintViolation):
            phones.create_telephone_number(acme.id, "Fax", "1")

    def test_missing(self, phones):
        with pytest.raises(NotFoundError):
            phones.get_telephone_number(1)
        with pytest.raises(NotFoundError):
            phones.update_telephone_number(1, PhoneType.WORK, "1")

    def test_update_of_deleted_number(self, customers, phones, monkeypatch):
        acme = customers.create_customer("Acme", "a@x.com")
        phone = phones.create_telephone_number(acme.id, PhoneType.MOBILE, "1")
        monkeypatch.setattr(phones.repo, "update", lambda phone: False)

        with pytest.raises(NotFoundError):
            phones.update_telephone_number(phone.id, PhoneType.WORK, "2")


class TestTransferService:
    @pytest.fixture
    def two_customers(self, customers, invoices):
        a = customers.create_customer("A", "a@x.com")
        b = customers.create_customer("B", "b@x.com")
        for n in range(3):
            invoices.create_invoice(a.id, f"INV-{n}", date(2024, 1, 1), Decimal("10"))
        return a, b

    def test_transfer(self, transfers, invoices, two_customers):
        a, b = two_customers

        result = transfers.transfer_invoices(a.id, b.id)

        assert result.success is True
        assert result.invoices_transferred == 3
        assert invoices.list_for_customer(a.id) == []
        assert len(invoices.list_for_customer(b.id)) == 3
        assert len(invoices.list_invoices()) == 3

    def test_missing_target_leaves_source_untouched(self, transfers, invoices, two_customers):
        a, _ = two_customers

        result = transfers.transfer_invoices(a.id, 999)

        assert result.success is False
        assert "999" in result.message
        assert len(invoices.list_for_customer(a.id)) == 3

    def test_same_customer(self, transfers, two_customers):
        a, _ = two_customers
        assert transfers.transfer_invoices(a.id, a.id).success is False

    def test_nothing_to_transfer(self, transfers, two_customers):
        a, b = two_customers
        result = transfers.transfer_invoices(b.id, a.id)
        assert result.success is False
        assert "No invoices" in result.message

    def test_failure_mid_transaction_rolls_back(
        self, transfers, invoices, two_customers, monkeypatch
    ):
        a, b = two_customers
        real_reassign = InvoiceRepository.reassign_all

        def reassign_then_fail(conn, from_id, to_id):
            real_reassign(conn, from_id, to_id)
            raise OperationalError("UPDATE invoices", {}, Exception("disk I/O error"))

        monkeypatch.setattr(InvoiceRepository, "reassign_all", staticmethod(reassign_then_fail))

        result = transfers.transfer_invoices(a.id, b.id)

        assert result.success is False
        assert "rolled back" in result.message
        assert len(invoices.list_for_customer(a.id)) == 3
        assert invoices.list_for_customer(b.id) == []

    def test_checks_run_inside_the_transaction(self, engine, transfers, two_customers):
        a, b = two_customers
        seen = []

        def _record(conn, cursor, statement, parameters, context, executemany):
            seen.append(statement.strip().split()[0].upper())

        event.listen(engine, "before_cursor_execute", _record)
        try:
            assert transfers.transfer_invoices(a.id, b.id).success is True
        finally:
            event.remove(engine, "before_cursor_execute", _record)

        assert seen[0] == "BEGIN"
        assert seen[1:] == ["SELECT", "SELECT", "SELECT", "UPDATE"]
