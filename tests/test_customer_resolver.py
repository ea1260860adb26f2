import pytest
from sqlalchemy import func, select

from app.core.errors import CustomerNotFound
from app.infra.entities import Customer
from app.services.customers.customer_resolver import CustomerIdentity, CustomerResolver


def _seed(session_factory, **fields):
    with session_factory() as session:
        customer = Customer(status="active", **fields)
        session.add(customer)
        session.commit()
        return customer.id


def _count(session_factory):
    with session_factory() as session:
        return session.execute(select(func.count()).select_from(Customer)).scalar()


def test_email_match_wins_over_phone_match(session_factory):
    by_email = _seed(session_factory, customer_code="CUST-001", company_name="A", email="a@abc.vn")
    _seed(session_factory, customer_code="CUST-002", company_name="B", phone="+84901234567")

    with session_factory() as session:
        resolved = CustomerResolver(session).resolve(
            CustomerIdentity(company_name="ABC", email="a@abc.vn", phone="+84901234567")
        )

    assert resolved.customer.id == by_email
    assert resolved.matched_by == "email"
    assert not resolved.created


def test_fill_if_empty_never_overwrites(session_factory):
    _seed(
        session_factory,
        customer_code="CUST-001",
        company_name="CÔNG TY ABC",
        email="a@abc.vn",
        phone="+84900000000",
    )

    with session_factory() as session:
        resolved = CustomerResolver(session).resolve(
            CustomerIdentity(
                company_name="ABC mới",
                email="a@abc.vn",
                phone="+84901234567",
                address="123 Nguyễn Văn Linh",
                tax_code="0312345678",
            )
        )
        session.commit()
        customer = resolved.customer

    assert customer.phone == "+84900000000"
    assert customer.company_name == "CÔNG TY ABC"
    assert customer.address == "123 Nguyễn Văn Linh"
    assert set(resolved.filled_fields) == {"address", "tax_code"}


def test_new_customer_gets_next_sequential_code(session_factory):
    _seed(session_factory, customer_code="CUST-007", company_name="A")

    with session_factory() as session:
        resolved = CustomerResolver(session).resolve(CustomerIdentity(company_name="CÔNG TY MỚI", email="new@x.vn"))
        session.commit()

    assert resolved.created
    assert resolved.customer.customer_code == "CUST-008"
    assert _count(session_factory) == 2


def test_missing_customer_is_an_error_when_creation_is_not_allowed(session_factory):
    identity = CustomerIdentity(company_name="CÔNG TY ABC", email="nobody@abc.vn")

    with session_factory() as session:
        with pytest.raises(CustomerNotFound) as exc:
            CustomerResolver(session).resolve(identity, create_if_missing=False)

    assert exc.value.identity["email"] == "nobody@abc.vn"
    assert _count(session_factory) == 0


def test_concurrent_insert_is_reconciled(session_factory, monkeypatch):
    winner = _seed(session_factory, customer_code="CUST-001", company_name="CÔNG TY ABC", user_id="user-1")
    sleeps = []

    with session_factory() as session:
        resolver = CustomerResolver(session, sleep=sleeps.append)
        real_find = resolver.customers.find_by_user_id
        calls = []

        # the first lookup runs before the other writer commits
        def racing_find(user_id):
            calls.append(user_id)
            return None if len(calls) == 1 else real_find(user_id)

        monkeypatch.setattr(resolver.customers, "find_by_user_id", racing_find)
        resolved = resolver.resolve(CustomerIdentity(company_name="CÔNG TY ABC", user_id="user-1", phone="+84901234567"))
        session.commit()

    assert not resolved.created
    assert resolved.matched_by == "reconcile"
    assert resolved.customer.id == winner
    assert resolved.customer.phone == "+84901234567"
    assert sleeps == [0.1]
    assert _count(session_factory) == 1


def test_code_taken_by_another_customer_is_recomputed(session_factory, monkeypatch):
    _seed(session_factory, customer_code="CUST-001", company_name="OTHER CO", email="other@x.vn")
    sleeps = []

    with session_factory() as session:
        resolver = CustomerResolver(session, sleep=sleeps.append)
        real_next = resolver.customers.next_customer_code
        codes = []

        # the first read of the sequence is stale: another import just took CUST-001
        def stale_then_real():
            codes.append(real_next() if codes else "CUST-001")
            return codes[-1]

        monkeypatch.setattr(resolver.customers, "next_customer_code", stale_then_real)
        resolved = resolver.resolve(CustomerIdentity(company_name="NEW CO", email="new@x.vn"))
        session.commit()

    assert resolved.created
    assert resolved.customer.customer_code == "CUST-002"
    assert codes == ["CUST-001", "CUST-002"]
    assert sleeps == [0.1]
    assert _count(session_factory) == 2
