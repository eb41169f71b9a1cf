from datetime import datetime
from typing import Iterable, List, Sequence, Tuple
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from app.main import app
from app.api.v1.endpoints.ledger import get_ledger_store
from app.core.auth import get_current_user
from app.db.mongo import get_db
from app.models.customer import CustomerInDB
from app.models.invoice import InvoiceInDB, InvoiceItem
from app.models.ledger import InvoiceFilter, PaymentFilter
from app.models.payment import PaymentInDB
from app.models.user import UserResponse, UserRole

CREATED = datetime(2025, 1, 1)


def make_collection(docs: Sequence[dict] = ()) -> MagicMock:
    """Motor collection double; find()/aggregate() cursors chain and resolve to docs."""
    collection = MagicMock()

    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.skip.return_value = cursor
    cursor.limit.return_value = cursor
    cursor.to_list = AsyncMock(return_value=list(docs))
    collection.cursor = cursor
    collection.find.return_value = cursor
    collection.aggregate.return_value = cursor

    collection.insert_one = AsyncMock(return_value=MagicMock(inserted_id=ObjectId()))
    collection.insert_many = AsyncMock(return_value=MagicMock(inserted_ids=[]))
    collection.find_one = AsyncMock(return_value=None)
    collection.find_one_and_update = AsyncMock(return_value=None)
    collection.update_one = AsyncMock(return_value=MagicMock(modified_count=1))
    collection.delete_one = AsyncMock(return_value=MagicMock(deleted_count=1))
    collection.count_documents = AsyncMock(return_value=len(docs))
    collection.distinct = AsyncMock(return_value=[])
    return collection


class MockDatabase:
    """Stands in for AsyncIOMotorDatabase; collections are created on first access."""

    def __init__(self):
        self.collections = {}
        self.client = MagicMock()

    def __getitem__(self, name: str) -> MagicMock:
        if name not in self.collections:
            self.collections[name] = make_collection()
        return self.collections[name]

    def set_docs(self, name: str, docs: Sequence[dict]) -> MagicMock:
        self.collections[name] = make_collection(docs)
        return self.collections[name]


class FakeLedgerStore:
    """In-memory LedgerStore with the same filtering rules as the Mongo one."""

    def __init__(
        self,
        customers: Iterable[CustomerInDB] = (),
        invoices: Iterable[InvoiceInDB] = (),
        payments: Iterable[PaymentInDB] = ()
    ):
        self.customers = list(customers)
        self.invoices = list(invoices)
        self.payments = list(payments)
        self.calls: List[str] = []

    async def find_customers_by_area(self, area: str) -> List[CustomerInDB]:
        self.calls.append("customers")
        return [c for c in self.customers if area.lower() in c.area.lower()]

    async def find_invoices(self, invoice_filter: InvoiceFilter) -> List[InvoiceInDB]:
        self.calls.append("invoices")
        customer_ids = set(invoice_filter.customer_ids)
        found = [
            invoice for invoice in self.invoices
            if str(invoice.customer_id) in customer_ids
            and (not invoice_filter.created_by or str(invoice.created_by) == invoice_filter.created_by)
            and invoice_filter.date_range.contains(invoice.invoice_date)
        ]
        return sorted(found, key=lambda invoice: invoice.invoice_date)

    async def find_payments(self, payment_filter: PaymentFilter) -> List[PaymentInDB]:
        self.calls.append("payments")
        invoice_ids = set(payment_filter.invoice_ids)
        found = [
            payment for payment in self.payments
            if str(payment.invoice_id) in invoice_ids
            and (not payment_filter.created_by or str(payment.created_by) == payment_filter.created_by)
            and payment_filter.date_range.contains(payment.payment_date)
        ]
        return sorted(found, key=lambda payment: payment.payment_date)


class FailingLedgerStore(FakeLedgerStore):
    def __init__(self, error: Exception):
        super().__init__()
        self.error = error

    async def find_invoices(self, invoice_filter: InvoiceFilter) -> List[InvoiceInDB]:
        raise self.error


def make_customer(name: str = "Muhammad Yaqoob", area: str = "Peshawar") -> CustomerInDB:
    return CustomerInDB(
        _id=ObjectId(),
        name=name,
        area=area,
        role="dealer",
        created_by=ObjectId(),
        created_at=CREATED,
        updated_at=CREATED,
    )


def make_invoice(
    customer_id,
    invoice_number: str,
    invoice_date: datetime,
    items: Sequence[Tuple[str, int, float]],
    paid_amount: float = 0,
    created_by=None,
) -> InvoiceInDB:
    """items are (name, quantity, rate); amounts and totals are derived."""
    line_items = [
        InvoiceItem(product_id=ObjectId(), name_snapshot=name, quantity=qty, rate=rate, amount=qty * rate)
        for name, qty, rate in items
    ]
    total = sum(item.amount for item in line_items)
    return InvoiceInDB(
        _id=ObjectId(),
        invoice_number=invoice_number,
        customer_id=customer_id,
        items=line_items,
        total_amount=total,
        paid_amount=paid_amount,
        due_amount=total - paid_amount,
        invoice_date=invoice_date,
        created_by=created_by or ObjectId(),
        created_at=CREATED,
        updated_at=CREATED,
    )


def make_payment(invoice: InvoiceInDB, amount: float, payment_date: datetime, created_by=None) -> PaymentInDB:
    return PaymentInDB(
        _id=ObjectId(),
        invoice_id=invoice.id,
        amount=amount,
        payment_date=payment_date,
        created_by=created_by or invoice.created_by,
        created_at=CREATED,
        updated_at=CREATED,
    )


def make_user(role: UserRole) -> UserResponse:
    return UserResponse(
        id=str(ObjectId()),
        name=f"{role.value.title()} User",
        email=f"{role.value}@ledger.com",
        role=role,
        created_at=CREATED,
        updated_at=CREATED,
    )


@pytest.fixture
def customer_factory():
    return make_customer


@pytest.fixture
def invoice_factory():
    return make_invoice


@pytest.fixture
def payment_factory():
    return make_payment


@pytest.fixture
def store_factory():
    return FakeLedgerStore


@pytest.fixture
def failing_store_factory():
    return FailingLedgerStore


@pytest.fixture
def mock_db():
    return MockDatabase()


@pytest.fixture
def fake_store():
    return FakeLedgerStore()


@pytest.fixture
def accountant_user():
    return make_user(UserRole.ACCOUNTANT)


@pytest.fixture
def admin_user():
    return make_user(UserRole.ADMIN)


def _override(db, user, store):
    app.dependency_overrides[get_db] = lambda: db
    if user is not None:
        app.dependency_overrides[get_current_user] = lambda: user
    app.dependency_overrides[get_ledger_store] = lambda: store


@pytest.fixture
def client(mock_db, accountant_user, fake_store):
    """Client authenticated as an accountant. The lifespan (Mongo connect) is not run."""
    _override(mock_db, accountant_user, fake_store)
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_client(mock_db, admin_user, fake_store):
    _override(mock_db, admin_user, fake_store)
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def anonymous_client(mock_db, fake_store):
    """Real token checking against the mocked users collection."""
    _override(mock_db, None, fake_store)
    yield TestClient(app)
    app.dependency_overrides.clear()
