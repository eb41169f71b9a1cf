"""Tests for the repositories against a mocked Motor database."""
from datetime import datetime
from unittest.mock import AsyncMock

import pytest
from bson import ObjectId

from app.models.customer import CustomerCreate, CustomerUpdate
from app.models.ledger import DateRange, InvoiceFilter, PaymentFilter
from app.models.user import UserCreate, UserRole, UserUpdate
from app.repositories.customer_repo import CustomerRepository
from app.repositories.invoice_repo import InvoiceRepository
from app.repositories.payment_repo import PaymentRepository
from app.repositories.product_repo import ProductRepository
from app.repositories.user_repo import UserRepository
from app.utils.query import contains_ci, date_range_query, page_window

CREATED = datetime(2025, 1, 1)


def user_doc(**overrides):
    doc = {
        "_id": ObjectId(),
        "name": "Test User",
        "email": "test@ledger.com",
        "password_hash": "$2b$12$hash",
        "role": "accountant",
        "created_at": CREATED,
        "updated_at": CREATED,
    }
    doc.update(overrides)
    return doc


class TestQueryHelpers:
    def test_contains_ci_escapes_regex(self):
        assert contains_ci("a.b (c)") == {"$regex": r"a\.b\ \(c\)", "$options": "i"}

    def test_open_date_range_has_no_bounds(self):
        assert date_range_query(DateRange()) is None

    def test_date_range_bounds(self):
        start, end = datetime(2025, 10, 1), datetime(2025, 10, 5)
        assert date_range_query(DateRange(start=start, end=end)) == {"$gte": start, "$lte": end}
        assert date_range_query(DateRange(end=end)) == {"$lte": end}

    def test_page_window(self):
        assert page_window(1, 10) == (0, 10)
        assert page_window(3, 20) == (40, 20)
        assert page_window(0, 10) == (0, 10)
        assert page_window(2, 1000) == (100, 100)


@pytest.mark.asyncio
class TestUserRepository:
    async def test_create_user_hashes_password(self, mock_db):
        repo = UserRepository(mock_db)

        user = await repo.create_user(UserCreate(name="Test User", email="test@ledger.com", password="secret123"))

        stored = mock_db["users"].insert_one.call_args.args[0]
        assert stored["password_hash"] != "secret123"
        assert stored["role"] == "accountant"
        assert user.id == mock_db["users"].insert_one.return_value.inserted_id

    async def test_get_user_by_id_malformed(self, mock_db):
        assert await UserRepository(mock_db).get_user_by_id("nope") is None
        mock_db["users"].find_one.assert_not_called()

    async def test_get_user_by_email(self, mock_db):
        mock_db["users"].find_one = AsyncMock(return_value=user_doc())

        user = await UserRepository(mock_db).get_user_by_email("test@ledger.com")

        assert user.email == "test@ledger.com"
        mock_db["users"].find_one.assert_called_once_with({"email": "test@ledger.com"})

    async def test_list_users_pages(self, mock_db):
        mock_db.set_docs("users", [user_doc(), user_doc(email="b@ledger.com")])

        users, total = await UserRepository(mock_db).list_users(page=2, limit=5)

        assert len(users) == 2
        assert total == 2
        mock_db["users"].cursor.skip.assert_called_once_with(5)
        mock_db["users"].cursor.limit.assert_called_once_with(5)

    async def test_update_user_blank_password_keeps_hash(self, mock_db):
        mock_db["users"].find_one_and_update = AsyncMock(return_value=user_doc(role="manager"))

        await UserRepository(mock_db).update_user(
            str(ObjectId()), UserUpdate(role=UserRole.MANAGER, password="  ")
        )

        updates = mock_db["users"].find_one_and_update.call_args.args[1]["$set"]
        assert updates["role"] == "manager"
        assert "password_hash" not in updates
        assert "password" not in updates

    async def test_update_user_new_password_is_hashed(self, mock_db):
        mock_db["users"].find_one_and_update = AsyncMock(return_value=user_doc())

        await UserRepository(mock_db).update_user(str(ObjectId()), UserUpdate(password="newpass1"))

        updates = mock_db["users"].find_one_and_update.call_args.args[1]["$set"]
        assert updates["password_hash"].startswith("$2")


@pytest.mark.asyncio
class TestCustomerRepository:
    async def test_list_filters_are_literal_and_case_insensitive(self, mock_db):
        await CustomerRepository(mock_db).list_customers(search="Ali+", area="pesh")

        query = mock_db["customers"].find.call_args.args[0]
        assert query["name"] == {"$regex": r"Ali\+", "$options": "i"}
        assert query["area"] == {"$regex": "pesh", "$options": "i"}
        mock_db["customers"].cursor.sort.assert_called_once_with("created_at", -1)

    async def test_update_with_no_fields_reads_current(self, mock_db):
        repo = CustomerRepository(mock_db)

        await repo.update_customer(str(ObjectId()), CustomerUpdate())

        mock_db["customers"].find_one_and_update.assert_not_called()
        mock_db["customers"].find_one.assert_called_once()

    async def test_insert_many_counts(self, mock_db):
        mock_db["customers"].insert_many.return_value.inserted_ids = [ObjectId(), ObjectId()]
        customers = [
            CustomerCreate(name="A", area="Swat", role="dealer"),
            CustomerCreate(name="B", area="Swat", role="vendor"),
        ]

        assert await CustomerRepository(mock_db).insert_many(customers, str(ObjectId())) == 2

    async def test_insert_many_empty(self, mock_db):
        assert await CustomerRepository(mock_db).insert_many([], str(ObjectId())) == 0
        mock_db["customers"].insert_many.assert_not_called()

    async def test_names_by_id_skips_malformed_ids(self, mock_db):
        oid = ObjectId()
        mock_db.set_docs("customers", [{"_id": oid, "name": "Muhammad Yaqoob"}])

        names = await CustomerRepository(mock_db).names_by_id([str(oid), "junk"])

        assert names == {str(oid): "Muhammad Yaqoob"}
        assert mock_db["customers"].find.call_args.args[0] == {"_id": {"$in": [oid]}}

    async def test_delete_missing(self, mock_db):
        mock_db["customers"].delete_one.return_value.deleted_count = 0
        assert await CustomerRepository(mock_db).delete_customer(str(ObjectId())) is False


@pytest.mark.asyncio
class TestProductRepository:
    async def test_adjust_stock_only_touches_tracked_products(self, mock_db):
        product_id = ObjectId()

        await ProductRepository(mock_db).adjust_stock(product_id, -3)

        query, update = mock_db["products"].update_one.call_args.args
        assert query == {"_id": product_id, "stock_quantity": {"$type": "number"}}
        assert update["$inc"] == {"stock_quantity": -3}


@pytest.mark.asyncio
class TestInvoiceRepository:
    async def test_find_invoices_builds_filter(self, mock_db):
        customer_id, author = ObjectId(), ObjectId()
        window = DateRange(start=datetime(2025, 10, 1), end=datetime(2025, 10, 5, 23, 59, 59))

        await InvoiceRepository(mock_db).find_invoices(
            InvoiceFilter(customer_ids=[str(customer_id)], created_by=str(author), date_range=window)
        )

        query = mock_db["invoices"].find.call_args.args[0]
        assert query == {
            "customer_id": {"$in": [customer_id]},
            "created_by": author,
            "invoice_date": {"$gte": window.start, "$lte": window.end},
        }
        mock_db["invoices"].cursor.sort.assert_called_once_with("invoice_date", 1)

    async def test_totals_default_to_zero(self, mock_db):
        assert await InvoiceRepository(mock_db).totals() == {
            "total_amount": 0.0, "paid_amount": 0.0, "due_amount": 0.0
        }

    async def test_record_payment_moves_due(self, mock_db):
        invoice_id = ObjectId()

        await InvoiceRepository(mock_db).record_payment(str(invoice_id), 75.5)

        query, update = mock_db["invoices"].update_one.call_args.args
        assert query["_id"] == invoice_id
        assert query["due_amount"] == {"$gte": pytest.approx(75.5, abs=0.01)}
        assert update["$inc"] == {"paid_amount": 75.5, "due_amount": -75.5}


@pytest.mark.asyncio
class TestPaymentRepository:
    async def test_find_payments_without_dates(self, mock_db):
        invoice_id = ObjectId()

        await PaymentRepository(mock_db).find_payments(PaymentFilter(invoice_ids=[str(invoice_id)]))

        assert mock_db["payments"].find.call_args.args[0] == {"invoice_id": {"$in": [invoice_id]}}
        mock_db["payments"].cursor.sort.assert_called_once_with("payment_date", 1)

    async def test_list_payments_for_invoice(self, mock_db):
        invoice_id = ObjectId()

        payments, total = await PaymentRepository(mock_db).list_payments(str(invoice_id))

        assert payments == []
        assert total == 0
        assert mock_db["payments"].find.call_args.args[0] == {"invoice_id": invoice_id}
