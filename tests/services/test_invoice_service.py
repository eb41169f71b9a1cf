from datetime import datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from app.core.exceptions import DuplicateInvoiceNumber, InvoiceValidationError
from app.models.invoice import InvoiceCreate, InvoiceUpdate
from app.services.invoice_service import InvoiceService

CUSTOMER_ID = ObjectId()
USER_ID = str(ObjectId())


def invoice_payload(**overrides) -> dict:
    product_id = ObjectId()
    data = {
        "customer_id": str(CUSTOMER_ID),
        "items": [
            {"product_id": str(product_id), "name_snapshot": "FUSE 25% WG", "quantity": 5, "rate": 100, "amount": 500}
        ],
        "total_amount": 500,
        "paid_amount": 200,
        "due_amount": 300,
        "invoice_date": "2025-10-05T00:00:00",
    }
    data.update(overrides)
    return data


def customer_doc() -> dict:
    return {
        "_id": CUSTOMER_ID,
        "name": "Muhammad Yaqoob",
        "area": "Peshawar",
        "role": "dealer",
        "created_by": ObjectId(),
        "created_at": datetime(2025, 1, 1),
        "updated_at": datetime(2025, 1, 1),
    }


@pytest.fixture
def invoice_db(mock_db):
    mock_db["customers"].find_one = AsyncMock(return_value=customer_doc())
    return mock_db


@pytest.mark.asyncio
async def test_create_invoice_decrements_stock_and_inserts(invoice_db):
    invoice_data = InvoiceCreate(**invoice_payload())

    with patch("app.services.invoice_service.generate_invoice_number", return_value="1101002510051234"):
        invoice = await InvoiceService(invoice_db).create_invoice(invoice_data, USER_ID)

    assert invoice.invoice_number == "1101002510051234"
    assert invoice.created_by == ObjectId(USER_ID)
    assert invoice.due_amount == 300

    stock_call = invoice_db["products"].update_one.call_args
    assert stock_call.args[1]["$inc"] == {"stock_quantity": -5}
    invoice_db["invoices"].insert_one.assert_called_once()


@pytest.mark.asyncio
async def test_create_invoice_retries_on_number_collision(invoice_db):
    invoice_db["invoices"].insert_one = AsyncMock(
        side_effect=[DuplicateKeyError("dup"), MagicMock(inserted_id=ObjectId())]
    )
    invoice_data = InvoiceCreate(**invoice_payload())

    with patch(
        "app.services.invoice_service.generate_invoice_number",
        side_effect=["1101002510050001", "1101002510050002"]
    ):
        invoice = await InvoiceService(invoice_db).create_invoice(invoice_data, USER_ID)

    assert invoice.invoice_number == "1101002510050002"
    assert invoice_db["invoices"].insert_one.call_count == 2
    # Stock is only decremented once
    assert invoice_db["products"].update_one.call_count == 1


@pytest.mark.asyncio
async def test_create_invoice_gives_up_after_configured_attempts(invoice_db):
    invoice_db["invoices"].insert_one = AsyncMock(side_effect=DuplicateKeyError("dup"))
    invoice_data = InvoiceCreate(**invoice_payload())

    with patch("app.services.invoice_service.settings") as settings:
        settings.MONGODB_TRANSACTIONS = False
        settings.INVOICE_NUMBER_ATTEMPTS = 3
        with pytest.raises(DuplicateInvoiceNumber):
            await InvoiceService(invoice_db).create_invoice(invoice_data, USER_ID)

    assert invoice_db["invoices"].insert_one.call_count == 3


@pytest.mark.asyncio
async def test_create_invoice_in_transaction(invoice_db):
    session = MagicMock()
    session.start_transaction.return_value = MagicMock(
        __aenter__=AsyncMock(return_value=None), __aexit__=AsyncMock(return_value=False)
    )
    invoice_db.client.start_session = AsyncMock(
        return_value=MagicMock(__aenter__=AsyncMock(return_value=session), __aexit__=AsyncMock(return_value=False))
    )
    invoice_data = InvoiceCreate(**invoice_payload())

    with patch("app.services.invoice_service.settings") as settings:
        settings.MONGODB_TRANSACTIONS = True
        settings.INVOICE_NUMBER_ATTEMPTS = 5
        await InvoiceService(invoice_db).create_invoice(invoice_data, USER_ID)

    assert invoice_db["products"].update_one.call_args.kwargs["session"] is session
    assert invoice_db["invoices"].insert_one.call_args.kwargs["session"] is session


@pytest.mark.asyncio
async def test_create_invoice_rejects_wrong_line_amount(invoice_db):
    payload = invoice_payload()
    payload["items"][0]["amount"] = 450
    invoice_data = InvoiceCreate(**payload)

    with pytest.raises(InvoiceValidationError):
        await InvoiceService(invoice_db).create_invoice(invoice_data, USER_ID)

    invoice_db["products"].update_one.assert_not_called()
    invoice_db["invoices"].insert_one.assert_not_called()


@pytest.mark.asyncio
async def test_create_invoice_rejects_unbalanced_totals(invoice_db):
    invoice_data = InvoiceCreate(**invoice_payload(paid_amount=100, due_amount=300))

    with pytest.raises(InvoiceValidationError):
        await InvoiceService(invoice_db).create_invoice(invoice_data, USER_ID)


@pytest.mark.asyncio
async def test_create_invoice_requires_existing_customer(mock_db):
    invoice_data = InvoiceCreate(**invoice_payload())

    with pytest.raises(InvoiceValidationError, match="not found"):
        await InvoiceService(mock_db).create_invoice(invoice_data, USER_ID)


@pytest.mark.asyncio
async def test_update_invoice_validates_and_saves(invoice_db):
    invoice_id = ObjectId()
    update = InvoiceUpdate(**invoice_payload())
    invoice_db["invoices"].find_one_and_update = AsyncMock(return_value={
        "_id": invoice_id,
        "invoice_number": "1101002510050001",
        "created_by": ObjectId(USER_ID),
        "created_at": datetime(2025, 10, 5),
        "updated_at": datetime(2025, 10, 6),
        **update.model_dump(),
    })

    invoice = await InvoiceService(invoice_db).update_invoice(str(invoice_id), update)

    assert invoice.id == invoice_id
    invoice_db["products"].update_one.assert_not_called()


@pytest.mark.asyncio
async def test_update_missing_invoice_returns_none(invoice_db):
    update = InvoiceUpdate(**invoice_payload())

    assert await InvoiceService(invoice_db).update_invoice(str(ObjectId()), update) is None
