from unittest.mock import AsyncMock, patch

import pytest

from app.db.init_db import ensure_admin


@pytest.mark.asyncio
async def test_creates_admin_when_no_users(mock_db):
    with patch("app.db.init_db.settings") as settings:
        settings.ADMIN_NAME = "Admin User"
        settings.ADMIN_EMAIL = "admin@ledger.com"
        settings.ADMIN_PASSWORD = "admin123"
        admin = await ensure_admin(mock_db)

    assert admin.email == "admin@ledger.com"
    stored = mock_db["users"].insert_one.call_args.args[0]
    assert stored["role"] == "admin"
    assert stored["password_hash"] != "admin123"


@pytest.mark.asyncio
async def test_skips_when_users_exist(mock_db):
    mock_db["users"].count_documents = AsyncMock(return_value=3)

    with patch("app.db.init_db.settings") as settings:
        settings.ADMIN_PASSWORD = "admin123"
        assert await ensure_admin(mock_db) is None

    mock_db["users"].insert_one.assert_not_called()


@pytest.mark.asyncio
async def test_skips_without_configured_password(mock_db):
    with patch("app.db.init_db.settings") as settings:
        settings.ADMIN_PASSWORD = None
        assert await ensure_admin(mock_db) is None

    mock_db["users"].count_documents.assert_not_called()
