import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./.pytest_hvacops.db")

import pytest
from datetime import date
from httpx import ASGITransport, AsyncClient

from hvacops.main import app
from hvacops.db.session import engine
from hvacops.models.base import Base
from hvacops.core.config import settings
from hvacops.schemas.fields import EquipmentItemFields, OrderFields


TODAY = date(2024, 6, 10)


@pytest.fixture
async def setup_db():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_client(setup_db):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def make_order():
    """Build an OrderFields for rule tests; item dicts become EquipmentItemFields."""
    def _make(equipment=None, items=None, **kwargs):
        return OrderFields(
            equipment_items=[EquipmentItemFields(**item) for item in equipment or []],
            items=items or [],
            **kwargs,
        )

    return _make


@pytest.fixture
def valid_order_data():
    return {
        "document_number": "DOC-2024-001",
        "affiliate": "구몬",
        "business_name": "구몬 강남지점",
        "address": "서울 강남구 테헤란로 1",
        "order_date": "2024-06-01",
        "contact_name": "김담당",
        "contact_phone": "010-1234-5678",
        "items": [
            {
                "work_type": "신규설치",
                "category": "스탠드형",
                "model": "AP083BSPPBH1S",
                "size": "23평",
                "quantity": 1,
            }
        ],
    }


@pytest.fixture
def create_order_factory(test_client, valid_order_data, today):
    async def _create_order(**kwargs):
        data = dict(valid_order_data)
        data.update(kwargs)

        response = await test_client.post(
            "/orders/",
            json=data,
            params={"today": today.isoformat()},
        )

        return response.json() if response.status_code == 200 else None

    return _create_order


@pytest.fixture
def valid_price_row():
    return {
        "category": "스탠드형",
        "model": "AP083BSPPBH1S",
        "size": "23평",
        "price": 2450000,
        "components": [
            {"model": "AP083BSPPBH1", "type": "실내기", "unit_price": 1500000, "quantity": 1},
            {"model": "AP083BSPPBH1X", "type": "실외기", "unit_price": 950000, "quantity": 1},
        ],
    }


@pytest.fixture
def app_settings():
    """Return application settings"""
    return settings


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
    config.addinivalue_line(
        "markers", "status: marks tests related to derived order statuses"
    )
    config.addinivalue_line(
        "markers", "delivery: marks tests related to delivery tracking"
    )
    config.addinivalue_line(
        "markers", "schedule: marks tests related to installation scheduling"
    )
    config.addinivalue_line(
        "markers", "pricing: marks tests related to pricing"
    )
    config.addinivalue_line(
        "markers", "settlement: marks tests related to settlement"
    )
    config.addinivalue_line(
        "markers", "rate_limit: marks tests related to rate limiting"
    )
    config.addinivalue_line(
        "markers", "idempotency: marks tests related to idempotency"
    )
