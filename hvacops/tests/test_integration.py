"""
End-to-end flows through the HTTP API against a throwaway SQLite database
"""

import pytest
from datetime import date, timedelta

from hvacops.api import delivery as delivery_api
from hvacops.core.dependencies import load_order
from hvacops.core.enums import DeliveryStatus
from hvacops.db.session import AsyncSessionLocal
from hvacops.services.tasks_internal import refresh_tracked_orders

TODAY = date(2024, 6, 10)
PARAMS = {"today": TODAY.isoformat()}


def iso(offset):
    return (TODAY + timedelta(days=offset)).isoformat()


@pytest.mark.integration
class TestOrderLifecycle:

    @pytest.mark.asyncio
    async def test_create_order(self, test_client, valid_order_data):
        response = await test_client.post("/orders/", json=valid_order_data, params=PARAMS)

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "active"
        assert data["kanban_status"] == "received"
        assert data["delivery_status"] is None
        assert data["alert_type"] == "none"
        assert data["install_schedule_status"] == "unscheduled"
        assert data["items"][0]["work_type"] == "신규설치"
        assert data["delivery_progress"] == {"total": 0, "confirmed": 0, "scheduled": 0}

    @pytest.mark.asyncio
    async def test_create_order_defaults_order_date(self, test_client, valid_order_data):
        data = dict(valid_order_data)
        data.pop("order_date")

        response = await test_client.post("/orders/", json=data, params=PARAMS)

        assert response.json()["order_date"] == TODAY.isoformat()

    @pytest.mark.asyncio
    async def test_create_order_validation(self, test_client, valid_order_data):
        missing_address = {k: v for k, v in valid_order_data.items() if k != "address"}
        response = await test_client.post("/orders/", json=missing_address)
        assert response.status_code == 422

        bad_date = dict(valid_order_data, requested_install_date="2024-13-40")
        response = await test_client.post("/orders/", json=bad_date)
        assert response.status_code == 422

        bad_work_type = dict(valid_order_data, items=[{"work_type": "청소"}])
        response = await test_client.post("/orders/", json=bad_work_type)
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_get_missing_order(self, test_client):
        response = await test_client.get("/orders/9999")

        assert response.status_code == 404
        assert response.json()["detail"] == "Order with id 9999 not found"

    @pytest.mark.asyncio
    async def test_update_order(self, test_client, create_order_factory):
        order = await create_order_factory()

        response = await test_client.put(
            f"/orders/{order['id']}",
            json={"contact_name": "박담당", "items": [{"work_type": "이전설치"}]},
            params=PARAMS,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["contact_name"] == "박담당"
        assert [item["work_type"] for item in data["items"]] == ["이전설치"]
        assert data["affiliate"] == order["affiliate"]

    @pytest.mark.asyncio
    async def test_delivery_progression(self, test_client, create_order_factory):
        order = await create_order_factory()
        url = f"/orders/{order['id']}/delivery"

        response = await test_client.put(url, json={"requested_delivery_date": iso(-1)}, params=PARAMS)
        data = response.json()
        assert data["delivery_status"] == "pending"
        assert data["alert_type"] == "delayed"

        response = await test_client.put(url, json={
            "samsung_order_number": "SO-24-0001",
            "confirmed_delivery_date": iso(1),
            "equipment_items": [
                {"component_name": "실내기", "confirmed_delivery_date": iso(-2), "unit_price": 1500000},
                {"component_name": "실외기", "order_number": "PO-1", "quantity": 2, "unit_price": 475000},
            ],
        }, params=PARAMS)
        data = response.json()
        assert data["delivery_status"] == "in-transit"
        assert data["alert_type"] == "tomorrow"
        assert data["delivery_progress"] == {"total": 2, "confirmed": 1, "scheduled": 0}
        assert [item["delivery_status"] for item in data["equipment_items"]] == ["confirmed", "ordered"]
        assert data["equipment_items"][1]["total_price"] == 950000
        assert data["equipment_items"][1]["supplier"] == "삼성전자"

        response = await test_client.put(url, json={
            "equipment_items": [
                {"component_name": "실내기", "confirmed_delivery_date": iso(-2)},
                {"component_name": "실외기", "confirmed_delivery_date": iso(0)},
            ],
        }, params=PARAMS)
        data = response.json()
        assert data["delivery_status"] == "delivered"
        assert data["alert_type"] == "none"

    @pytest.mark.asyncio
    async def test_status_is_recomputed_for_the_reference_date(self, test_client, create_order_factory):
        order = await create_order_factory(track_delivery=True)
        await test_client.put(
            f"/orders/{order['id']}/equipment",
            json=[{"component_name": "실내기", "confirmed_delivery_date": iso(2)}],
            params=PARAMS,
        )

        before = await test_client.get(f"/orders/{order['id']}", params=PARAMS)
        after = await test_client.get(f"/orders/{order['id']}", params={"today": iso(2)})

        assert before.json()["delivery_status"] == "pending"
        assert after.json()["delivery_status"] == "delivered"

    @pytest.mark.asyncio
    async def test_schedule_and_complete(self, test_client, create_order_factory):
        order = await create_order_factory()
        url = f"/orders/{order['id']}/schedule"

        response = await test_client.put(url, json={"install_schedule_date": iso(3)}, params=PARAMS)
        data = response.json()
        assert data["kanban_status"] == "in-progress"
        assert data["install_schedule_status"] == "scheduled"

        response = await test_client.put(url, json={"install_complete_date": iso(3)}, params=PARAMS)
        data = response.json()
        assert data["kanban_status"] == "completed"
        assert data["install_schedule_status"] == "completed"
        assert data["install_schedule_date"] == iso(3)

    @pytest.mark.asyncio
    async def test_cached_column_filter(self, test_client, create_order_factory):
        scheduled = await create_order_factory()
        await create_order_factory()
        await test_client.put(
            f"/orders/{scheduled['id']}/schedule",
            json={"install_schedule_date": iso(1)},
            params=PARAMS,
        )

        response = await test_client.get("/orders/", params={"kanban_status": "in-progress"})

        assert [o["id"] for o in response.json()] == [scheduled["id"]]

    @pytest.mark.asyncio
    async def test_cancel(self, test_client, create_order_factory):
        order = await create_order_factory()

        response = await test_client.post(
            f"/orders/{order['id']}/cancel",
            json={"reason": "고객 요청"},
            params=PARAMS,
        )
        data = response.json()
        assert response.status_code == 200
        assert data["status"] == "cancelled"
        assert data["kanban_status"] == "cancelled"
        assert data["cancel_reason"] == "고객 요청"
        assert data["cancelled_at"] is not None

        response = await test_client.put(
            f"/orders/{order['id']}/schedule",
            json={"install_schedule_date": iso(1)},
        )
        assert response.status_code == 409

        response = await test_client.post(f"/orders/{order['id']}/cancel", json={"reason": "again"})
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_delete(self, test_client, create_order_factory):
        order = await create_order_factory()

        response = await test_client.delete(f"/orders/{order['id']}")
        assert response.json() == {"deleted": True}

        response = await test_client.get(f"/orders/{order['id']}")
        assert response.status_code == 404


@pytest.mark.integration
@pytest.mark.settlement
class TestSettlement:

    @pytest.mark.asyncio
    async def test_settle_and_revert(self, test_client, create_order_factory):
        order = await create_order_factory()
        await test_client.put(
            f"/orders/{order['id']}/schedule",
            json={"install_schedule_date": iso(-3), "install_complete_date": iso(-1)},
            params=PARAMS,
        )

        response = await test_client.put(
            f"/orders/{order['id']}/settlement",
            json={"status": "settled"},
            params=PARAMS,
        )
        data = response.json()
        assert data["kanban_status"] == "settled"
        assert data["s1_settlement_month"] == "2024-06"

        response = await test_client.post(f"/orders/{order['id']}/settlement/revert", params=PARAMS)
        data = response.json()
        assert data["s1_settlement_status"] == "in-progress"
        assert data["s1_settlement_month"] is None
        assert data["kanban_status"] == "completed"

        response = await test_client.post(f"/orders/{order['id']}/settlement/revert", params=PARAMS)
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_settlement_month_format(self, test_client, create_order_factory):
        order = await create_order_factory()

        response = await test_client.put(
            f"/orders/{order['id']}/settlement",
            json={"status": "settled", "settlement_month": "June"},
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_batch(self, test_client, create_order_factory):
        first = await create_order_factory()
        second = await create_order_factory()

        response = await test_client.post(
            "/orders/settlement/batch",
            json={"order_ids": [first["id"], second["id"]], "status": "settled", "settlement_month": "2024-05"},
            params=PARAMS,
        )
        data = response.json()
        assert [o["kanban_status"] for o in data] == ["settled", "settled"]
        assert {o["s1_settlement_month"] for o in data} == {"2024-05"}

        response = await test_client.post(
            "/orders/settlement/batch",
            json={"order_ids": [first["id"], 9999], "status": "unsettled"},
        )
        assert response.status_code == 404


@pytest.mark.integration
class TestImport:

    @pytest.mark.asyncio
    async def test_import_with_unreadable_dates(self, test_client):
        response = await test_client.post("/orders/import", json={"records": [
            {
                "id": "legacy-1",
                "affiliate": "구몬",
                "address": "서울 중구",
                "installScheduleDate": "2024.06.12",
                "installCompleteDate": "미정",
                "deliveryStatus": "pending",
                "samsungOrderNumber": "SO-9",
                "confirmedDeliveryDate": "2024-06-11",
                "items": [{"workType": "신규설치"}],
                "equipmentItems": [
                    {"componentName": "실내기", "confirmedDeliveryDate": "2024/06/09"},
                    {"componentModel": "AR07B9150HZSX"},
                ],
            },
            {"affiliate": "Wells", "address": "부산", "status": "cancelled"},
        ]}, params=PARAMS)

        assert response.status_code == 200
        data = response.json()
        assert data["invalid_fields"] == {"0": ["install_complete_date"]}

        first, second = data["created"]
        assert first["install_complete_date"] is None
        assert first["kanban_status"] == "in-progress"
        assert first["delivery_status"] == "in-transit"
        assert first["alert_type"] == "tomorrow"
        assert [item["component_name"] for item in first["equipment_items"]] == ["실내기", "기타"]

        assert second["kanban_status"] == "cancelled"
        assert second["delivery_status"] is None

    @pytest.mark.asyncio
    async def test_export_round_trips_through_import(self, test_client, create_order_factory):
        order = await create_order_factory()
        await test_client.put(
            f"/orders/{order['id']}/schedule",
            json={"install_schedule_date": iso(2)},
            params=PARAMS,
        )

        response = await test_client.get("/orders/export", params=PARAMS)
        records = response.json()
        assert records[0]["installScheduleDate"] == iso(2)
        assert records[0]["kanbanStatus"] == "in-progress"
        assert records[0]["items"][0]["workType"] == "신규설치"

        response = await test_client.post("/orders/import", json={"records": records}, params=PARAMS)
        imported = response.json()["created"][0]
        assert imported["id"] != order["id"]
        assert imported["kanban_status"] == "in-progress"
        assert imported["affiliate"] == order["affiliate"]

    @pytest.mark.asyncio
    async def test_import_needs_records(self, test_client):
        response = await test_client.post("/orders/import", json={"records": []})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_import_spreadsheet_numbers(self, test_client):
        response = await test_client.post("/orders/import", json={"records": [{
            "affiliate": "구몬",
            "samsungOrderNumber": 4500123456,
            "contactPhone": 1012345678,
            "equipmentItems": [
                {"componentName": "실내기", "orderNumber": 7781, "quantity": "2개", "unitPrice": "1,500,000"},
                "실외기 별도",
            ],
        }]}, params=PARAMS)

        assert response.status_code == 200
        data = response.json()
        assert data["invalid_fields"] == {"0": ["equipment_items[0].quantity", "equipment_items[1]"]}

        created = data["created"][0]
        assert created["samsung_order_number"] == "4500123456"
        assert created["contact_phone"] == "1012345678"
        [item] = created["equipment_items"]
        assert item["order_number"] == "7781"
        assert item["quantity"] == 1
        assert item["unit_price"] == 1500000.0
        assert item["total_price"] == 1500000.0

    @pytest.mark.asyncio
    async def test_unreadable_record_names_its_index(self, test_client):
        response = await test_client.post("/orders/import", json={"records": [
            {"affiliate": "구몬"},
            {"affiliate": "Wells", "samsungOrderNumber": {"no": "SO-1"}},
        ]}, params=PARAMS)

        assert response.status_code == 422
        assert response.json()["detail"].startswith("Record 1: unreadable samsung_order_number")

        listed = await test_client.get("/orders/", params=PARAMS)
        assert listed.json() == []

    @pytest.mark.asyncio
    async def test_long_text_is_cut_to_column_width(self, test_client):
        work_type = "신규설치 " + "배관 재사용 여부 확인 " * 8
        response = await test_client.post("/orders/import", json={"records": [{
            "affiliate": "구몬",
            "items": [{"workType": work_type, "size": "18평형 스탠드 + 6평형 벽걸이 2대"}],
        }]}, params=PARAMS)

        assert response.status_code == 200
        [item] = response.json()["created"][0]["items"]
        assert item["work_type"] == work_type[:60]
        assert item["size"] == "18평형 스탠드 + 6평형 벽걸이 2대"[:20]


@pytest.mark.integration
class TestBoards:

    @pytest.mark.asyncio
    async def test_kanban_board(self, test_client, create_order_factory):
        await create_order_factory()
        scheduled = await create_order_factory()
        cancelled = await create_order_factory()
        await test_client.put(
            f"/orders/{scheduled['id']}/schedule",
            json={"install_schedule_date": iso(1)},
            params=PARAMS,
        )
        await test_client.post(f"/orders/{cancelled['id']}/cancel", json={"reason": "중복"})

        response = await test_client.get("/board/", params=PARAMS)
        data = response.json()
        assert data["counts"] == {"received": 1, "in-progress": 1, "completed": 0, "settled": 0}
        assert data["columns"]["in-progress"][0]["id"] == scheduled["id"]

        response = await test_client.get("/board/", params=dict(PARAMS, include_cancelled="true"))
        assert response.json()["counts"]["cancelled"] == 1

    @pytest.mark.asyncio
    async def test_delivery_list_and_alerts(self, test_client, create_order_factory):
        late = await create_order_factory(track_delivery=True)
        soon = await create_order_factory(track_delivery=True)
        await create_order_factory()

        await test_client.put(
            f"/orders/{late['id']}/delivery",
            json={
                "requested_delivery_date": iso(-2),
                "equipment_items": [{
                    "component_name": "실내기",
                    "requested_delivery_date": iso(-2),
                    "scheduled_delivery_date": iso(1),
                }],
            },
            params=PARAMS,
        )
        await test_client.put(
            f"/orders/{soon['id']}/delivery",
            json={"requested_delivery_date": iso(0)},
            params=PARAMS,
        )

        response = await test_client.get("/delivery/", params=PARAMS)
        rows = response.json()
        assert [row["order"]["id"] for row in rows] == [late["id"], soon["id"]]
        assert rows[0]["delay"]["delayed"] == 1
        assert rows[0]["delay"]["max_delay_days"] == 3

        response = await test_client.get("/delivery/", params=dict(PARAMS, alert="delayed"))
        assert [row["order"]["id"] for row in response.json()] == [late["id"]]

        response = await test_client.get("/delivery/alerts", params=PARAMS)
        assert response.json()["counts"] == {"delayed": 1, "today": 1, "tomorrow": 0, "none": 0}

    @pytest.mark.asyncio
    async def test_schedule_tabs(self, test_client, create_order_factory):
        waiting = await create_order_factory(order_date=iso(-5))
        newer = await create_order_factory(order_date=iso(-1))
        booked = await create_order_factory()
        await test_client.put(
            f"/orders/{booked['id']}/schedule",
            json={"install_schedule_date": iso(0)},
            params=PARAMS,
        )

        response = await test_client.get("/schedule/", params=PARAMS)
        assert [row["order"]["id"] for row in response.json()] == [newer["id"], waiting["id"]]

        response = await test_client.get("/schedule/", params=dict(PARAMS, tab="scheduled"))
        rows = response.json()
        assert [row["order"]["id"] for row in rows] == [booked["id"]]
        assert rows[0]["urgency"] == "today"
        assert rows[0]["equipment"] == {"type": "no-items", "confirmed": 0, "total": 0}


@pytest.mark.integration
@pytest.mark.delivery
class TestBackgroundRefresh:

    @pytest.mark.asyncio
    async def test_refresh_endpoint_queues_task(self, test_client, monkeypatch):
        queued = []
        monkeypatch.setattr(delivery_api.refresh_delivery_statuses, "delay", lambda today: queued.append(today))

        response = await test_client.post("/delivery/refresh", params=PARAMS)

        assert response.json() == {"status": "queued"}
        assert queued == [TODAY.isoformat()]

    @pytest.mark.asyncio
    async def test_refresh_restores_cached_column(self, test_client, create_order_factory):
        order = await create_order_factory(track_delivery=True)
        await test_client.put(
            f"/orders/{order['id']}/equipment",
            json=[{"component_name": "실내기", "confirmed_delivery_date": iso(1)}],
            params=PARAMS,
        )

        async with AsyncSessionLocal() as db:
            stored = await load_order(db, order["id"])
        assert stored.delivery_status == DeliveryStatus.PENDING

        async with AsyncSessionLocal() as db:
            result = await refresh_tracked_orders(db, TODAY + timedelta(days=1))
        assert result == {"checked": 1, "kanban_changed": 0}

        async with AsyncSessionLocal() as db:
            stored = await load_order(db, order["id"])
        assert stored.delivery_status == DeliveryStatus.DELIVERED


@pytest.mark.integration
@pytest.mark.pricing
class TestPriceTableAndQuotes:

    @pytest.mark.asyncio
    async def test_price_table_crud(self, test_client, valid_price_row):
        response = await test_client.post("/price-table/", json=valid_price_row)
        assert response.status_code == 200
        row = response.json()
        assert [c["type"] for c in row["components"]] == ["실내기", "실외기"]

        response = await test_client.post("/price-table/", json=valid_price_row)
        assert response.status_code == 409

        response = await test_client.put(
            f"/price-table/{row['id']}",
            json={"price": 2500000, "components": [{"model": "AP083BSPPBH1", "type": "실내기"}]},
        )
        updated = response.json()
        assert updated["price"] == 2500000
        assert len(updated["components"]) == 1

        response = await test_client.get("/price-table/", params={"q": "23평"})
        assert [r["model"] for r in response.json()] == ["AP083BSPPBH1S"]

        response = await test_client.get("/price-table/models/AP083BSPPBH1S")
        assert response.json()["id"] == row["id"]

        response = await test_client.delete(f"/price-table/{row['id']}")
        assert response.json() == {"deleted": True}
        response = await test_client.get("/price-table/models/AP083BSPPBH1S")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_quote(self, test_client, valid_price_row):
        await test_client.post("/price-table/", json=valid_price_row)

        response = await test_client.post("/quotes/calc", json={
            "equipment": [{"model": "AP083BSPPBH1S", "quantity": 1}],
            "installation": [{"item_name": "기본 설치", "unit_price": 150000}],
        })
        data = response.json()
        assert data["supply_amount"] == 2600000
        assert data["vat_amount"] == 260000
        assert data["total_amount"] == 2860000

        response = await test_client.post("/quotes/calc", json={"equipment": [{"model": "UNKNOWN"}]})
        assert response.status_code == 404


@pytest.mark.integration
class TestMonitoring:

    @pytest.mark.asyncio
    async def test_health_and_readiness(self, test_client):
        response = await test_client.get("/health")
        assert response.json()["status"] == "healthy"

        response = await test_client.get("/readiness")
        assert response.status_code == 503
        assert response.json()["ready"] is False

    @pytest.mark.asyncio
    async def test_metrics(self, test_client, create_order_factory):
        await create_order_factory()

        response = await test_client.get("/metrics")

        assert response.status_code == 200
        assert "derived_status_recomputations_total" in response.text
        assert "http_requests_total" in response.text


AS_REQUEST = {
    "affiliate": "구몬",
    "business_name": "구몬 강남지점",
    "address": "서울 강남구 테헤란로 1",
    "contact_name": "김담당",
    "as_reason": "냉방 불량",
    "model_name": "AP083BSPPBH1S",
}


@pytest.mark.integration
class TestAfterService:

    @pytest.mark.asyncio
    async def test_request_lifecycle(self, test_client):
        response = await test_client.post("/as/", json=AS_REQUEST, params=PARAMS)
        assert response.status_code == 200
        created = response.json()
        assert created["status"] == "received"
        assert created["reception_date"] == TODAY.isoformat()
        assert created["total_amount"] == 0
        request_id = created["id"]

        response = await test_client.post(
            f"/as/{request_id}/status", json={"status": "in-progress"}, params=PARAMS
        )
        assert response.json()["settlement_month"] == "2024-06"

        response = await test_client.put(f"/as/{request_id}", json={
            "visit_date": iso(2),
            "samsung_as_center": "삼성 강남센터",
            "as_cost": 45500,
            "reception_fee": 10000,
        })
        assert response.status_code == 200
        assert response.json()["total_amount"] == 55500

        response = await test_client.post(
            f"/as/{request_id}/status", json={"status": "completed"}, params=PARAMS
        )
        assert response.json()["processed_date"] == TODAY.isoformat()

        response = await test_client.get(f"/as/{request_id}")
        assert response.json()["status"] == "completed"

    @pytest.mark.asyncio
    async def test_skipped_step_conflicts(self, test_client):
        created = (await test_client.post("/as/", json=AS_REQUEST, params=PARAMS)).json()

        response = await test_client.post(
            f"/as/{created['id']}/status", json={"status": "settled"}, params=PARAMS
        )
        assert response.status_code == 409
        assert (await test_client.get(f"/as/{created['id']}")).json()["status"] == "received"

    @pytest.mark.asyncio
    @pytest.mark.settlement
    async def test_batch_settlement_and_summary(self, test_client):
        ids = []
        for affiliate, cost in (("구몬", 45500), ("구몬", 20300), ("Wells 영업", 33700)):
            created = (await test_client.post(
                "/as/", json={**AS_REQUEST, "affiliate": affiliate}, params=PARAMS
            )).json()
            await test_client.post(f"/as/{created['id']}/status", json={"status": "in-progress"}, params=PARAMS)
            await test_client.put(f"/as/{created['id']}", json={"as_cost": cost, "reception_fee": 0})
            await test_client.post(f"/as/{created['id']}/status", json={"status": "completed"}, params=PARAMS)
            ids.append(created["id"])

        response = await test_client.get("/as/summary", params={**PARAMS, "status": "completed"})
        summary = response.json()
        assert summary["count"] == 3
        assert summary["total_amount"] == 99500
        assert summary["truncated_total"] == 98000
        assert summary["total_with_vat"] == 107800

        response = await test_client.post(
            "/as/settlement/batch", json={"request_ids": ids, "settlement_month": "2024-06"}, params=PARAMS
        )
        assert response.status_code == 200
        assert {item["status"] for item in response.json()} == {"settled"}

        listed = await test_client.get("/as/", params={"status": "settled", "settlement_month": "2024-06"})
        assert len(listed.json()) == 3

        # a closed request can no longer be edited or settled again
        response = await test_client.put(f"/as/{ids[0]}", json={"as_cost": 1})
        assert response.status_code == 409
        response = await test_client.post("/as/settlement/batch", json={"request_ids": ids[:1]}, params=PARAMS)
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_batch_with_unknown_request(self, test_client):
        response = await test_client.post("/as/settlement/batch", json={"request_ids": [999]})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_search_and_delete(self, test_client):
        first = (await test_client.post("/as/", json=AS_REQUEST, params=PARAMS)).json()
        await test_client.post(
            "/as/", json={**AS_REQUEST, "business_name": "Wells 부산", "address": "부산 해운대구"}, params=PARAMS
        )

        response = await test_client.get("/as/", params={"q": "해운대"})
        assert [item["business_name"] for item in response.json()] == ["Wells 부산"]

        response = await test_client.delete(f"/as/{first['id']}")
        assert response.json() == {"deleted": True}
        assert (await test_client.get(f"/as/{first['id']}")).status_code == 404

    @pytest.mark.asyncio
    async def test_missing_site_is_rejected(self, test_client):
        response = await test_client.post("/as/", json={"affiliate": "구몬", "address": "서울"})
        assert response.status_code == 422


WAREHOUSE = {
    "name": "파주 창고",
    "address": "경기 파주시 문산읍",
    "manager_name": "박창고",
    "capacity": 8,
}


@pytest.mark.integration
class TestWarehouses:

    @pytest.mark.asyncio
    async def test_warehouse_crud(self, test_client):
        response = await test_client.post("/warehouses/", json=WAREHOUSE)
        assert response.status_code == 200
        warehouse = response.json()
        assert warehouse["current_stock"] == 0
        assert warehouse["stock_rate"] == 0

        response = await test_client.put(f"/warehouses/{warehouse['id']}", json={"capacity": 20})
        assert response.json()["capacity"] == 20

        response = await test_client.get("/warehouses/", params={"q": "파주"})
        assert [w["name"] for w in response.json()] == ["파주 창고"]

        response = await test_client.delete(f"/warehouses/{warehouse['id']}")
        assert response.json() == {"deleted": True}
        assert (await test_client.get(f"/warehouses/{warehouse['id']}")).status_code == 404

    @pytest.mark.asyncio
    async def test_store_release_and_revert(self, test_client, create_order_factory):
        warehouse = (await test_client.post("/warehouses/", json=WAREHOUSE)).json()
        order = await create_order_factory(items=[{"work_type": "철거보관", "category": "스탠드형"}])

        response = await test_client.post("/stored-equipment/", json={
            "order_id": order["id"],
            "warehouse_id": warehouse["id"],
            "category": "스탠드에어컨",
            "quantity": 3,
            "manufacturing_date": "2019-05",
        }, params=PARAMS)
        assert response.status_code == 200
        item = response.json()
        assert item["site_name"] == order["business_name"]
        assert item["affiliate"] == "구몬"
        assert item["warehouse_name"] == "파주 창고"
        assert item["storage_start_date"] == TODAY.isoformat()
        assert item["status"] == "stored"

        response = await test_client.get(f"/warehouses/{warehouse['id']}")
        assert response.json()["current_stock"] == 3
        assert response.json()["stock_rate"] == 38

        response = await test_client.post(f"/stored-equipment/{item['id']}/release", json={
            "release_type": "reinstall",
            "release_destination": "구몬 송파지점",
        }, params=PARAMS)
        released = response.json()
        assert released["status"] == "released"
        assert released["release_date"] == TODAY.isoformat()

        response = await test_client.post(f"/stored-equipment/{item['id']}/release", json={}, params=PARAMS)
        assert response.status_code == 409
        assert (await test_client.get(f"/warehouses/{warehouse['id']}")).json()["current_stock"] == 0

        response = await test_client.post(f"/stored-equipment/{item['id']}/release/revert")
        reverted = response.json()
        assert reverted["status"] == "stored"
        assert reverted["release_destination"] is None

        listed = await test_client.get("/stored-equipment/", params={"status": "stored", "order_id": order["id"]})
        assert [e["id"] for e in listed.json()] == [item["id"]]

        # equipment still references the warehouse
        response = await test_client.delete(f"/warehouses/{warehouse['id']}")
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_store_needs_known_warehouse_and_site(self, test_client):
        response = await test_client.post("/stored-equipment/", json={
            "warehouse_id": 999, "site_name": "구몬 강남지점", "category": "스탠드에어컨",
        })
        assert response.status_code == 404

        warehouse = (await test_client.post("/warehouses/", json=WAREHOUSE)).json()
        response = await test_client.post("/stored-equipment/", json={
            "warehouse_id": warehouse["id"], "category": "스탠드에어컨",
        })
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_move_between_warehouses(self, test_client):
        paju = (await test_client.post("/warehouses/", json=WAREHOUSE)).json()
        icheon = (await test_client.post("/warehouses/", json={**WAREHOUSE, "name": "이천 창고"})).json()
        item = (await test_client.post("/stored-equipment/", json={
            "warehouse_id": paju["id"], "site_name": "Wells 부산", "category": "벽걸이에어컨",
        }, params=PARAMS)).json()

        response = await test_client.put(f"/stored-equipment/{item['id']}", json={"warehouse_id": icheon["id"]})
        assert response.json()["warehouse_name"] == "이천 창고"

        response = await test_client.put(f"/stored-equipment/{item['id']}", json={"warehouse_id": 999})
        assert response.status_code == 404

        response = await test_client.delete(f"/stored-equipment/{item['id']}")
        assert response.json() == {"deleted": True}
        assert (await test_client.delete(f"/warehouses/{paju['id']}")).json() == {"deleted": True}
