from datetime import date
from hvacops.core.enums import AlertType
from hvacops.models.after_service import ASRequest
from hvacops.models.order import Order
from hvacops.models.price_table import PriceTableRow
from hvacops.models.warehouse import StoredEquipment, Warehouse
from hvacops.schemas.after_service import ASRequestOut
from hvacops.schemas.fields import EquipmentItemFields, OrderFields
from hvacops.schemas.order import EquipmentItemOut, OrderItemOut, OrderOut
from hvacops.schemas.price_table import ComponentOut, PriceTableRowOut
from hvacops.schemas.warehouse import StoredEquipmentOut, WarehouseOut
from hvacops.services.delivery import compute_delivery_progress, compute_item_delivery_status
from hvacops.services.schedule import compute_install_schedule_status
from hvacops.services.status_rules import compute_delivery_status, compute_kanban_status, get_alert_type
from hvacops.services.storage import stock_rate, warehouse_stock


def build_order_response(order: Order, today: date, fields: OrderFields | None = None) -> OrderOut:
    """Serialize an order with every derived status recomputed from source fields."""
    if fields is None:
        fields = OrderFields.from_record(order)

    return OrderOut(
        id=order.id,
        document_number=order.document_number,
        affiliate=order.affiliate,
        business_name=order.business_name,
        address=order.address,
        order_date=order.order_date,
        contact_name=order.contact_name,
        contact_phone=order.contact_phone,
        requested_install_date=order.requested_install_date,
        notes=order.notes,
        status=order.status,
        cancel_reason=order.cancel_reason,
        cancelled_at=order.cancelled_at,
        samsung_order_number=order.samsung_order_number,
        requested_delivery_date=order.requested_delivery_date,
        confirmed_delivery_date=order.confirmed_delivery_date,
        install_schedule_date=order.install_schedule_date,
        install_complete_date=order.install_complete_date,
        install_memo=order.install_memo,
        s1_settlement_status=order.s1_settlement_status,
        s1_settlement_month=order.s1_settlement_month,
        items=[
            OrderItemOut(
                id=item.id,
                work_type=item.work_type,
                category=item.category,
                model=item.model,
                size=item.size,
                quantity=item.quantity,
            )
            for item in order.items
        ],
        equipment_items=[
            EquipmentItemOut(
                id=item.id,
                set_model=item.set_model,
                component_name=item.component_name,
                component_model=item.component_model,
                supplier=item.supplier,
                order_number=item.order_number,
                order_date=item.order_date,
                requested_delivery_date=item.requested_delivery_date,
                scheduled_delivery_date=item.scheduled_delivery_date,
                confirmed_delivery_date=item.confirmed_delivery_date,
                quantity=item.quantity,
                unit_price=item.unit_price,
                total_price=item.total_price,
                delivery_status=compute_item_delivery_status(EquipmentItemFields.model_validate(item)),
            )
            for item in order.equipment_items
        ],
        kanban_status=compute_kanban_status(fields),
        delivery_status=compute_delivery_status(fields, today) if fields.tracks_delivery else None,
        alert_type=get_alert_type(fields, today) if fields.tracks_delivery else AlertType.NONE,
        install_schedule_status=compute_install_schedule_status(fields),
        delivery_progress=compute_delivery_progress(fields),
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


def build_order_response_list(orders: list, today: date) -> list:
    return [build_order_response(order, today) for order in orders]


def build_price_row_response(row: PriceTableRow) -> PriceTableRowOut:
    return PriceTableRowOut(
        id=row.id,
        category=row.category,
        model=row.model,
        size=row.size,
        price=row.price,
        components=[
            ComponentOut(
                id=c.id,
                model=c.model,
                type=c.type,
                unit_price=c.unit_price,
                sale_price=c.sale_price,
                quantity=c.quantity,
            )
            for c in row.components
        ],
    )


def build_price_row_response_list(rows: list) -> list:
    return [build_price_row_response(row) for row in rows]


def build_as_response(req: ASRequest) -> ASRequestOut:
    return ASRequestOut.model_validate(req, from_attributes=True)


def build_as_response_list(requests: list) -> list:
    return [build_as_response(req) for req in requests]


def build_warehouse_response(warehouse: Warehouse) -> WarehouseOut:
    stock = warehouse_stock(warehouse)
    return WarehouseOut(
        id=warehouse.id,
        name=warehouse.name,
        address=warehouse.address,
        manager_name=warehouse.manager_name,
        manager_phone=warehouse.manager_phone,
        capacity=warehouse.capacity,
        notes=warehouse.notes,
        current_stock=stock,
        stock_rate=stock_rate(warehouse.capacity, stock),
        created_at=warehouse.created_at,
    )


def build_warehouse_response_list(warehouses: list) -> list:
    return [build_warehouse_response(warehouse) for warehouse in warehouses]


def build_stored_equipment_response(item: StoredEquipment) -> StoredEquipmentOut:
    out = StoredEquipmentOut.model_validate(item, from_attributes=True)
    out.warehouse_name = item.warehouse.name if item.warehouse else None
    return out


def build_stored_equipment_response_list(items: list) -> list:
    return [build_stored_equipment_response(item) for item in items]
