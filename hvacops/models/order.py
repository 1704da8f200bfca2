from sqlalchemy import Column, String, Float, Integer, Date, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from hvacops.models.base import BaseModel
from hvacops.core.enums import DeliveryStatus, OrderLifecycle, OrderStatus, SettlementStatus


class Order(BaseModel):
    __tablename__ = "orders"

    document_number = Column(String(40), index=True)
    affiliate = Column(String(60), index=True)
    business_name = Column(String(120))
    address = Column(String(255))
    order_date = Column(Date)
    contact_name = Column(String(60))
    contact_phone = Column(String(40))
    requested_install_date = Column(Date)
    notes = Column(String, nullable=True)

    status = Column(Enum(OrderLifecycle), default=OrderLifecycle.ACTIVE, nullable=False)
    cancel_reason = Column(String, nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    samsung_order_number = Column(String(60), nullable=True)
    requested_delivery_date = Column(Date, nullable=True)
    confirmed_delivery_date = Column(Date, nullable=True)

    install_schedule_date = Column(Date, nullable=True)
    install_complete_date = Column(Date, nullable=True)
    install_memo = Column(String, nullable=True)

    s1_settlement_status = Column(Enum(SettlementStatus), nullable=True)
    s1_settlement_month = Column(String(7), nullable=True)

    # Denormalized copies of the derived statuses, kept for filtering only.
    kanban_status = Column(Enum(OrderStatus), default=OrderStatus.RECEIVED, nullable=False, index=True)
    delivery_status = Column(Enum(DeliveryStatus), nullable=True, index=True)

    items = relationship(
        "OrderItem", back_populates="order", cascade="all, delete-orphan", order_by="OrderItem.id"
    )
    equipment_items = relationship(
        "EquipmentItem", back_populates="order", cascade="all, delete-orphan", order_by="EquipmentItem.id"
    )


class OrderItem(BaseModel):
    __tablename__ = "order_items"

    order_id = Column(ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    order = relationship("Order", back_populates="items")

    work_type = Column(String(60), nullable=False)
    category = Column(String(60))
    model = Column(String(60))
    size = Column(String(20))
    quantity = Column(Integer, nullable=False, default=1)


class EquipmentItem(BaseModel):
    __tablename__ = "equipment_items"

    order_id = Column(ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    order = relationship("Order", back_populates="equipment_items")

    set_model = Column(String(60))
    component_name = Column(String(60), nullable=False)
    component_model = Column(String(60))
    supplier = Column(String(60))
    order_number = Column(String(60))
    order_date = Column(Date)
    requested_delivery_date = Column(Date)
    scheduled_delivery_date = Column(Date)
    confirmed_delivery_date = Column(Date)
    quantity = Column(Integer, nullable=False, default=1)
    unit_price = Column(Float, nullable=True)
    total_price = Column(Float, nullable=True)
