from sqlalchemy import Column, String, Integer, Date, ForeignKey, Enum
from sqlalchemy.orm import relationship
from hvacops.models.base import BaseModel
from hvacops.core.enums import EquipmentCondition, ReleaseType, StoredEquipmentStatus


class Warehouse(BaseModel):
    __tablename__ = "warehouses"

    name = Column(String(120), nullable=False)
    address = Column(String(255), nullable=False)
    manager_name = Column(String(60))
    manager_phone = Column(String(40))
    capacity = Column(Integer, nullable=True)
    notes = Column(String, nullable=True)

    equipment = relationship("StoredEquipment", back_populates="warehouse", order_by="StoredEquipment.id")


class StoredEquipment(BaseModel):
    """Unit removed from a site and kept in a warehouse until it is reinstalled or disposed of."""
    __tablename__ = "stored_equipment"

    order_id = Column(ForeignKey("orders.id", ondelete="SET NULL"), nullable=True, index=True)
    warehouse_id = Column(ForeignKey("warehouses.id"), nullable=False, index=True)
    warehouse = relationship("Warehouse", back_populates="equipment")

    site_name = Column(String(120), nullable=False)
    affiliate = Column(String(60), index=True)
    address = Column(String(255))
    category = Column(String(60), nullable=False)
    model = Column(String(60))
    size = Column(String(20))
    quantity = Column(Integer, nullable=False, default=1)
    manufacturer = Column(String(60))
    manufacturing_date = Column(String(7))
    storage_start_date = Column(Date, nullable=False)
    condition = Column(Enum(EquipmentCondition), default=EquipmentCondition.GOOD, nullable=False)
    removal_reason = Column(String, nullable=True)
    notes = Column(String, nullable=True)

    status = Column(Enum(StoredEquipmentStatus), default=StoredEquipmentStatus.STORED, nullable=False, index=True)
    release_type = Column(Enum(ReleaseType), nullable=True)
    release_date = Column(Date, nullable=True)
    release_destination = Column(String(255))
    release_notes = Column(String, nullable=True)
