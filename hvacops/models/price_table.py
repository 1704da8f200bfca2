from sqlalchemy import Column, String, Float, Integer, ForeignKey
from sqlalchemy.orm import relationship
from hvacops.models.base import BaseModel


class PriceTableRow(BaseModel):
    """SET model catalog entry; its price is the sum of component sale prices."""
    __tablename__ = "price_table"

    category = Column(String(60), nullable=False)
    model = Column(String(60), nullable=False, unique=True, index=True)
    size = Column(String(20))
    price = Column(Float, nullable=False)

    components = relationship(
        "PriceTableComponent",
        back_populates="row",
        cascade="all, delete-orphan",
        order_by="PriceTableComponent.id",
    )


class PriceTableComponent(BaseModel):
    __tablename__ = "price_table_components"

    price_table_id = Column(ForeignKey("price_table.id", ondelete="CASCADE"), nullable=False)
    row = relationship("PriceTableRow", back_populates="components")

    model = Column(String(60), nullable=False)
    type = Column(String(20), nullable=False)
    unit_price = Column(Float, nullable=False, default=0.0)
    sale_price = Column(Float, nullable=False, default=0.0)
    quantity = Column(Integer, nullable=False, default=1)
