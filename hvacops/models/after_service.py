from sqlalchemy import Column, String, Float, Date, Enum
from hvacops.models.base import BaseModel
from hvacops.core.enums import ASStatus


class ASRequest(BaseModel):
    """After-sales request; lives apart from orders and has its own lifecycle."""
    __tablename__ = "as_requests"

    reception_date = Column(Date, nullable=False)
    affiliate = Column(String(60), index=True)
    business_name = Column(String(120), nullable=False)
    address = Column(String(255), nullable=False)
    detail_address = Column(String(120))
    contact_name = Column(String(60))
    contact_phone = Column(String(40))
    as_reason = Column(String, nullable=True)
    model_name = Column(String(60))
    outdoor_unit_location = Column(String(120))

    visit_date = Column(Date, nullable=True)
    samsung_as_center = Column(String(120))
    technician_name = Column(String(60))
    technician_phone = Column(String(40))
    processing_details = Column(String, nullable=True)
    processed_date = Column(Date, nullable=True)
    as_cost = Column(Float, nullable=True)
    reception_fee = Column(Float, nullable=True)
    total_amount = Column(Float, nullable=False, default=0.0)

    status = Column(Enum(ASStatus), default=ASStatus.RECEIVED, nullable=False, index=True)
    settlement_month = Column(String(7), nullable=True, index=True)
    notes = Column(String, nullable=True)
