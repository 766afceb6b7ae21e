import uuid
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Text, JSON, UniqueConstraint

from .database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class Preset(Base):
    """Saved calculator inputs, reusable by name."""
    __tablename__ = "presets"
    __table_args__ = (
        UniqueConstraint("calculator_type", "name", name="uq_preset_calculator_name"),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    calculator_type = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    parameters = Column(JSON, nullable=False, default=dict)
    tags = Column(JSON, default=list)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class CalculationRecord(Base):
    """One successful calculation: the inputs as submitted and the results returned."""
    __tablename__ = "calculation_records"

    id = Column(Integer, primary_key=True, index=True)
    calculator_type = Column(String, nullable=False, index=True)
    inputs_json = Column(JSON, nullable=False)
    outputs_json = Column(JSON, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
