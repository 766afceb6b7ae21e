import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from .. import models, schemas
from ..config import settings
from ..database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/history", tags=["history"])


@router.get("/", response_model=List[schemas.CalculationRecordSummary])
def list_history(calculator_type: Optional[str] = None,
                 limit: int = Query(settings.HISTORY_PAGE_SIZE, ge=1, le=500),
                 skip: int = Query(0, ge=0),
                 db: Session = Depends(get_db)):
    query = db.query(models.CalculationRecord)
    if calculator_type:
        query = query.filter(models.CalculationRecord.calculator_type == calculator_type)
    return query.order_by(models.CalculationRecord.created_at.desc(),
                          models.CalculationRecord.id.desc()).offset(skip).limit(limit).all()


@router.get("/{record_id}", response_model=schemas.CalculationRecord)
def get_record(record_id: int, db: Session = Depends(get_db)):
    record = db.query(models.CalculationRecord).filter(models.CalculationRecord.id == record_id).first()
    if not record:
        raise HTTPException(status_code=404, detail="Calculation not found")
    return record


@router.delete("/{record_id}")
def delete_record(record_id: int, db: Session = Depends(get_db)):
    record = db.query(models.CalculationRecord).filter(models.CalculationRecord.id == record_id).first()
    if not record:
        raise HTTPException(status_code=404, detail="Calculation not found")
    db.delete(record)
    db.commit()
    logger.info(f"Deleted calculation record {record_id}")
    return {"deleted": record_id}
