"""
Calculator endpoints.

GET  /api/calculators  catalog
GET  /api/calculators/{id}  metadata + default inputs
POST /api/calculators/{id}/calculate  run, record in history
POST /api/calculators/{id}/export  run, download csv/excel/json/pdf
POST /api/calculators/{id}/share  share link for a set of inputs
GET  /api/calculators/{id}/shared  share link query -> inputs
GET  /api/calculators/{id}/embed  <iframe> snippet
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import Response
from sqlalchemy.orm import Session

from .. import models, schemas
from ..calculators.base import BaseCalculator, CalculationInputError
from ..calculators.registry import calculator_catalog, get_calculator
from ..database import get_db
from ..exporter import export_results
from ..sharing import build_embed_code, build_share_url, parse_share_params

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/calculators", tags=["calculators"])


def load_calculator(calculator_id: str) -> BaseCalculator:
    try:
        return get_calculator(calculator_id)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Calculator not found: {calculator_id}")


def run_calculator(calculator: BaseCalculator, inputs: dict) -> dict:
    """Calculate, turning validation failures into a 400 with the offending field."""
    try:
        return calculator.calculate(inputs)
    except CalculationInputError as e:
        raise HTTPException(status_code=400, detail={"message": e.message, "field": e.field})


def record_calculation(db: Session, calculator_id: str, inputs: dict, results: dict) -> models.CalculationRecord:
    record = models.CalculationRecord(
        calculator_type=calculator_id,
        inputs_json=inputs,
        outputs_json=results,
    )
    db.add(record)
    db.commit()
    db.refresh(record)
    return record


@router.get("/", response_model=List[schemas.CalculatorInfo])
def list_calculators():
    return calculator_catalog()


@router.get("/{calculator_id}", response_model=schemas.CalculatorDetail)
def get_calculator_detail(calculator_id: str):
    calculator = load_calculator(calculator_id)
    return {**calculator.metadata(), "default_inputs": calculator.DEFAULT_INPUTS}


@router.post("/{calculator_id}/calculate", response_model=schemas.CalculateResponse)
def calculate(calculator_id: str, request: schemas.CalculateRequest, db: Session = Depends(get_db)):
    calculator = load_calculator(calculator_id)
    results = run_calculator(calculator, request.inputs)
    record = record_calculation(db, calculator_id, request.inputs, results)
    logger.info(f"Calculated {calculator_id} (record {record.id})")
    return {"calculator_id": calculator_id, "calculation_id": record.id, "results": results}


@router.post("/{calculator_id}/export")
def export(calculator_id: str, request: schemas.ExportRequest):
    """
    Calculate and return the results as a file download.

    Returns: text/csv, application/json or application/pdf with an
    attachment Content-Disposition.
    """
    calculator = load_calculator(calculator_id)
    results = run_calculator(calculator, request.inputs)
    try:
        content, media_type, filename = export_results(request.format, calculator, request.inputs, results)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return Response(
        content=content,
        media_type=media_type,
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
        },
    )


@router.post("/{calculator_id}/share", response_model=schemas.ShareResponse)
def share(calculator_id: str, request: schemas.ShareRequest):
    load_calculator(calculator_id)
    return {"url": build_share_url(calculator_id, request.inputs, base_url=request.base_url)}


@router.get("/{calculator_id}/shared", response_model=schemas.SharedInputs)
def shared(calculator_id: str, request: Request):
    load_calculator(calculator_id)
    params = {k: v for k, v in request.query_params.items() if k != "embed"}
    return {"calculator_id": calculator_id, "inputs": parse_share_params(params)}


@router.get("/{calculator_id}/embed", response_model=schemas.EmbedResponse)
def embed(
    calculator_id: str,
    width: Optional[int] = Query(None, gt=0),
    height: Optional[int] = Query(None, gt=0),
    responsive: bool = False,
):
    calculator = load_calculator(calculator_id)
    code = build_embed_code(calculator_id, width=width, height=height,
                            responsive=responsive, title=calculator.name)
    return {"calculator_id": calculator_id, "code": code}
