from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List, Optional

from .. import presets as preset_store
from .. import schemas
from ..database import get_db
from .calculators import load_calculator, record_calculation, run_calculator

router = APIRouter(prefix="/presets", tags=["presets"])


def _fetch(db: Session, preset_id: str):
    try:
        return preset_store.get_preset(db, preset_id)
    except preset_store.PresetNotFound:
        raise HTTPException(status_code=404, detail="Preset not found")


@router.post("/", response_model=schemas.Preset)
def create_preset(preset: schemas.PresetCreate, db: Session = Depends(get_db)):
    try:
        return preset_store.create_preset(db, **preset.model_dump())
    except preset_store.DuplicatePresetError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except preset_store.InvalidPresetError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/", response_model=List[schemas.Preset])
def list_presets(calculator_type: Optional[str] = None, search: Optional[str] = None,
                 db: Session = Depends(get_db)):
    return preset_store.list_presets(db, calculator_type=calculator_type, search=search)


@router.get("/export")
def export_presets(calculator_type: Optional[str] = None, db: Session = Depends(get_db)):
    return preset_store.export_presets(db, calculator_type=calculator_type)


@router.post("/import", response_model=schemas.PresetImportResult)
def import_presets(document: schemas.PresetImport, db: Session = Depends(get_db)):
    return preset_store.import_presets(db, document.model_dump())


@router.get("/{preset_id}", response_model=schemas.Preset)
def get_preset(preset_id: str, db: Session = Depends(get_db)):
    return _fetch(db, preset_id)


@router.patch("/{preset_id}", response_model=schemas.Preset)
def update_preset(preset_id: str, update: schemas.PresetUpdate, db: Session = Depends(get_db)):
    _fetch(db, preset_id)
    try:
        return preset_store.update_preset(db, preset_id, update.model_dump(exclude_unset=True))
    except preset_store.DuplicatePresetError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except preset_store.InvalidPresetError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/{preset_id}")
def delete_preset(preset_id: str, db: Session = Depends(get_db)):
    _fetch(db, preset_id)
    preset_store.delete_preset(db, preset_id)
    return {"deleted": preset_id}


@router.post("/{preset_id}/duplicate", response_model=schemas.Preset)
def duplicate_preset(preset_id: str, db: Session = Depends(get_db)):
    _fetch(db, preset_id)
    return preset_store.duplicate_preset(db, preset_id)


@router.post("/{preset_id}/calculate", response_model=schemas.CalculateResponse)
def calculate_from_preset(preset_id: str, request: Optional[schemas.PresetCalculateRequest] = None,
                          db: Session = Depends(get_db)):
    """Run the preset's calculator on its parameters, with optional overrides on top."""
    preset = _fetch(db, preset_id)
    calculator = load_calculator(preset.calculator_type)
    inputs = preset_store.preset_inputs(preset, request.overrides if request else None)
    results = run_calculator(calculator, inputs)
    record = record_calculation(db, preset.calculator_type, inputs, results)
    return {"calculator_id": preset.calculator_type, "calculation_id": record.id, "results": results}
