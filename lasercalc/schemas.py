from pydantic import BaseModel, Field
from typing import Optional, List, Any
from datetime import datetime


# --- Calculators ---

class CalculatorInfo(BaseModel):
    id: str
    name: str
    description: str
    category: str
    version: str


class CalculatorDetail(CalculatorInfo):
    default_inputs: dict


class CalculateRequest(BaseModel):
    inputs: dict = {}


class CalculateResponse(BaseModel):
    calculator_id: str
    calculation_id: Optional[int] = None
    results: dict


class ExportRequest(BaseModel):
    inputs: dict = {}
    format: str = "json"


class ShareRequest(BaseModel):
    inputs: dict = {}
    base_url: Optional[str] = None


class ShareResponse(BaseModel):
    url: str


class SharedInputs(BaseModel):
    calculator_id: str
    inputs: dict


class EmbedResponse(BaseModel):
    calculator_id: str
    code: str


# --- Presets ---

class PresetBase(BaseModel):
    calculator_type: str
    name: str = Field(min_length=1)
    description: Optional[str] = None
    parameters: dict
    tags: List[str] = []


class PresetCreate(PresetBase):
    pass


class PresetUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    parameters: Optional[dict] = None
    tags: Optional[List[str]] = None


class Preset(PresetBase):
    id: str
    created_at: datetime
    updated_at: datetime
    class Config:
        from_attributes = True


class PresetImport(BaseModel):
    """Body of /presets/import: the document produced by /presets/export."""
    version: Optional[str] = None
    calculator_type: Optional[str] = None
    presets: List[dict]


class PresetImportResult(BaseModel):
    imported: int
    skipped: int
    errors: List[str] = []


class PresetCalculateRequest(BaseModel):
    overrides: dict = {}


# --- History ---

class CalculationRecord(BaseModel):
    id: int
    calculator_type: str
    inputs_json: Any
    outputs_json: Any
    created_at: datetime
    class Config:
        from_attributes = True


class CalculationRecordSummary(BaseModel):
    id: int
    calculator_type: str
    created_at: datetime
    class Config:
        from_attributes = True
