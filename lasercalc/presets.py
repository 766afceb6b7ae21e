"""
Preset store: named, reusable calculator inputs.

Plain functions over a SQLAlchemy session. Routers translate the
exceptions below into HTTP status codes.
"""

import logging
from datetime import datetime

from sqlalchemy import or_
from sqlalchemy.orm import Session

from . import models
from .calculators.registry import has_calculator

logger = logging.getLogger(__name__)

EXPORT_VERSION = "1.0"


class PresetNotFound(LookupError):
    pass


class DuplicatePresetError(ValueError):
    pass


class InvalidPresetError(ValueError):
    pass


def _check(calculator_type: str, name: str, parameters) -> None:
    if not isinstance(calculator_type, str) or not has_calculator(calculator_type):
        raise InvalidPresetError(f"Unknown calculator: {calculator_type}")
    if not name or not str(name).strip():
        raise InvalidPresetError("Preset name is required")
    if not isinstance(parameters, dict) or not parameters:
        raise InvalidPresetError("Preset parameters must be a non-empty object")


def _name_taken(db: Session, calculator_type: str, name: str, exclude_id: str = None) -> bool:
    query = db.query(models.Preset).filter(
        models.Preset.calculator_type == calculator_type,
        models.Preset.name == name,
    )
    if exclude_id:
        query = query.filter(models.Preset.id != exclude_id)
    return query.first() is not None


def create_preset(db: Session, calculator_type: str, name: str, parameters: dict,
                  description: str = None, tags: list = None) -> models.Preset:
    name = (name or "").strip()
    _check(calculator_type, name, parameters)
    if _name_taken(db, calculator_type, name):
        raise DuplicatePresetError(f"A preset named '{name}' already exists for {calculator_type}")

    preset = models.Preset(
        calculator_type=calculator_type,
        name=name,
        description=description,
        parameters=parameters,
        tags=list(tags or []),
    )
    db.add(preset)
    db.commit()
    db.refresh(preset)
    return preset


def list_presets(db: Session, calculator_type: str = None, search: str = None) -> list:
    """
    Presets ordered by name. search matches name and description
    (case-insensitive, in SQL) and tags (in Python, since tags is JSON).
    """
    query = db.query(models.Preset)
    if calculator_type:
        query = query.filter(models.Preset.calculator_type == calculator_type)
    presets = query.order_by(models.Preset.name).all()

    if search:
        needle = search.strip().lower()
        presets = [
            p for p in presets
            if needle in (p.name or "").lower()
            or needle in (p.description or "").lower()
            or any(needle in str(tag).lower() for tag in (p.tags or []))
        ]
    return presets


def get_preset(db: Session, preset_id: str) -> models.Preset:
    preset = db.query(models.Preset).filter(models.Preset.id == preset_id).first()
    if not preset:
        raise PresetNotFound(f"Preset not found: {preset_id}")
    return preset


def update_preset(db: Session, preset_id: str, changes: dict) -> models.Preset:
    preset = get_preset(db, preset_id)

    if "name" in changes and changes["name"] is not None:
        name = changes["name"].strip()
        if not name:
            raise InvalidPresetError("Preset name is required")
        if _name_taken(db, preset.calculator_type, name, exclude_id=preset.id):
            raise DuplicatePresetError(
                f"A preset named '{name}' already exists for {preset.calculator_type}")
        preset.name = name
    if "parameters" in changes and changes["parameters"] is not None:
        if not isinstance(changes["parameters"], dict) or not changes["parameters"]:
            raise InvalidPresetError("Preset parameters must be a non-empty object")
        preset.parameters = changes["parameters"]
    if "description" in changes:
        preset.description = changes["description"]
    if "tags" in changes and changes["tags"] is not None:
        preset.tags = list(changes["tags"])

    preset.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(preset)
    return preset


def delete_preset(db: Session, preset_id: str) -> None:
    preset = get_preset(db, preset_id)
    db.delete(preset)
    db.commit()


def copy_name(db: Session, calculator_type: str, name: str) -> str:
    """'Name (Copy)', then 'Name (Copy 2)', 'Name (Copy 3)'... until free."""
    candidate = f"{name} (Copy)"
    counter = 2
    while _name_taken(db, calculator_type, candidate):
        candidate = f"{name} (Copy {counter})"
        counter += 1
    return candidate


def duplicate_preset(db: Session, preset_id: str) -> models.Preset:
    source = get_preset(db, preset_id)
    return create_preset(
        db,
        calculator_type=source.calculator_type,
        name=copy_name(db, source.calculator_type, source.name),
        parameters=dict(source.parameters or {}),
        description=source.description,
        tags=list(source.tags or []),
    )


def export_presets(db: Session, calculator_type: str = None) -> dict:
    presets = list_presets(db, calculator_type=calculator_type)
    return {
        "version": EXPORT_VERSION,
        "exported_at": datetime.utcnow().isoformat() + "Z",
        "calculator_type": calculator_type,
        "presets": [
            {
                "calculator_type": p.calculator_type,
                "name": p.name,
                "description": p.description,
                "parameters": p.parameters,
                "tags": p.tags or [],
            }
            for p in presets
        ],
    }


def _import_text(value, field: str):
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidPresetError(f"{field} must be a string")
    return value.strip()


def _import_tags(tags) -> list:
    if tags is None:
        return []
    if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
        raise InvalidPresetError("tags must be a list of strings")
    return list(tags)


def import_presets(db: Session, document: dict) -> dict:
    """
    Load an export document. Names already present for the same calculator
    are skipped; invalid entries are reported and skipped.
    """
    default_type = document.get("calculator_type")
    imported, skipped, errors = 0, 0, []

    for idx, item in enumerate(document.get("presets") or []):
        if not isinstance(item, dict):
            errors.append(f"presets[{idx}]: not an object")
            continue
        calculator_type = item.get("calculator_type") or default_type
        try:
            name = _import_text(item.get("name"), "name") or ""
            description = _import_text(item.get("description"), "description")
            tags = _import_tags(item.get("tags"))
            _check(calculator_type, name, item.get("parameters"))
        except InvalidPresetError as e:
            errors.append(f"presets[{idx}]: {e}")
            continue
        if _name_taken(db, calculator_type, name):
            skipped += 1
            continue
        db.add(models.Preset(
            calculator_type=calculator_type,
            name=name,
            description=description,
            parameters=item["parameters"],
            tags=tags,
        ))
        # flush so a repeated name later in the same document is seen as taken
        db.flush()
        imported += 1

    db.commit()
    logger.info(f"Preset import: {imported} imported, {skipped} skipped, {len(errors)} errors")
    return {"imported": imported, "skipped": skipped, "errors": errors}


def preset_inputs(preset: models.Preset, overrides: dict = None) -> dict:
    """Preset parameters with request overrides laid on top."""
    merged = dict(preset.parameters or {})
    merged.update(overrides or {})
    return merged
