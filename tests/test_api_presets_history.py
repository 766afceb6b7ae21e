"""
Preset and history API tests.

Tests:
1-5.   Preset CRUD and validation
6-8.   Search, duplicate, calculate from preset
9-12.  Export / import
13-16. History list, filter, get, delete
"""

from lasercalc import models


def _create(client, name="Thin steel", calculator_type="gas_consumption", **extra):
    body = {
        "calculator_type": calculator_type,
        "name": name,
        "description": extra.pop("description", "3mm mild steel with nitrogen"),
        "parameters": extra.pop("parameters", {"gas_type": "nitrogen", "thickness": 3}),
        "tags": extra.pop("tags", ["steel", "nitrogen"]),
    }
    resp = client.post("/api/presets/", json=body)
    assert resp.status_code == 200, resp.text
    return resp.json()


# ============================================================
# Preset CRUD
# ============================================================

def test_create_and_get_preset(client):
    preset = _create(client)
    assert len(preset["id"]) == 36
    assert preset["parameters"] == {"gas_type": "nitrogen", "thickness": 3}

    resp = client.get(f"/api/presets/{preset['id']}")
    assert resp.status_code == 200
    assert resp.json()["name"] == "Thin steel"


def test_duplicate_name_same_calculator_is_409(client):
    _create(client)
    resp = client.post("/api/presets/", json={
        "calculator_type": "gas_consumption", "name": "Thin steel", "parameters": {"thickness": 1},
    })
    assert resp.status_code == 409
    # Same name under another calculator is fine
    _create(client, calculator_type="warping_risk", parameters={"thickness": 3})


def test_create_preset_invalid_is_400(client):
    resp = client.post("/api/presets/", json={
        "calculator_type": "gas_consumption", "name": "Empty", "parameters": {},
    })
    assert resp.status_code == 400
    resp = client.post("/api/presets/", json={
        "calculator_type": "warp_drive", "name": "X", "parameters": {"a": 1},
    })
    assert resp.status_code == 400


def test_update_preset(client):
    preset = _create(client)
    resp = client.patch(f"/api/presets/{preset['id']}", json={"name": "Thin steel v2", "tags": ["v2"]})
    assert resp.status_code == 200
    data = resp.json()
    assert data["name"] == "Thin steel v2"
    assert data["tags"] == ["v2"]
    assert data["parameters"] == preset["parameters"]


def test_delete_preset(client):
    preset = _create(client)
    assert client.delete(f"/api/presets/{preset['id']}").status_code == 200
    assert client.get(f"/api/presets/{preset['id']}").status_code == 404
    assert client.delete(f"/api/presets/{preset['id']}").status_code == 404


# ============================================================
# Search, duplicate, calculate
# ============================================================

def test_list_presets_filter_and_search(client):
    _create(client, name="Thin steel")
    _create(client, name="Thick aluminum", parameters={"material_type": "aluminum", "thickness": 10},
            description="Heavy plate", tags=["aluminium"])
    _create(client, name="Long bar", calculator_type="warping_risk", parameters={"length": 2000},
            description=None, tags=[])

    assert len(client.get("/api/presets/").json()) == 3
    assert len(client.get("/api/presets/", params={"calculator_type": "gas_consumption"}).json()) == 2
    names = [p["name"] for p in client.get("/api/presets/", params={"search": "plate"}).json()]
    assert names == ["Thick aluminum"]
    names = [p["name"] for p in client.get("/api/presets/", params={"search": "NITROGEN"}).json()]
    assert names == ["Thin steel"]


def test_duplicate_preset_numbers_copies(client):
    preset = _create(client)
    first = client.post(f"/api/presets/{preset['id']}/duplicate").json()
    second = client.post(f"/api/presets/{preset['id']}/duplicate").json()
    assert first["name"] == "Thin steel (Copy)"
    assert second["name"] == "Thin steel (Copy 2)"
    assert first["id"] != preset["id"]
    assert first["parameters"] == preset["parameters"]


def test_calculate_from_preset_with_overrides(client):
    preset = _create(client)
    resp = client.post(f"/api/presets/{preset['id']}/calculate", json={"overrides": {"gas_type": "oxygen"}})
    assert resp.status_code == 200
    data = resp.json()
    assert data["calculator_id"] == "gas_consumption"
    assert data["results"]["gas_properties"]["gas_type"] == "oxygen"

    record = client.get(f"/api/history/{data['calculation_id']}").json()
    assert record["inputs_json"] == {"gas_type": "oxygen", "thickness": 3}


# ============================================================
# Export / import
# ============================================================

def test_export_presets_document(client):
    _create(client)
    _create(client, name="Long bar", calculator_type="warping_risk", parameters={"length": 2000})
    doc = client.get("/api/presets/export", params={"calculator_type": "gas_consumption"}).json()
    assert doc["version"] == "1.0"
    assert doc["calculator_type"] == "gas_consumption"
    assert [p["name"] for p in doc["presets"]] == ["Thin steel"]


def test_import_skips_existing_and_reports_errors(client):
    _create(client)
    doc = {
        "version": "1.0",
        "calculator_type": "gas_consumption",
        "presets": [
            {"name": "Thin steel", "parameters": {"thickness": 3}},
            {"name": "Stainless 5mm", "parameters": {"material_type": "stainless", "thickness": 5}},
            {"name": "Broken", "parameters": {}},
        ],
    }
    resp = client.post("/api/presets/import", json=doc)
    assert resp.status_code == 200
    result = resp.json()
    assert result["imported"] == 1
    assert result["skipped"] == 1
    assert len(result["errors"]) == 1
    assert "presets[2]" in result["errors"][0]

    names = [p["name"] for p in client.get("/api/presets/").json()]
    assert sorted(names) == ["Stainless 5mm", "Thin steel"]


def test_import_reports_wrongly_typed_fields(client):
    doc = {
        "calculator_type": "gas_consumption",
        "presets": [
            {"name": 123, "parameters": {"thickness": 3}},
            {"name": "Tagged", "parameters": {"thickness": 3}, "tags": "steel"},
            {"name": "Good", "parameters": {"thickness": 3}, "tags": ["steel"]},
        ],
    }
    result = client.post("/api/presets/import", json=doc).json()
    assert result["imported"] == 1
    assert result["errors"] == [
        "presets[0]: name must be a string",
        "presets[1]: tags must be a list of strings",
    ]
    presets = client.get("/api/presets/").json()
    assert [(p["name"], p["tags"]) for p in presets] == [("Good", ["steel"])]


def test_export_then_import_into_empty_store(client, db):
    _create(client)
    doc = client.get("/api/presets/export").json()
    db.query(models.Preset).delete()
    db.commit()

    result = client.post("/api/presets/import", json=doc).json()
    assert result == {"imported": 1, "skipped": 0, "errors": []}


# ============================================================
# History
# ============================================================

def test_history_newest_first_and_filter(client):
    client.post("/api/calculators/lead_qualification/calculate", json={"inputs": {}})
    client.post("/api/calculators/sheet_optimization/calculate", json={"inputs": {}})
    client.post("/api/calculators/lead_qualification/calculate", json={"inputs": {"timeline": "urgent"}})

    records = client.get("/api/history/").json()
    assert len(records) == 3
    ids = [r["id"] for r in records]
    assert ids == sorted(ids, reverse=True)

    filtered = client.get("/api/history/", params={"calculator_type": "lead_qualification"}).json()
    assert len(filtered) == 2
    assert client.get("/api/history/", params={"limit": 1}).json()[0]["id"] == ids[0]


def test_history_get_has_inputs_and_outputs(client):
    calc = client.post("/api/calculators/lead_qualification/calculate", json={"inputs": {"timeline": "urgent"}})
    record_id = calc.json()["calculation_id"]
    record = client.get(f"/api/history/{record_id}").json()
    assert record["inputs_json"] == {"timeline": "urgent"}
    assert record["outputs_json"]["lead_ranking"] == calc.json()["results"]["lead_ranking"]


def test_history_delete(client):
    record_id = client.post("/api/calculators/lead_qualification/calculate",
                            json={"inputs": {}}).json()["calculation_id"]
    assert client.delete(f"/api/history/{record_id}").status_code == 200
    assert client.get(f"/api/history/{record_id}").status_code == 404
    assert client.delete(f"/api/history/{record_id}").status_code == 404


def test_history_missing_record_is_404(client):
    assert client.get("/api/history/9999").status_code == 404
