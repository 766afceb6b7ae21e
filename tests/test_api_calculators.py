"""
Calculator API tests.

Tests:
1-3.   Health + catalog
4-8.   Calculate endpoint (success, 400 with field, 404, history record)
9-11.  Export endpoint
12-16. Share, shared, embed
"""


def _gas_inputs(**overrides):
    inputs = {"gas_type": "oxygen", "material_type": "steel", "thickness": 6, "cutting_length": 8000,
              "cutting_time": 12, "piercing_points": 10, "gas_flow": 30, "gas_pressure": 2.0,
              "gas_price": 0.6, "efficiency": 0.9}
    inputs.update(overrides)
    return inputs


# ============================================================
# Health + catalog
# ============================================================

def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "app": "lasercalc"}


def test_list_calculators(client):
    resp = client.get("/api/calculators/")
    assert resp.status_code == 200
    ids = [c["id"] for c in resp.json()]
    assert len(ids) == 8
    assert "cut_path" in ids


def test_get_calculator_detail_includes_defaults(client):
    resp = client.get("/api/calculators/warping_risk")
    assert resp.status_code == 200
    data = resp.json()
    assert data["name"] == "Warping Risk Analyzer"
    assert data["default_inputs"]["material_type"] == "steel"

    assert client.get("/api/calculators/nope").status_code == 404


# ============================================================
# Calculate
# ============================================================

def test_calculate_returns_results_and_record_id(client):
    resp = client.post("/api/calculators/gas_consumption/calculate", json={"inputs": _gas_inputs()})
    assert resp.status_code == 200
    data = resp.json()
    assert data["calculator_id"] == "gas_consumption"
    assert isinstance(data["calculation_id"], int)
    assert data["results"]["suitability"]["rating"] == "Excellent"


def test_calculate_validation_error_is_400_with_field(client):
    resp = client.post("/api/calculators/gas_consumption/calculate",
                       json={"inputs": _gas_inputs(gas_price=0)})
    assert resp.status_code == 400
    detail = resp.json()["detail"]
    assert detail["field"] == "gas_price"
    assert detail["message"] == "Gas price must be greater than 0"


def test_calculate_malformed_list_item_is_400(client):
    """A list item that is not an object is a validation error, not a server error."""
    inputs = client.get("/api/calculators/cut_path").json()["default_inputs"]
    inputs["cut_features"] = [1]
    resp = client.post("/api/calculators/cut_path/calculate", json={"inputs": inputs})
    assert resp.status_code == 400
    assert resp.json()["detail"]["field"] == "cut_features[0]"

    resp = client.post("/api/calculators/batch_processing/calculate",
                       json={"inputs": {"part_specifications": ["P-001"],
                                        "material_inventory": [{"available_sheets": 1, "sheet_length": 3000,
                                                                "sheet_width": 1500, "thickness": 3}]}})
    assert resp.status_code == 400
    assert resp.json()["detail"]["field"] == "part_specifications[0]"


def test_calculate_unknown_calculator_is_404(client):
    resp = client.post("/api/calculators/teleporter/calculate", json={"inputs": {}})
    assert resp.status_code == 404


def test_calculate_records_history(client):
    """A successful calculation is saved; a rejected one is not."""
    client.post("/api/calculators/lead_qualification/calculate", json={"inputs": {"timeline": "urgent"}})
    client.post("/api/calculators/warping_risk/calculate", json={"inputs": {"thickness": 3}})

    resp = client.get("/api/history/")
    records = resp.json()
    assert len(records) == 1
    assert records[0]["calculator_type"] == "lead_qualification"


# ============================================================
# Export
# ============================================================

def test_export_csv_download(client):
    resp = client.post("/api/calculators/sheet_optimization/export", json={"inputs": {}, "format": "csv"})
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert "attachment" in resp.headers["content-disposition"]
    assert resp.text.startswith("Section,Field,Value")


def test_export_pdf_download(client):
    resp = client.post("/api/calculators/market_sizing/export", json={"inputs": {}, "format": "pdf"})
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/pdf"
    assert resp.content[:4] == b"%PDF"


def test_export_unknown_format_is_400(client):
    resp = client.post("/api/calculators/market_sizing/export", json={"inputs": {}, "format": "docx"})
    assert resp.status_code == 400


# ============================================================
# Share / embed
# ============================================================

def test_share_returns_url_under_public_base(client):
    resp = client.post("/api/calculators/gas_consumption/share",
                       json={"inputs": {"thickness": 6, "gas_type": "oxygen"}})
    assert resp.status_code == 200
    assert resp.json()["url"] == (
        "https://calc.example.com/calculators/gas_consumption?gas_type=oxygen&thickness=6")


def test_shared_parses_query_back_to_inputs(client):
    resp = client.get("/api/calculators/gas_consumption/shared",
                      params={"thickness": "6", "gas_type": "oxygen", "efficiency": "0.9", "embed": "true"})
    assert resp.status_code == 200
    assert resp.json()["inputs"] == {"thickness": 6, "gas_type": "oxygen", "efficiency": 0.9}


def test_shared_keeps_non_numeric_words_as_strings(client):
    resp = client.get("/api/calculators/gas_consumption/shared",
                      params={"thickness": "inf", "gas_flow": "nan", "cutting_length": "1_000"})
    assert resp.status_code == 200
    assert resp.json()["inputs"] == {"thickness": "inf", "gas_flow": "nan", "cutting_length": "1_000"}


def test_embed_snippet(client):
    resp = client.get("/api/calculators/cut_path/embed", params={"width": 640, "height": 480})
    assert resp.status_code == 200
    code = resp.json()["code"]
    assert code.startswith("<iframe ")
    assert "https://calc.example.com/calculators/cut_path?embed=true" in code
    assert 'width="640"' in code


def test_share_unknown_calculator_is_404(client):
    assert client.post("/api/calculators/nope/share", json={"inputs": {}}).status_code == 404
    assert client.get("/api/calculators/nope/embed").status_code == 404
