"""
Export and sharing tests.

Tests:
1-4.   Payload and flattening
5-9.   CSV / Excel / JSON / PDF output
10-15. Share links and embed snippets
"""

import csv
import io
import json
from urllib.parse import parse_qsl, urlsplit

import pytest

from lasercalc.calculators.registry import get_calculator
from lasercalc.exporter import (
    build_export_payload, collect_recommendations, export_csv, export_excel_csv, export_filename,
    export_json, export_results, flatten,
)
from lasercalc.pdf_generator import generate_results_pdf
from lasercalc.sharing import build_embed_code, build_share_url, parse_share_params


def _sheet_payload(fmt="json"):
    calc = get_calculator("sheet_optimization")
    inputs = dict(calc.DEFAULT_INPUTS)
    return build_export_payload(calc, inputs, calc.calculate(inputs), fmt)


# ============================================================
# Payload and flattening
# ============================================================

def test_payload_metadata():
    payload = _sheet_payload("csv")
    meta = payload["metadata"]
    assert meta["calculator_id"] == "sheet_optimization"
    assert meta["calculator_name"] == "Sheet Size Optimizer"
    assert meta["format"] == "csv"
    assert meta["generated_at"].endswith("Z")
    assert set(payload) == {"metadata", "input", "results", "recommendations"}


def test_flatten_nested_dicts_and_lists():
    rows = flatten({"a": {"b": 1, "c": [1, 2]}, "d": [{"e": "x"}, {"e": "y"}]})
    assert rows == [("a.b", 1), ("a.c", "1; 2"), ("d[0].e", "x"), ("d[1].e", "y")]


def test_collect_recommendations_from_strings_and_dicts():
    results = {
        "recommendations": ["plain"],
        "nested": {"recommendations": [{"type": "X", "suggestion": "from dict"}]},
    }
    assert collect_recommendations(results) == ["plain", "from dict"]


def test_export_filename_uses_extension():
    assert export_filename("cut_path", "excel").endswith(".csv")
    assert export_filename("cut_path", "pdf").startswith("cut_path-")


# ============================================================
# Output formats
# ============================================================

def test_csv_has_header_and_quotes_commas():
    payload = _sheet_payload("csv")
    payload["input"]["note"] = 'a, "quoted" value'
    text = export_csv(payload)
    rows = list(csv.reader(io.StringIO(text)))
    assert rows[0] == ["Section", "Field", "Value"]
    assert ["input", "note", 'a, "quoted" value'] in rows
    assert '"a, ""quoted"" value"' in text
    assert any(r[0] == "results" and r[1] == "optimal_sheet_size.name" for r in rows)


def test_excel_csv_has_bom_and_crlf():
    text = export_excel_csv(_sheet_payload("excel"))
    assert text.startswith("\ufeffSection,Field,Value\r\n")


def test_json_export_round_trips():
    payload = _sheet_payload()
    assert json.loads(export_json(payload))["metadata"]["calculator_id"] == "sheet_optimization"


def test_pdf_export_is_pdf_bytes():
    pdf = generate_results_pdf(_sheet_payload("pdf"))
    assert isinstance(pdf, bytes)
    assert pdf.startswith(b"%PDF")


def test_export_results_dispatch_and_unknown_format():
    calc = get_calculator("lead_qualification")
    inputs = dict(calc.DEFAULT_INPUTS)
    results = calc.calculate(inputs)
    content, media_type, filename = export_results("CSV", calc, inputs, results)
    assert media_type == "text/csv"
    assert filename.endswith(".csv")
    assert content.startswith("Section,Field,Value")
    content, media_type, _ = export_results("pdf", calc, inputs, results)
    assert media_type == "application/pdf"
    assert content.startswith(b"%PDF")
    with pytest.raises(ValueError, match="Unsupported export format"):
        export_results("docx", calc, inputs, results)


# ============================================================
# Sharing
# ============================================================

def test_share_url_is_stable_and_sorted():
    url = build_share_url("gas_consumption", {"thickness": 3, "gas_type": "nitrogen"},
                          base_url="https://example.com/")
    assert url == "https://example.com/calculators/gas_consumption?gas_type=nitrogen&thickness=3"


def test_share_url_encodes_booleans_and_nested_values():
    url = build_share_url("cut_path", {"flag": True, "sheet": {"width": 1500, "length": 3000}, "skip": None},
                          base_url="https://example.com")
    params = dict(parse_qsl(urlsplit(url).query))
    assert params["flag"] == "true"
    assert json.loads(params["sheet"]) == {"width": 1500, "length": 3000}
    assert "skip" not in params


def test_parse_share_params_restores_types():
    inputs = {"thickness": 3, "efficiency": 0.85, "gas_type": "nitrogen", "flag": False,
              "parts": [{"quantity": 10}]}
    url = build_share_url("batch_processing", inputs, base_url="https://example.com")
    assert parse_share_params(dict(parse_qsl(urlsplit(url).query))) == inputs


def test_parse_share_params_only_decodes_plain_numbers():
    params = {"a": "inf", "b": "-nan", "c": "1_000", "d": "-2.5e3", "e": ".5", "f": "-7"}
    assert parse_share_params(params) == {"a": "inf", "b": "-nan", "c": "1_000", "d": -2500.0, "e": 0.5, "f": -7}


def test_embed_code_fixed_size():
    code = build_embed_code("warping_risk", base_url="https://example.com", width=640, height=480)
    assert code.startswith("<iframe ")
    assert 'src="https://example.com/calculators/warping_risk?embed=true"' in code
    assert 'width="640"' in code and 'height="480"' in code


def test_embed_code_responsive_wraps_in_ratio_box():
    code = build_embed_code("warping_risk", base_url="https://example.com", width=800, height=600,
                            responsive=True)
    assert code.startswith("<div ")
    assert "padding-bottom:75.00%" in code
    assert "width:100%" in code
