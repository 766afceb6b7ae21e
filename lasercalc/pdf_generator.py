"""
PDF results report.

Renders an export payload (metadata, input, results, recommendations) as a
printable report. Uses fpdf2 (pure Python, no system dependencies).

Sections:
1. Header (company, calculator, generated date)
2. Inputs
3. Results, one block per top-level result group
4. Recommendations
"""

from datetime import datetime

from fpdf import FPDF

from .config import settings
from .exporter import flatten

KEY_WIDTH = 95
VALUE_WIDTH = 95


def _label(key: str) -> str:
    """'cost_analysis.total_cost' -> 'Total Cost' (last segment, title-cased)."""
    last = key.split(".")[-1]
    return last.replace("_", " ").title()


def _fmt_value(value) -> str:
    if value is None:
        return "-"
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, float):
        return f"{value:,.4f}".rstrip("0").rstrip(".")
    return str(value)


def _safe(text: str) -> str:
    """Replace Unicode chars that can't be rendered by built-in PDF fonts (latin-1)."""
    if not text:
        return ""
    return (
        text
        .replace("\u2022", "-")    # bullet
        .replace("\u2014", " - ")  # em dash
        .replace("\u2013", "-")    # en dash
        .replace("\u03bc", "\u00b5")  # greek mu -> micro sign
        .replace("\u201c", '"')    # left double quote
        .replace("\u201d", '"')    # right double quote
        .replace("\u2018", "'")    # left single quote
        .replace("\u2019", "'")    # right single quote
        .encode("latin-1", errors="replace")
        .decode("latin-1")
    )


class ResultsPDF(FPDF):
    """Custom PDF class for calculator result reports."""

    def __init__(self, company_name=""):
        super().__init__()
        self.company_name = company_name
        self.set_auto_page_break(auto=True, margin=20)

    def header(self):
        pass  # Header is drawn once on the first page

    def footer(self):
        self.set_y(-15)
        self.set_font("Helvetica", "I", 8)
        self.set_text_color(150, 150, 150)
        self.cell(0, 10, _safe(f"{self.company_name} - Page {self.page_no()}/{{nb}}"), align="C")

    def section_header(self, title):
        """Render a section header bar."""
        self.set_font("Helvetica", "B", 11)
        self.set_fill_color(45, 55, 72)
        self.set_text_color(255, 255, 255)
        self.cell(0, 8, _safe(f"  {title}"), fill=True, new_x="LMARGIN", new_y="NEXT")
        self.set_text_color(0, 0, 0)
        self.ln(2)

    def key_value_row(self, key, value, shade=False):
        self.set_font("Helvetica", "", 8)
        if shade:
            self.set_fill_color(245, 245, 245)
        self.cell(KEY_WIDTH, 5.5, _safe(key)[:70], fill=shade)
        self.multi_cell(VALUE_WIDTH, 5.5, _safe(value), fill=shade, new_x="LMARGIN", new_y="NEXT")


def generate_results_pdf(payload: dict) -> bytes:
    """
    Generate a PDF report.

    Args:
        payload: export payload from exporter.build_export_payload

    Returns:
        PDF bytes
    """
    meta = payload.get("metadata", {})
    pdf = ResultsPDF(company_name=settings.COMPANY_NAME)
    pdf.alias_nb_pages()
    pdf.add_page()

    # ── SECTION 1: Header ──
    pdf.set_font("Helvetica", "B", 18)
    pdf.cell(0, 10, _safe(meta.get("title", "Calculation Results")), new_x="LMARGIN", new_y="NEXT")

    generated = meta.get("generated_at", "")
    try:
        date_str = datetime.fromisoformat(generated.replace("Z", "+00:00")).strftime("%B %d, %Y %H:%M UTC")
    except (ValueError, AttributeError):
        date_str = datetime.utcnow().strftime("%B %d, %Y %H:%M UTC")

    pdf.set_font("Helvetica", "", 9)
    pdf.set_text_color(100, 100, 100)
    pdf.cell(0, 5, _safe(f"{settings.COMPANY_NAME} | Generated {date_str} | "
                         f"Version {meta.get('calculator_version', '')}"),
             new_x="LMARGIN", new_y="NEXT")
    pdf.set_text_color(0, 0, 0)
    pdf.ln(4)

    # ── SECTION 2: Inputs ──
    pdf.section_header("INPUTS")
    for idx, (key, value) in enumerate(flatten(payload.get("input", {}))):
        pdf.key_value_row(key.replace("_", " "), _fmt_value(value), shade=idx % 2 == 1)
    pdf.ln(4)

    # ── SECTION 3: Results ──
    for group, values in (payload.get("results") or {}).items():
        if group == "recommendations":
            continue
        pdf.section_header(group.replace("_", " ").upper())
        if isinstance(values, (dict, list)):
            rows = flatten(values)
        else:
            rows = [(group, values)]
        for idx, (key, value) in enumerate(rows):
            pdf.key_value_row(_label(key) if "[" not in key else key.replace("_", " "),
                              _fmt_value(value), shade=idx % 2 == 1)
        pdf.ln(3)

    # ── SECTION 4: Recommendations ──
    recs = payload.get("recommendations") or []
    if recs:
        pdf.section_header("RECOMMENDATIONS")
        pdf.set_font("Helvetica", "", 9)
        for rec in recs:
            pdf.multi_cell(0, 5, _safe(f"- {rec}"), new_x="LMARGIN", new_y="NEXT")

    return bytes(pdf.output())
