"""
Document export of the current dashboard view (PDF, Excel and a JSON summary).
"""

from __future__ import annotations

import io
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd
from fpdf import FPDF

from student_dashboard.config import PDF_STUDENT_LIMIT
from student_dashboard.data.metrics import (
    calculate_all_status_metrics,
    calculate_certificate_requests,
    calculate_discipline_progress,
    calculate_financial_status,
    compute_kpis,
    generate_summary_report,
)
from student_dashboard.data.schema import (
    COL_CPF,
    COL_COHORT,
    COL_COURSE,
    COL_DISCIPLINES,
    COL_DOCUMENTS,
    COL_ENROLLMENT_STATUS,
    COL_EVALUATION,
    COL_FINANCIAL,
    COL_NAME,
    COL_PAYMENTS,
    COL_START_DATE,
    KPIs,
    StudentRecord,
)
from student_dashboard.ui.components.formatting import format_percent

DEFAULT_REPORT_TITLE = "Relatório de Estudantes"
TIMESTAMP_DISPLAY = "%d/%m/%Y %H:%M"

# (header, x position in mm, max characters)
PDF_COLUMNS = [
    ("Nome", 20, 25),
    ("CPF", 80, 14),
    ("Curso", 120, 15),
    ("Status", 160, 12),
]


def report_filename(prefix: str, generated_at: datetime, extension: str) -> str:
    slug = "_".join(prefix.lower().split())
    return f"{slug}_{generated_at:%Y%m%d_%H%M}.{extension}"


def _latin1(text: str) -> str:
    # Core PDF fonts only cover Latin-1
    return text.encode("latin-1", "replace").decode("latin-1")


def _kpi_lines(kpis: KPIs) -> List[str]:
    return [
        f"Total de Estudantes: {kpis.total_students}",
        f"% Em Dia: {format_percent(kpis.percent_current)}",
        f"Progresso Médio: {format_percent(kpis.avg_discipline_progress)}",
        f"Docs Completos: {format_percent(kpis.percent_documents_ok)}",
        f"Certificados (30d): {kpis.cert_requests_30d}",
    ]


def build_pdf_report(
    records: Sequence[StudentRecord],
    kpis: KPIs,
    generated_at: datetime,
    title: str = DEFAULT_REPORT_TITLE,
    filters_summary: Optional[str] = None,
) -> bytes:
    pdf = FPDF()
    pdf.set_auto_page_break(True, margin=20)
    pdf.add_page()

    pdf.set_font("Helvetica", "B", 18)
    pdf.cell(0, 10, _latin1(title), new_x="LMARGIN", new_y="NEXT")

    pdf.set_font("Helvetica", "", 10)
    pdf.cell(0, 8, f"Gerado em: {generated_at:{TIMESTAMP_DISPLAY}}", new_x="LMARGIN", new_y="NEXT")
    if filters_summary:
        pdf.multi_cell(0, 6, _latin1(filters_summary), new_x="LMARGIN", new_y="NEXT")
    pdf.ln(6)

    pdf.set_font("Helvetica", "B", 14)
    pdf.cell(0, 10, _latin1("Indicadores Principais (KPIs)"), new_x="LMARGIN", new_y="NEXT")
    pdf.set_font("Helvetica", "", 10)
    for line in _kpi_lines(kpis):
        pdf.cell(0, 6, _latin1(line), new_x="LMARGIN", new_y="NEXT")
    pdf.ln(6)

    if records:
        pdf.set_font("Helvetica", "B", 14)
        pdf.cell(0, 10, "Lista de Estudantes", new_x="LMARGIN", new_y="NEXT")

        pdf.set_font("Helvetica", "B", 8)
        _pdf_row(pdf, [header for header, _, _ in PDF_COLUMNS])
        pdf.line(20, pdf.get_y(), 190, pdf.get_y())
        pdf.ln(1)

        pdf.set_font("Helvetica", "", 8)
        for record in records[:PDF_STUDENT_LIMIT]:
            _pdf_row(pdf, [record.name, record.cpf, record.course, record.enrollment_status])

        remaining = len(records) - PDF_STUDENT_LIMIT
        if remaining > 0:
            pdf.ln(4)
            pdf.cell(0, 6, f"... e mais {remaining} estudantes", new_x="LMARGIN", new_y="NEXT")

    return bytes(pdf.output())


def _pdf_row(pdf: FPDF, values: Sequence[str]) -> None:
    if pdf.get_y() > pdf.h - 25:
        pdf.add_page()
    y = pdf.get_y()
    for (_, x, limit), value in zip(PDF_COLUMNS, values):
        pdf.set_xy(x, y)
        pdf.cell(0, 6, _latin1((value or "")[:limit]))
    pdf.set_xy(pdf.l_margin, y + 6)


def _progress_display(value: Optional[float]) -> str:
    return f"{value:.1f}" if value is not None else "N/A"


def kpis_frame(kpis: KPIs, generated_at: datetime) -> pd.DataFrame:
    rows = [
        ("Total de Estudantes", kpis.total_students),
        ("% Em Dia", format_percent(kpis.percent_current)),
        ("% Inadimplentes", format_percent(kpis.percent_delinquent)),
        ("Progresso Médio Disciplinas", format_percent(kpis.avg_discipline_progress)),
        ("% Documentos OK", format_percent(kpis.percent_documents_ok)),
        ("Certificados Solicitados (7d)", kpis.cert_requests_7d),
        ("Certificados Solicitados (30d)", kpis.cert_requests_30d),
        ("Certificados Solicitados (90d)", kpis.cert_requests_90d),
        ("", ""),
        ("Relatório gerado em:", f"{generated_at:{TIMESTAMP_DISPLAY}}"),
    ]
    return pd.DataFrame(rows, columns=["Indicador", "Valor"])


def students_frame(records: Sequence[StudentRecord]) -> pd.DataFrame:
    rows = [
        {
            COL_NAME: record.name,
            COL_CPF: record.cpf,
            COL_COURSE: record.course,
            COL_COHORT: record.cohort,
            COL_ENROLLMENT_STATUS: record.enrollment_status,
            COL_START_DATE: record.start_date_text,
            COL_FINANCIAL: record.financial_text,
            COL_EVALUATION: record.evaluation_text,
            "Tempo Mínimo": record.minimum_time_text,
            COL_DOCUMENTS: record.documents_text,
            COL_DISCIPLINES: record.disciplines_text,
            COL_PAYMENTS: record.payments_text,
            "Progresso Disciplinas (%)": _progress_display(record.discipline_progress),
            "Progresso Pagamentos (%)": _progress_display(record.payment_progress),
            "Certificado Digital - Tipo": record.digital_cert_type,
            "Certificado Digital - Status": record.digital_cert_status,
            "Certificado Digital - Data Solicitação": record.digital_cert_request_text,
            "Certificado Impresso - Tipo": record.printed_cert_type,
            "Certificado Impresso - Status": record.printed_cert_status,
            "Certificado Impresso - Data Solicitação": record.printed_cert_request_text,
        }
        for record in records
    ]
    return pd.DataFrame(rows)


def build_excel_report(records: Sequence[StudentRecord], kpis: KPIs, generated_at: datetime) -> bytes:
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        kpis_frame(kpis, generated_at).to_excel(writer, sheet_name="KPIs", index=False)
        if records:
            students_frame(records).to_excel(writer, sheet_name="Estudantes", index=False)
    return buffer.getvalue()



def build_summary_payload(records: Sequence[StudentRecord], as_of: date, generated_at: datetime) -> Dict[str, Any]:
    """Summary report extended with every aggregate breakdown, ready for `json.dumps`."""
    payload = generate_summary_report(records, compute_kpis(records, as_of), generated_at).to_dict()
    payload["status_metrics"] = {
        pillar: metric.to_dict() for pillar, metric in calculate_all_status_metrics(records).items()
    }
    payload["financial"] = calculate_financial_status(records, as_of).to_dict()
    payload["discipline_progress"] = calculate_discipline_progress(records).to_dict()
    payload["certificate_requests"] = calculate_certificate_requests(records, as_of).to_dict()
    return payload
