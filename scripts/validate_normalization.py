"""Quick validation script for normalization and metric outputs.

Run with `python scripts/validate_normalization.py` to check that sample rows
normalize into typed records and that the KPIs come out as expected.
"""

from __future__ import annotations

from datetime import date

from student_dashboard.data.metrics import compute_kpis
from student_dashboard.data.normalization import normalize_records
from student_dashboard.data.schema import FinancialSituation
from student_dashboard.data.financial import record_financial_situation

AS_OF = date(2024, 6, 15)


def main() -> None:
    sample = [
        {
            "Nome": "Ana Souza",
            "CPF": "123.456.789-00",
            "Curso": "Pedagogia",
            "Turma": "2024A",
            "Status Inscrição": "Cursando",
            "Data Início": "15/01/2024",
            "Financeiro": "OK",
            "Avaliação": "X",
            "Tempo mínimo": "ok",
            "Documentos": "OK",
            "Disciplinas": "3/12",
            "Cobranças": "5/12",
            "Data Solic. Digital": "10/06/2024",
            "Tipo Cert. Digital": "Conclusão",
            "Status Cert. Digital": "Emitido",
            "Data Solic. Impresso": "Não Solicitado",
            "Tipo Cert. Impresso": "Não Solicitado",
            "Status Cert. Impresso": "",
        },
        {
            "Nome": "Bruno Lima",
            "CPF": "987.654.321-00",
            "Curso": "Letras",
            "Turma": "2023B",
            "Status Inscrição": "Formado",
            "Data Início": "2023-02-01",
            "Financeiro": "X",
            "Avaliação": "OK",
            "Tempo mínimo": "OK",
            "Documentos": "-",
            "Disciplinas": "12/12",
            "Cobranças": "2/12",
        },
    ]

    records = normalize_records(sample)
    first, second = records

    assert first.start_date == date(2024, 1, 15), "DD/MM/YYYY start date should parse"
    assert second.start_date == date(2023, 2, 1), "ISO start date should parse"
    assert first.evaluation_status == 0 and second.documents_status is None, "Status tokens should normalize"
    assert first.discipline_progress == 25.0, "3/12 should become 25%"
    assert record_financial_situation(first, AS_OF) is FinancialSituation.CURRENT
    assert record_financial_situation(second, AS_OF) is FinancialSituation.DELINQUENT

    kpis = compute_kpis(records, AS_OF)
    if kpis.total_students != 2 or kpis.cert_requests_7d != 1:
        raise SystemExit(f"Unexpected KPIs: {kpis}")

    print("Normalization validation passed. Records:", len(records))


if __name__ == "__main__":
    main()
