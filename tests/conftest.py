"""Shared fixtures: raw spreadsheet rows and a fixed evaluation date."""
from datetime import date

import pytest

from student_dashboard.data.normalization import normalize_records

AS_OF = date(2024, 6, 15)


def make_row(columns=None):
    """Build a complete raw row; `columns` maps column labels to replacement values."""
    row = {
        "Nome": "Ana Souza",
        "CPF": "123.456.789-00",
        "Curso": "Engenharia",
        "Turma": "2024A",
        "Status Inscrição": "Cursando",
        "Data Início": "15/01/2024",
        "Financeiro": "OK",
        "Avaliação": "OK",
        "Tempo mínimo": "X",
        "Documentos": "OK",
        "Disciplinas": "6/12",
        "Cobranças": "5/12",
        "Data Solic. Digital": "Não Solicitado",
        "Tipo Cert. Digital": "Não Solicitado",
        "Status Cert. Digital": "",
        "Data Solic. Impresso": "Não Solicitado",
        "Tipo Cert. Impresso": "Não Solicitado",
        "Status Cert. Impresso": "",
    }
    row.update(columns or {})
    return row


@pytest.fixture
def as_of():
    return AS_OF


@pytest.fixture
def raw_rows():
    """Four students across two courses with a mix of payment standings."""
    return [
        make_row(),
        make_row(columns={
            "Nome": "Bruno Lima",
            "CPF": "987.654.321-00",
            "Curso": "Direito",
            "Turma": "2023B",
            "Status Inscrição": "Formado",
            "Data Início": "2023-02-01",
            "Financeiro": "X",
            "Documentos": "X",
            "Disciplinas": "12/12",
            "Cobranças": "12/12",
            "Data Solic. Digital": "10/06/2024",
            "Tipo Cert. Digital": "Conclusão",
            "Status Cert. Digital": "Emitido",
        }),
        make_row(columns={
            "Nome": "Carla Dias",
            "CPF": "111.222.333-44",
            "Turma": "2023B",
            "Status Inscrição": "Bloqueada",
            "Data Início": "15/08/2023",
            "Financeiro": "X",
            "Disciplinas": "3/12",
            "Cobranças": "0/12",
            "Data Solic. Impresso": "20/04/2024",
            "Tipo Cert. Impresso": "Histórico",
            "Status Cert. Impresso": "Pendente",
        }),
        make_row(columns={
            "Nome": "Diego Melo",
            "CPF": "555.666.777-88",
            "Status Inscrição": "Trancada",
            "Data Início": "Não encontrado",
            "Avaliação": "-",
            "Documentos": "",
            "Disciplinas": "abc",
            "Cobranças": "",
        }),
    ]


@pytest.fixture
def records(raw_rows):
    return normalize_records(raw_rows)
