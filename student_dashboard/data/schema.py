"""
Typed records and aggregate result types shared by the data pipeline.

Only the normalizer sees raw spreadsheet rows; everything downstream works on
`StudentRecord` and the frozen result dataclasses below.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

# Column labels of the enrollment export
COL_NAME = "Nome"
COL_CPF = "CPF"
COL_COURSE = "Curso"
COL_COHORT = "Turma"
COL_ENROLLMENT_STATUS = "Status Inscrição"
COL_START_DATE = "Data Início"
COL_FINANCIAL = "Financeiro"
COL_EVALUATION = "Avaliação"
COL_MINIMUM_TIME = "Tempo mínimo"
COL_DOCUMENTS = "Documentos"
COL_DISCIPLINES = "Disciplinas"
COL_PAYMENTS = "Cobranças"
COL_DIGITAL_REQUEST_DATE = "Data Solic. Digital"
COL_DIGITAL_TYPE = "Tipo Cert. Digital"
COL_DIGITAL_STATUS = "Status Cert. Digital"
COL_PRINTED_REQUEST_DATE = "Data Solic. Impresso"
COL_PRINTED_TYPE = "Tipo Cert. Impresso"
COL_PRINTED_STATUS = "Status Cert. Impresso"

RAW_COLUMNS: Tuple[str, ...] = (
    COL_NAME,
    COL_CPF,
    COL_COURSE,
    COL_COHORT,
    COL_ENROLLMENT_STATUS,
    COL_START_DATE,
    COL_FINANCIAL,
    COL_EVALUATION,
    COL_MINIMUM_TIME,
    COL_DOCUMENTS,
    COL_DISCIPLINES,
    COL_PAYMENTS,
    COL_DIGITAL_REQUEST_DATE,
    COL_DIGITAL_TYPE,
    COL_DIGITAL_STATUS,
    COL_PRINTED_REQUEST_DATE,
    COL_PRINTED_TYPE,
    COL_PRINTED_STATUS,
)

NOT_REQUESTED = "Não Solicitado"
NOT_FOUND = "Não encontrado"

STATUS_OK = 1
STATUS_PENDING = 0

# Pillar key -> (StudentRecord attribute, display label)
PILLARS: Dict[str, Tuple[str, str]] = {
    "financial": ("financial_status", "Situação Financeira"),
    "evaluation": ("evaluation_status", "Avaliação"),
    "minimum_time": ("minimum_time_status", "Tempo Mínimo"),
    "documents": ("documents_status", "Documentos"),
}


class FinancialSituation(str, Enum):
    CURRENT = "Em dia"
    PAID_OFF = "Quitado"
    DELINQUENT = "Inadimplente"
    NOT_APPLICABLE = "N/A"


@dataclass(frozen=True)
class StudentRecord:
    name: str = ""
    cpf: str = ""
    course: str = ""
    cohort: str = ""
    enrollment_status: str = ""
    start_date_text: str = ""
    financial_text: str = ""
    evaluation_text: str = ""
    minimum_time_text: str = ""
    documents_text: str = ""
    disciplines_text: str = ""
    payments_text: str = ""
    digital_cert_request_text: str = ""
    digital_cert_type: str = ""
    digital_cert_status: str = ""
    printed_cert_request_text: str = ""
    printed_cert_type: str = ""
    printed_cert_status: str = ""
    # Derived values
    start_date: Optional[date] = None
    digital_cert_request_date: Optional[date] = None
    printed_cert_request_date: Optional[date] = None
    financial_status: Optional[int] = None
    evaluation_status: Optional[int] = None
    minimum_time_status: Optional[int] = None
    documents_status: Optional[int] = None
    discipline_progress: Optional[float] = None
    payment_progress: Optional[float] = None
    source: Tuple[Tuple[str, Any], ...] = field(default=(), repr=False)

    def as_raw(self) -> Dict[str, Any]:
        """Return the row exactly as it was handed to the normalizer."""
        return dict(self.source)


@dataclass(frozen=True)
class StatusMetric:
    ok: int = 0
    error: int = 0
    na: int = 0
    ok_pct: float = 0.0
    error_pct: float = 0.0
    na_pct: float = 0.0

    @property
    def counts(self) -> Dict[str, int]:
        return {"ok": self.ok, "error": self.error, "na": self.na}

    @property
    def percentages(self) -> Dict[str, float]:
        return {"ok": self.ok_pct, "error": self.error_pct, "na": self.na_pct}

    def to_dict(self) -> Dict[str, Any]:
        return {"counts": self.counts, "percentages": self.percentages}


@dataclass(frozen=True)
class CohortProgress:
    total: float
    count: int
    average: float


@dataclass(frozen=True)
class DisciplineProgress:
    average: float = 0.0
    by_course_cohort: Mapping[Tuple[str, str], CohortProgress] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "average": self.average,
            "by_course_cohort": {
                f"{course} - {cohort}": asdict(progress)
                for (course, cohort), progress in self.by_course_cohort.items()
            },
        }


@dataclass(frozen=True)
class FinancialBreakdown:
    current: int = 0
    delinquent: int = 0
    paid_off: int = 0
    not_applicable: int = 0
    percent_current: float = 0.0
    percent_delinquent: float = 0.0

    @property
    def valid_total(self) -> int:
        return self.current + self.delinquent + self.paid_off

    def count_for(self, situation: FinancialSituation) -> int:
        return {
            FinancialSituation.CURRENT: self.current,
            FinancialSituation.DELINQUENT: self.delinquent,
            FinancialSituation.PAID_OFF: self.paid_off,
            FinancialSituation.NOT_APPLICABLE: self.not_applicable,
        }[situation]

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["valid_total"] = self.valid_total
        return data


@dataclass(frozen=True)
class CertificateRequests:
    digital: Mapping[int, int] = field(default_factory=dict)
    printed: Mapping[int, int] = field(default_factory=dict)

    def total(self, window_days: int) -> int:
        return self.digital.get(window_days, 0) + self.printed.get(window_days, 0)

    def to_dict(self) -> Dict[str, Any]:
        windows = sorted(set(self.digital) | set(self.printed))
        return {
            "digital": dict(self.digital),
            "printed": dict(self.printed),
            "total": {days: self.total(days) for days in windows},
        }


@dataclass(frozen=True)
class KPIs:
    total_students: int = 0
    percent_current: float = 0.0
    percent_delinquent: float = 0.0
    avg_discipline_progress: float = 0.0
    percent_documents_ok: float = 0.0
    cert_requests_7d: int = 0
    cert_requests_30d: int = 0
    cert_requests_90d: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class FilterOptions:
    courses: Tuple[str, ...] = ()
    cohorts: Tuple[str, ...] = ()
    enrollment_statuses: Tuple[str, ...] = ()
    certificate_types: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {key: list(values) for key, values in asdict(self).items()}


@dataclass(frozen=True)
class SummaryReport:
    generated_at: datetime
    total_students: int
    kpis: KPIs
    status_summary: Mapping[str, int]
    course_distribution: Mapping[str, int]
    cohort_distribution: Mapping[str, int]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generated_at": self.generated_at.isoformat(),
            "total_students": self.total_students,
            "kpis": self.kpis.to_dict(),
            "status_summary": dict(self.status_summary),
            "course_distribution": dict(self.course_distribution),
            "cohort_distribution": dict(self.cohort_distribution),
        }
