"""
Aggregate metrics over a collection of normalized student records.

All functions are pure: they take the records plus an explicit `as_of` date
where time matters and return frozen result objects. An empty collection
yields zero-valued results.
"""

from __future__ import annotations

from collections import Counter
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Sequence, Tuple

from student_dashboard.data.financial import record_financial_situation
from student_dashboard.data.schema import (
    PILLARS,
    STATUS_OK,
    STATUS_PENDING,
    CertificateRequests,
    CohortProgress,
    DisciplineProgress,
    FinancialBreakdown,
    FinancialSituation,
    KPIs,
    StatusMetric,
    StudentRecord,
    SummaryReport,
)

CERTIFICATE_WINDOWS: Tuple[int, ...] = (7, 30, 90)
TRACKED_ENROLLMENT_STATUSES = ("Formado", "Cursando", "Cancelada", "Bloqueada")


def _pct(count: int, total: int) -> float:
    return count / total * 100 if total > 0 else 0.0


def calculate_status_metrics(records: Sequence[StudentRecord], pillar: str) -> StatusMetric:
    """Tally OK / pending / N/A for one pillar; percentages use the full record count."""
    if pillar not in PILLARS:
        raise KeyError(f"Unknown pillar: {pillar}")
    attribute, _ = PILLARS[pillar]

    ok = error = na = 0
    for record in records:
        value = getattr(record, attribute)
        if value == STATUS_OK:
            ok += 1
        elif value == STATUS_PENDING:
            error += 1
        else:
            na += 1

    total = len(records)
    return StatusMetric(
        ok=ok,
        error=error,
        na=na,
        ok_pct=_pct(ok, total),
        error_pct=_pct(error, total),
        na_pct=_pct(na, total),
    )


def calculate_all_status_metrics(records: Sequence[StudentRecord]) -> Dict[str, StatusMetric]:
    return {pillar: calculate_status_metrics(records, pillar) for pillar in PILLARS}


def calculate_discipline_progress(records: Iterable[StudentRecord]) -> DisciplineProgress:
    valid = [record for record in records if record.discipline_progress is not None]
    if not valid:
        return DisciplineProgress()

    average = sum(record.discipline_progress for record in valid) / len(valid)

    totals: Dict[Tuple[str, str], List[float]] = {}
    for record in valid:
        totals.setdefault((record.course, record.cohort), []).append(record.discipline_progress)

    by_course_cohort = {
        key: CohortProgress(total=sum(values), count=len(values), average=sum(values) / len(values))
        for key, values in totals.items()
    }
    return DisciplineProgress(average=average, by_course_cohort=by_course_cohort)


def calculate_financial_status(records: Iterable[StudentRecord], as_of: date) -> FinancialBreakdown:
    """Classify every record and derive the current / delinquent shares.

    "Quitado" counts as current; "N/A" is left out of the denominator.
    """
    tally = Counter(record_financial_situation(record, as_of) for record in records)
    current = tally[FinancialSituation.CURRENT]
    delinquent = tally[FinancialSituation.DELINQUENT]
    paid_off = tally[FinancialSituation.PAID_OFF]
    valid_total = current + delinquent + paid_off
    return FinancialBreakdown(
        current=current,
        delinquent=delinquent,
        paid_off=paid_off,
        not_applicable=tally[FinancialSituation.NOT_APPLICABLE],
        percent_current=_pct(current + paid_off, valid_total),
        percent_delinquent=_pct(delinquent, valid_total),
    )


def _in_window(requested: date, as_of: date, days: int) -> bool:
    return as_of - timedelta(days=days) <= requested <= as_of


def calculate_certificate_requests(
    records: Iterable[StudentRecord],
    as_of: date,
    windows: Sequence[int] = CERTIFICATE_WINDOWS,
) -> CertificateRequests:
    digital = {days: 0 for days in windows}
    printed = {days: 0 for days in windows}
    for record in records:
        for requested, counts in (
            (record.digital_cert_request_date, digital),
            (record.printed_cert_request_date, printed),
        ):
            if requested is None:
                continue
            for days in windows:
                if _in_window(requested, as_of, days):
                    counts[days] += 1
    return CertificateRequests(digital=digital, printed=printed)


def compute_kpis(records: Sequence[StudentRecord], as_of: date) -> KPIs:
    financial = calculate_financial_status(records, as_of)
    progress = calculate_discipline_progress(records)
    documents = calculate_status_metrics(records, "documents")
    certificates = calculate_certificate_requests(records, as_of)
    return KPIs(
        total_students=len(records),
        percent_current=financial.percent_current,
        percent_delinquent=financial.percent_delinquent,
        avg_discipline_progress=progress.average,
        percent_documents_ok=documents.ok_pct,
        cert_requests_7d=certificates.total(7),
        cert_requests_30d=certificates.total(30),
        cert_requests_90d=certificates.total(90),
    )


def generate_summary_report(
    records: Sequence[StudentRecord],
    kpis: KPIs,
    generated_at: datetime,
) -> SummaryReport:
    status_counts = Counter(record.enrollment_status for record in records)
    status_summary = {status.lower(): status_counts.get(status, 0) for status in TRACKED_ENROLLMENT_STATUSES}
    status_summary["outros"] = len(records) - sum(status_summary.values())

    course_distribution = Counter(record.course for record in records if record.course)
    cohort_distribution = Counter(record.cohort for record in records if record.cohort)

    return SummaryReport(
        generated_at=generated_at,
        total_students=len(records),
        kpis=kpis,
        status_summary=status_summary,
        course_distribution=dict(course_distribution),
        cohort_distribution=dict(cohort_distribution),
    )
