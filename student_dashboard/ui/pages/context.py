from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Tuple

from student_dashboard.data.filters import FilterCriteria
from student_dashboard.data.loader import LoadResult
from student_dashboard.data.schema import StudentRecord


@dataclass
class PageContext:
    load_result: LoadResult
    records: Tuple[StudentRecord, ...]
    filters: FilterCriteria
    as_of: date
