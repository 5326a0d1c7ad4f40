from __future__ import annotations

from enum import Enum


class CompanyType(str, Enum):
    """회사 구분."""

    UNSPECIFIED = "미지정"
    CONTRACTOR = "시공사"
    PARTNER = "협력사"
    CONSTRUCTION = "건설사"
    OTHER = "기타"


class CompanyStatus(str, Enum):
    """거래중 / 거래중지 / 폐업."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    ARCHIVED = "archived"


class TeamType(str, Enum):
    """팀 구분."""

    MAIN = "본팀"
    MANAGEMENT = "관리팀"
    SUB = "새끼팀"
    DIRECT = "직영팀"
    CONSTRUCTION = "시공팀"
    SUPPORT = "지원팀"
    SERVICE = "용역팀"


class TeamStatus(str, Enum):
    """협업중 / 대기 / 폐업."""

    ACTIVE = "active"
    WAITING = "waiting"
    CLOSED = "closed"


class SiteStatus(str, Enum):
    PLANNED = "planned"
    ACTIVE = "active"
    ONGOING = "ongoing"
    COMPLETED = "completed"


class SalaryModel(str, Enum):
    """급여 형태."""

    DAILY = "일급제"
    MONTHLY = "월급제"
    SUPPORT = "지원팀"
    SERVICE = "용역팀"
    ADVANCE = "가지급"


class WorkerStatus(str, Enum):
    """작업자 상태 (재직/퇴사/미배정).

    `active` is what the bulk edit form writes when the status box is checked
    without a choice.
    """

    EMPLOYED = "재직"
    RETIRED = "퇴사"
    UNASSIGNED = "미배정"
    ACTIVE = "active"


class AttendanceStatus(str, Enum):
    """일보 작업자 출역 상태."""

    ATTENDANCE = "attendance"
    ABSENT = "absent"
    HALF = "half"


class DiscrepancyType(str, Enum):
    TEAM = "team"
    SITE = "site"
    COMPANY = "company"


class PurposeType(str, Enum):
    """세금계산서 영수/청구 구분."""

    RECEIPT = "영수"
    CLAIM = "청구"


class InvoiceType(str, Enum):
    SALES = "sales"
    PURCHASE = "purchase"


class InvoiceStatus(str, Enum):
    DRAFT = "draft"
    ISSUED = "issued"
    RECEIVED = "received"
    CANCELLED = "cancelled"
