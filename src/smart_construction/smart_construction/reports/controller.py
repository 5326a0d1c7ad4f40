from __future__ import annotations

import logging
from datetime import date

from flask import Flask, request

from ..common.datetime_utils import parse_iso_date
from ..common.responses import domain_error, fail, ok
from ..core.constants import GENERIC_LOAD_ERROR
from ..core.enums import AttendanceStatus
from ..core.exceptions import DomainError, ValidationError
from ..container import Container

logger = logging.getLogger(__name__)


def _parse_date(value: str | None) -> date:
    if not value:
        raise ValidationError("날짜를 입력해주세요.")
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError("날짜 형식이 올바르지 않습니다 (YYYY-MM-DD).")


def _team_ids(value) -> list[str]:
    if isinstance(value, list):
        return [str(v) for v in value if v]
    return [v for v in (value or "").split(",") if v]


def register(app: Flask, container: Container) -> None:
    reports = container.daily_report_service
    allocation = container.allocation_service

    @app.route("/api/reports", methods=["GET"], endpoint="list_reports")
    def list_reports():
        try:
            day = _parse_date(request.args.get("date"))
            return ok(reports.get_reports(day, team_id=request.args.get("team_id") or None))
        except DomainError as e:
            return domain_error(e)
        except Exception:
            logger.exception("Failed to list reports")
            return fail(GENERIC_LOAD_ERROR, 500)

    @app.route("/api/reports/range", methods=["GET"], endpoint="list_reports_by_range")
    def list_reports_by_range():
        try:
            start = _parse_date(request.args.get("start"))
            end = _parse_date(request.args.get("end"))
            rows = reports.get_reports_by_range(
                start,
                end,
                team_id=request.args.get("team_id") or None,
                site_id=request.args.get("site_id") or None,
            )
            return ok(rows)
        except DomainError as e:
            return domain_error(e)
        except Exception:
            logger.exception("Failed to list reports by range")
            return fail(GENERIC_LOAD_ERROR, 500)

    @app.route("/api/reports/last-date", methods=["GET"], endpoint="last_report_date")
    def last_report_date():
        try:
            last = reports.last_report_date(request.args.get("team_id") or None)
            return ok({"date": last.isoformat() if last else None})
        except Exception:
            logger.exception("Failed to load last report date")
            return fail(GENERIC_LOAD_ERROR, 500)

    @app.route("/api/reports/board", methods=["GET"], endpoint="report_board")
    def report_board():
        try:
            day = _parse_date(request.args.get("date"))
            board = allocation.load_board(day, team_ids=_team_ids(request.args.get("team_ids")))
            return ok(board.as_dict())
        except DomainError as e:
            return domain_error(e)
        except Exception:
            logger.exception("Failed to load allocation board")
            return fail(GENERIC_LOAD_ERROR, 500)

    @app.route("/api/reports/board/copy-previous", methods=["POST"], endpoint="copy_previous_day")
    def copy_previous_day():
        data = request.get_json(silent=True) or {}
        try:
            day = _parse_date(data.get("date"))
            board = allocation.load_board(day)
            applied = allocation.copy_previous_day(board, _team_ids(data.get("team_ids")))
            return ok(board.as_dict(), message=f"이전 일보 내용을 불러왔습니다. ({applied}명)")
        except DomainError as e:
            return domain_error(e)
        except Exception:
            logger.exception("Failed to copy previous day")
            return fail("전일 복사 중 오류가 발생했습니다.", 500)

    @app.route("/api/reports/board", methods=["POST"], endpoint="save_report_board")
    def save_report_board():
        """Body: {date, weather, site_work_content, writer_id, assignments: [...]}.

        Each assignment: {worker_id, site_id|null, man_day, status, work_content}.
        Workers left out stay unassigned.
        """
        data = request.get_json(silent=True) or {}
        try:
            day = _parse_date(data.get("date"))
            board = allocation.load_board(day)
            board.reset_all()
            board.weather = data.get("weather") or ""
            board.site_work_content = dict(data.get("site_work_content") or {})
            for a in data.get("assignments") or []:
                try:
                    status = AttendanceStatus(a["status"]) if a.get("status") else None
                except ValueError:
                    raise ValidationError("출역 상태가 올바르지 않습니다.")
                board.assign_worker(
                    str(a.get("worker_id") or ""),
                    a.get("site_id") or None,
                    man_day=a.get("man_day"),
                    status=status,
                    work_content=a.get("work_content"),
                )
            saved = allocation.save(board, writer_id=str(data.get("writer_id") or ""))
            return ok({"reports": saved}, message="일보가 저장되었습니다.")
        except DomainError as e:
            return domain_error(e)
        except Exception:
            logger.exception("Failed to save daily reports")
            return fail("저장에 실패했습니다.", 500)
