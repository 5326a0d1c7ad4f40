from __future__ import annotations

import logging
from datetime import date, timedelta

from flask import Flask, request

from ..common.datetime_utils import parse_iso_date
from ..common.responses import domain_error, fail, ok
from ..common.serialization import to_primitive
from ..core.constants import GENERIC_LOAD_ERROR
from ..core.exceptions import DomainError, ValidationError
from ..container import Container

logger = logging.getLogger(__name__)

DEFAULT_TREND_DAYS = 30


def _range(args) -> tuple[date, date]:
    """Defaults to the last 30 days ending today."""
    try:
        end = parse_iso_date(args["end"]) if args.get("end") else date.today()
        start = parse_iso_date(args["start"]) if args.get("start") else end - timedelta(days=DEFAULT_TREND_DAYS - 1)
    except ValueError:
        raise ValidationError("조회 기간을 확인해주세요 (YYYY-MM-DD).")
    return start, end


def register(app: Flask, container: Container) -> None:
    service = container.dashboard_service

    @app.route("/api/dashboard/summary", methods=["GET"], endpoint="dashboard_summary")
    def dashboard_summary():
        try:
            summary = service.summary()
            body = to_primitive(summary)
            body["support"]["total"] = summary.support.total
            return ok(body)
        except Exception:
            logger.exception("Dashboard data load failed")
            return fail(GENERIC_LOAD_ERROR, 500)

    @app.route("/api/dashboard/man-days", methods=["GET"], endpoint="dashboard_man_days")
    def dashboard_man_days():
        """Query: start, end, group=site|team."""
        try:
            start, end = _range(request.args)
            if request.args.get("group") == "team":
                rows = service.man_days_by_team(start, end)
            else:
                rows = service.man_days_by_site(start, end)
            return ok(rows)
        except DomainError as e:
            return domain_error(e)
        except Exception:
            logger.exception("Failed to aggregate man-days")
            return fail(GENERIC_LOAD_ERROR, 500)

    @app.route("/api/dashboard/trend", methods=["GET"], endpoint="dashboard_trend")
    def dashboard_trend():
        try:
            start, end = _range(request.args)
            return ok(service.daily_trend(start, end))
        except DomainError as e:
            return domain_error(e)
        except Exception:
            logger.exception("Failed to build daily trend")
            return fail(GENERIC_LOAD_ERROR, 500)
