from __future__ import annotations

import logging
from datetime import date

from flask import Flask, request, send_file

from ..common.datetime_utils import parse_iso_date
from ..common.responses import domain_error, fail, ok
from ..core.constants import GENERIC_LOAD_ERROR, GENERIC_SAVE_ERROR
from ..core.exceptions import DomainError, ValidationError
from ..container import Container
from .advance_service import advance_from_dict
from .calculator.team_labor_cost_calculator import CalculationOptions
from .config_model import DeductionItem
from .config_service import insurance_from_percent, tax_rate_from_percent
from .deductions import format_currency, format_rate_as_percent
from .model import ProcessedPayrollRow
from .tax_office_export import XLSX_MIMETYPE, build_tax_office_workbook, export_filename

logger = logging.getLogger(__name__)


def _year_month(args) -> tuple[int, int]:
    try:
        year = int(args.get("year", ""))
        month = int(args.get("month", ""))
    except ValueError:
        raise ValidationError("년/월을 확인해주세요.")
    if not 1 <= month <= 12:
        raise ValidationError("년/월을 확인해주세요.")
    return year, month


def _range(args) -> tuple[date, date]:
    try:
        return parse_iso_date(args.get("start", "")), parse_iso_date(args.get("end", ""))
    except ValueError:
        raise ValidationError("조회 기간을 확인해주세요 (YYYY-MM-DD).")


def _flag(value) -> bool:
    return str(value).lower() in ("1", "true", "on", "yes")


def split_threshold(value) -> int:
    """Whole man-days, at least 1; unparsable or non-finite input falls back to 1."""
    try:
        return max(1, int(float(value or 8)))
    except (TypeError, ValueError, OverflowError):
        return 1


def _processed_to_json(p: ProcessedPayrollRow) -> dict:
    return {
        "worker_id": p.row.worker_id,
        "name": p.row.name,
        "role": p.row.role,
        "salary_model": p.row.salary_model,
        "unit_price": p.row.unit_price,
        "gross_pay": p.row.gross_pay,
        "man_day": {
            "total": p.row.total_man_day,
            "reported": p.reported_days,
            "remaining": p.remaining_days,
        },
        "reported_gross": p.reported_gross,
        "remaining_gross": p.remaining_gross,
        "tax": {"income": p.tax.income, "resident": p.tax.resident, "total": p.tax.total},
        "insurance": {
            "pension": p.insurance.pension,
            "health": p.insurance.health,
            "care": p.insurance.care,
            "employment": p.insurance.employment,
            "total": p.insurance.total,
        },
        "deductions": p.deduction_details,
        "advance_deduction": p.advance_deduction,
        "total_deductions": p.total_deductions,
        "net_pay": p.net_pay,
    }


def register(app: Flask, container: Container) -> None:
    payroll = container.payroll_service
    config_service = container.payroll_config_service
    advances = container.advance_payment_service

    @app.route("/api/payroll/data", methods=["GET"], endpoint="payroll_data")
    def payroll_data():
        try:
            year, month = _year_month(request.args)
            rows = payroll.get_payroll_data(
                year,
                month,
                team_id=request.args.get("team_id") or None,
                site_id=request.args.get("site_id") or None,
            )
            return ok(rows)
        except DomainError as e:
            return domain_error(e)
        except Exception:
            logger.exception("Failed to load payroll data")
            return fail(GENERIC_LOAD_ERROR, 500)

    @app.route("/api/payroll/team-invoice", methods=["GET"], endpoint="team_labor_cost_invoice")
    def team_labor_cost_invoice():
        """Query: year, month, team_id, split=1, threshold=8, insurance=1, advances=1."""
        try:
            year, month = _year_month(request.args)
            options = CalculationOptions(
                split_mode=_flag(request.args.get("split")),
                split_threshold=split_threshold(request.args.get("threshold")),
                insurance_mode=_flag(request.args.get("insurance")),
            )
            invoice = payroll.build_team_invoice(
                year,
                month,
                team_id=request.args.get("team_id") or None,
                options=options,
                apply_advances=_flag(request.args.get("advances", "1")),
            )
            return ok(
                {
                    "year": invoice.year,
                    "month": invoice.month,
                    "team_id": invoice.team_id,
                    "options": invoice.options,
                    "config": invoice.config,
                    "rows": [_processed_to_json(r) for r in invoice.rows],
                    "totals": invoice.totals,
                }
            )
        except DomainError as e:
            return domain_error(e)
        except Exception:
            logger.exception("Failed to build labor cost invoice")
            return fail(GENERIC_LOAD_ERROR, 500)

    @app.route("/api/payroll/payment-draft", methods=["GET"], endpoint="payment_draft")
    def payment_draft():
        try:
            year, month = _year_month(request.args)
            draft = payroll.payment_draft(year, month, team_id=request.args.get("team_id") or None)
            insurance = draft.config.insurance
            return ok(
                {
                    "year": draft.year,
                    "month": draft.month,
                    "team_id": draft.team_id,
                    "rates": {
                        "tax": format_rate_as_percent(draft.config.tax_rate),
                        "pension": format_rate_as_percent(insurance.pension_rate),
                        "health": format_rate_as_percent(insurance.health_rate, 3),
                        "care_of_health": format_rate_as_percent(insurance.care_rate_of_health, 2),
                        "employment": format_rate_as_percent(insurance.employment_rate),
                    },
                    "lines": [
                        {
                            "worker_id": line.row.worker_id,
                            "name": line.row.name,
                            "gross_pay": line.row.gross_pay,
                            "deductions": line.deductions,
                            "total_deduction": line.deductions.total_deduction,
                            "net_pay": line.net_pay,
                            "net_pay_display": format_currency(line.net_pay),
                        }
                        for line in draft.lines
                    ],
                    "total_net_pay": draft.total_net_pay,
                    "total_net_pay_display": format_currency(draft.total_net_pay),
                }
            )
        except DomainError as e:
            return domain_error(e)
        except Exception:
            logger.exception("Failed to build payment draft")
            return fail(GENERIC_LOAD_ERROR, 500)

    @app.route("/api/payroll/config", methods=["GET"], endpoint="get_payroll_config")
    def get_payroll_config():
        try:
            return ok(config_service.get_config())
        except Exception:
            logger.exception("Failed to load payroll config")
            return fail(GENERIC_LOAD_ERROR, 500)

    @app.route("/api/payroll/config/tax-rate", methods=["PUT"], endpoint="update_tax_rate")
    def update_tax_rate():
        data = request.get_json(silent=True) or {}
        try:
            percent = data.get("percent")
            stored = config_service.update_tax_rate(tax_rate_from_percent(percent))
            return ok(stored, message=f"세금요율 {percent}% 가 저장되었습니다.")
        except DomainError as e:
            return domain_error(e)
        except Exception:
            logger.exception("Failed to save tax rate")
            return fail("세금요율 저장 중 오류가 발생했습니다.", 500)

    @app.route("/api/payroll/config/insurance", methods=["PUT"], endpoint="update_insurance_config")
    def update_insurance_config():
        """Body: {threshold_days, pension, health, care_of_health, employment} in percent."""
        data = request.get_json(silent=True) or {}
        try:
            insurance = insurance_from_percent(
                threshold_days=data.get("threshold_days"),
                pension=data.get("pension"),
                health=data.get("health"),
                care_of_health=data.get("care_of_health"),
                employment=data.get("employment"),
            )
            stored = config_service.update_insurance_config(insurance)
            return ok(stored, message="4대보험 요율이 저장되었습니다.")
        except DomainError as e:
            return domain_error(e)
        except Exception:
            logger.exception("Failed to save insurance config")
            return fail("4대보험 요율 저장 중 오류가 발생했습니다.", 500)

    @app.route("/api/payroll/config/deduction-items", methods=["PUT"], endpoint="update_deduction_items")
    def update_deduction_items():
        data = request.get_json(silent=True) or {}
        try:
            items = [
                DeductionItem(
                    id=str(i.get("id") or ""),
                    label=str(i.get("label") or ""),
                    order=i.get("order") or 0,
                    is_active=bool(i.get("is_active", True)),
                )
                for i in data.get("items") or []
            ]
            stored = config_service.update_deduction_items(items)
            return ok(stored, message="공제항목(공통) 설정이 저장되었습니다.")
        except DomainError as e:
            return domain_error(e)
        except Exception:
            logger.exception("Failed to save deduction config")
            return fail("공제항목 설정 저장 중 오류가 발생했습니다.", 500)

    @app.route("/api/payroll/config/deduction-items", methods=["POST"], endpoint="add_deduction_item")
    def add_deduction_item():
        data = request.get_json(silent=True) or {}
        try:
            return ok(config_service.add_deduction_item(data.get("label") or ""), status=201)
        except DomainError as e:
            return domain_error(e)
        except Exception:
            logger.exception("Failed to add deduction item")
            return fail("공제항목 설정 저장 중 오류가 발생했습니다.", 500)

    @app.route("/api/payroll/advances", methods=["GET"], endpoint="list_advances")
    def list_advances():
        try:
            year, month = _year_month(request.args)
            return ok(advances.list_advances(year, month, request.args.get("team_id") or None))
        except DomainError as e:
            return domain_error(e)
        except Exception:
            logger.exception("Failed to load advance payments")
            return fail("가불 내역을 불러오는데 실패했습니다.", 500)

    @app.route("/api/payroll/advances", methods=["PUT"], endpoint="save_advance")
    def save_advance():
        data = request.get_json(silent=True) or {}
        try:
            payment_id = advances.save(advance_from_dict(data))
            return ok({"id": payment_id}, message="저장되었습니다.")
        except DomainError as e:
            return domain_error(e)
        except Exception:
            logger.exception("Failed to save advance payment")
            return fail(GENERIC_SAVE_ERROR, 500)

    @app.route("/api/payroll/advances/<payment_id>", methods=["DELETE"], endpoint="delete_advance")
    def delete_advance(payment_id: str):
        try:
            if not advances.delete(payment_id):
                return fail("가불 내역을 찾을 수 없습니다.", 404)
            return ok(message="삭제되었습니다.")
        except Exception:
            logger.exception("Failed to delete advance payment")
            return fail("삭제 중 오류가 발생했습니다.", 500)

    def _history(args):
        start, end = _range(args)
        history = payroll.personnel_history(
            start,
            end,
            team_id=args.get("team_id") or None,
            worker_id=args.get("worker_id") or None,
            salary_model=args.get("salary_model") or None,
            company_type=args.get("company_type") or None,
            descending=args.get("order") == "desc",
        )
        return start, end, history

    @app.route("/api/payroll/personnel-history", methods=["GET"], endpoint="personnel_history")
    def personnel_history():
        try:
            _, _, history = _history(request.args)
            return ok(history)
        except DomainError as e:
            return domain_error(e)
        except Exception:
            logger.exception("Failed to load personnel history")
            return fail("데이터 조회 중 오류가 발생했습니다.", 500)

    @app.route("/api/payroll/personnel-history/export", methods=["GET"], endpoint="export_tax_office")
    def export_tax_office():
        try:
            start, end, history = _history(request.args)
            output = build_tax_office_workbook(history, start, end)
            return send_file(
                output,
                download_name=export_filename(start, end),
                as_attachment=True,
                mimetype=XLSX_MIMETYPE,
            )
        except DomainError as e:
            return domain_error(e)
        except Exception:
            logger.exception("Failed to export tax office workbook")
            return fail("엑셀 생성 중 오류가 발생했습니다.", 500)
