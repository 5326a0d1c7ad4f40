"""Example: use the service layer directly (no Flask).

Controllers stay thin; the monthly labor cost invoice below is the same call
the /api/payroll/team-invoice endpoint makes.
"""

import importlib

from config import get_settings_module

from src.smart_construction.smart_construction.container import build_container
from src.smart_construction.smart_construction.payroll.calculator.team_labor_cost_calculator import CalculationOptions


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    teams = container.team_service.list_payroll_teams()
    if not teams:
        print("no contractor teams")
        return

    invoice = container.payroll_service.build_team_invoice(
        2025,
        3,
        team_id=teams[0].id,
        options=CalculationOptions(split_mode=True, insurance_mode=True),
    )
    for row in invoice.rows:
        print(row.row.name, row.reported_days, row.remaining_days, row.tax.total, row.insurance.total, row.net_pay)
    print("total net pay:", invoice.totals.net_pay)


if __name__ == "__main__":
    main()
