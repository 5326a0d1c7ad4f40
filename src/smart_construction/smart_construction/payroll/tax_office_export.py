from __future__ import annotations

import io
from datetime import date
from typing import Sequence

import pandas as pd
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from ..core.exceptions import ValidationError
from .model import PersonnelHistory

SHEET_NAME = "세무서제출자료"
TITLE = "세무서 제출 자료"
HEADERS = ["번호", "이름", "주민등록번호", "본봉"]
COLUMN_WIDTHS = [8, 12, 18, 15]
NUMBER_FORMAT = "#,##0"
XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

_thin = Side(style="thin", color="000000")
_border = Border(top=_thin, bottom=_thin, left=_thin, right=_thin)
_center = Alignment(horizontal="center", vertical="center")
_right = Alignment(horizontal="right", vertical="center")


def _fill(rgb: str) -> PatternFill:
    return PatternFill(start_color=rgb, end_color=rgb, fill_type="solid")


def export_filename(start: date, end: date) -> str:
    return f"세무서제출자료_{start.isoformat()}_{end.isoformat()}.xlsx"


def build_tax_office_workbook(history: Sequence[PersonnelHistory], start: date, end: date) -> io.BytesIO:
    """세무서 제출 자료: 번호/이름/주민등록번호/본봉 with a title, the period and a 합계 row."""
    if not history:
        raise ValidationError("다운로드할 데이터가 없습니다. 먼저 조회해주세요.")

    df = pd.DataFrame(
        [
            {"번호": i, "이름": h.name, "주민등록번호": h.id_number, "본봉": h.total_amount}
            for i, h in enumerate(history, start=1)
        ],
        columns=HEADERS,
    )
    total = float(df["본봉"].sum())

    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        # header lands on row 3, data from row 4
        df.to_excel(writer, index=False, sheet_name=SHEET_NAME, startrow=2)
        ws = writer.sheets[SHEET_NAME]
        last_col = len(HEADERS)

        ws.cell(row=1, column=1, value=TITLE)
        ws.merge_cells(start_row=1, start_column=1, end_row=1, end_column=last_col)
        title = ws.cell(row=1, column=1)
        title.font = Font(bold=True, size=16, color="006400")
        title.alignment = _center
        title.fill = _fill("E8F5E9")

        ws.cell(row=2, column=1, value=f"기간 : {start.isoformat()} ~ {end.isoformat()}")
        ws.merge_cells(start_row=2, start_column=1, end_row=2, end_column=last_col)
        period = ws.cell(row=2, column=1)
        period.font = Font(size=11)
        period.alignment = _center

        for col in range(1, last_col + 1):
            cell = ws.cell(row=3, column=col)
            cell.font = Font(bold=True, size=11)
            cell.alignment = _center
            cell.fill = _fill("FFFF00")
            cell.border = _border

        first_data_row = 4
        for row in range(first_data_row, first_data_row + len(df)):
            for col in range(1, last_col + 1):
                cell = ws.cell(row=row, column=col)
                cell.font = Font(size=10)
                cell.border = _border
                cell.alignment = _center
            amount = ws.cell(row=row, column=last_col)
            amount.alignment = _right
            amount.number_format = NUMBER_FORMAT

        total_row = first_data_row + len(df)
        ws.cell(row=total_row, column=3, value="합계")
        ws.cell(row=total_row, column=4, value=total)
        for col in range(1, last_col + 1):
            cell = ws.cell(row=total_row, column=col)
            cell.fill = _fill("E3F2FD")
            cell.border = _border
            cell.alignment = _center
            cell.font = Font(bold=True, size=11)
        total_cell = ws.cell(row=total_row, column=last_col)
        total_cell.font = Font(bold=True, size=11, color="1565C0")
        total_cell.alignment = _right
        total_cell.number_format = NUMBER_FORMAT

        for index, width in enumerate(COLUMN_WIDTHS, start=1):
            ws.column_dimensions[get_column_letter(index)].width = width
        ws.row_dimensions[1].height = 28
        ws.row_dimensions[2].height = 22
        ws.row_dimensions[3].height = 22

    output.seek(0)
    return output
