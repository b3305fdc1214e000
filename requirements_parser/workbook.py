"""Render a requirements model into an .xlsx workbook with openpyxl."""

import io
from datetime import date
from typing import Any, Iterable, Optional

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from requirements_parser.config import WorkbookOptions
from requirements_parser.logger import Timer, get_logger
from requirements_parser.models import AIExtractedRequirements, StructuredTable

logger = get_logger(__name__)

XLSX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

_THIN = Side(style="thin")
BORDER = Border(top=_THIN, bottom=_THIN, left=_THIN, right=_THIN)

HEADER_FONT = Font(bold=True, size=14, color="FFFFFFFF")
HEADER_FILL = PatternFill(fill_type="solid", fgColor="FF4472C4")
HEADER_ALIGNMENT = Alignment(horizontal="center", vertical="center")

SUB_HEADER_FILL = PatternFill(fill_type="solid", fgColor="FFD9E2F3")
CELL_ALIGNMENT = Alignment(horizontal="left", vertical="top", wrap_text=True)

INPUT_HEADERS = ["No", "カテゴリ", "項目名", "説明", "データ型", "必須", "バリデーション"]
CALCULATION_HEADERS = ["No", "計算名", "説明", "計算式", "適用条件", "計算例"]
FEE_HEADERS = ["No", "カテゴリ", "費用名", "説明", "金額", "単位", "適用条件"]


def default_workbook_name(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"要件定義書_{today.isoformat()}.xlsx"


def _set_widths(sheet: Worksheet, widths: Iterable[float]) -> None:
    for index, width in enumerate(widths, start=1):
        sheet.column_dimensions[get_column_letter(index)].width = width


def _append_header(sheet: Worksheet, headers: list[str]) -> int:
    sheet.append(headers)
    row = sheet.max_row
    for cell in sheet[row]:
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = HEADER_ALIGNMENT
        cell.border = BORDER
    sheet.row_dimensions[row].height = 25
    return row


def _append_body(sheet: Worksheet, values: list[Any], height: Optional[float] = None) -> int:
    sheet.append(values)
    row = sheet.max_row
    for cell in sheet[row]:
        cell.alignment = CELL_ALIGNMENT
        cell.border = BORDER
    if height is not None:
        sheet.row_dimensions[row].height = height
    return row


def _lines(values: Optional[list[str]]) -> str:
    return "\n".join(values or [])


class RequirementsWorkbookWriter:
    """Writes the summary, input, calculation, fee, appendix and notes sheets."""

    def __init__(self, options: Optional[WorkbookOptions] = None):
        self.options = options or WorkbookOptions()

    def render(self, requirements: AIExtractedRequirements, today: Optional[date] = None) -> bytes:
        """Render ``requirements`` and return the workbook as bytes."""
        today = today or date.today()

        with Timer("workbook_render") as timer:
            workbook = Workbook()
            workbook.properties.creator = self.options.creator
            workbook.remove(workbook.active)

            self._summary_sheet(workbook, requirements, today)
            self._input_items_sheet(workbook, requirements)
            if self.options.include_formulas:
                self._calculation_sheet(workbook, requirements)
            self._fee_sheet(workbook, requirements)
            if self.options.include_tables:
                for index, table in enumerate(requirements.tables, start=1):
                    self._table_sheet(workbook, table, index)
            if self.options.include_notes and requirements.additional_notes:
                self._notes_sheet(workbook, requirements)

            buffer = io.BytesIO()
            workbook.save(buffer)

        logger.info(
            "Workbook rendered",
            extra_data={
                "sheets": len(workbook.sheetnames),
                "size_bytes": buffer.getbuffer().nbytes,
                "render_time_ms": timer.get_elapsed_ms(),
            },
        )
        return buffer.getvalue()

    def _summary_sheet(
        self, workbook: Workbook, requirements: AIExtractedRequirements, today: date
    ) -> None:
        sheet = workbook.create_sheet("概要")
        sheet.sheet_properties.tabColor = "4472C4"
        _set_widths(sheet, [20, 80])

        sheet.append(["要件定義書"])
        sheet["A1"].font = Font(bold=True, size=18)
        sheet.merge_cells("A1:B1")
        sheet.row_dimensions[1].height = 30
        sheet.append([])

        info = [
            ("ドキュメント名", requirements.document_title),
            ("種別", requirements.document_type),
            ("作成日", f"{today.year}/{today.month}/{today.day}"),
            ("概要", requirements.summary),
        ]
        for label, value in info:
            sheet.append([label, value])
            row = sheet.max_row
            sheet.cell(row=row, column=1).font = Font(bold=True)
            sheet.cell(row=row, column=1).fill = SUB_HEADER_FILL
            sheet.cell(row=row, column=2).alignment = Alignment(wrap_text=True)
            sheet.row_dimensions[row].height = 60 if label == "概要" else 25

        sheet.append([])
        sheet.append(["統計情報"])
        sheet.cell(row=sheet.max_row, column=1).font = Font(bold=True, size=14)

        stats = [
            ("入力項目数", sum(len(c.items) for c in requirements.input_items)),
            ("計算ルール数", len(requirements.calculation_rules)),
            ("費用項目数", sum(len(c.items) for c in requirements.fee_structure)),
            ("別表数", len(requirements.tables)),
        ]
        for label, count in stats:
            sheet.append([label, str(count)])
            sheet.cell(row=sheet.max_row, column=1).font = Font(bold=True)

    def _input_items_sheet(self, workbook: Workbook, requirements: AIExtractedRequirements) -> None:
        sheet = workbook.create_sheet("入力項目")
        sheet.sheet_properties.tabColor = "70AD47"
        _set_widths(sheet, [5, 15, 25, 40, 12, 8, 30])
        _append_header(sheet, INPUT_HEADERS)

        number = 1
        for category in requirements.input_items:
            for item in category.items:
                _append_body(
                    sheet,
                    [
                        number,
                        category.category,
                        item.name,
                        item.description,
                        item.data_type,
                        "○" if item.required else "",
                        _lines(item.validation_rules),
                    ],
                    height=max(20, len(item.validation_rules or [""]) * 15),
                )
                number += 1

        sheet.auto_filter.ref = f"A1:G{sheet.max_row}"

    def _calculation_sheet(self, workbook: Workbook, requirements: AIExtractedRequirements) -> None:
        sheet = workbook.create_sheet("算定方法")
        sheet.sheet_properties.tabColor = "FFC000"
        _set_widths(sheet, [5, 25, 40, 35, 30, 30])
        _append_header(sheet, CALCULATION_HEADERS)

        for number, rule in enumerate(requirements.calculation_rules, start=1):
            max_lines = max(len(rule.conditions or [""]), len(rule.examples or [""]))
            _append_body(
                sheet,
                [
                    number,
                    rule.name,
                    rule.description,
                    rule.formula,
                    _lines(rule.conditions),
                    _lines(rule.examples),
                ],
                height=max(25, max_lines * 15),
            )

    def _fee_sheet(self, workbook: Workbook, requirements: AIExtractedRequirements) -> None:
        sheet = workbook.create_sheet("費用項目")
        sheet.sheet_properties.tabColor = "5B9BD5"
        _set_widths(sheet, [5, 15, 25, 40, 15, 10, 30])
        _append_header(sheet, FEE_HEADERS)

        number = 1
        for category in requirements.fee_structure:
            for item in category.items:
                _append_body(
                    sheet,
                    [
                        number,
                        category.category,
                        item.name,
                        item.description,
                        item.amount or "",
                        item.unit or "",
                        _lines(item.conditions),
                    ],
                    height=max(20, len(item.conditions or [""]) * 15),
                )
                number += 1

        sheet.auto_filter.ref = f"A1:G{sheet.max_row}"

    def _table_sheet(self, workbook: Workbook, table: StructuredTable, index: int) -> None:
        sheet = workbook.create_sheet(f"別表{index}")
        sheet.sheet_properties.tabColor = "7030A0"

        column_count = max([len(table.headers), *(len(row) for row in table.rows), 1])
        last_column = get_column_letter(column_count)

        sheet.append([table.title])
        sheet["A1"].font = Font(bold=True, size=14)
        if column_count > 1:
            sheet.merge_cells(f"A1:{last_column}1")

        if table.description:
            sheet.append([table.description])
            sheet.cell(row=sheet.max_row, column=1).font = Font(italic=True)
            if column_count > 1:
                sheet.merge_cells(f"A{sheet.max_row}:{last_column}{sheet.max_row}")

        sheet.append([])

        if table.headers:
            _append_header(sheet, list(table.headers))
        for row in table.rows:
            _append_body(sheet, list(row))

        for column in range(column_count):
            header_length = len(table.headers[column]) if column < len(table.headers) else 10
            longest = max(
                [header_length, *(len(row[column]) for row in table.rows if column < len(row))]
            )
            sheet.column_dimensions[get_column_letter(column + 1)].width = min(max(longest + 2, 10), 50)

    def _notes_sheet(self, workbook: Workbook, requirements: AIExtractedRequirements) -> None:
        sheet = workbook.create_sheet("補足事項")
        sheet.sheet_properties.tabColor = "808080"
        _set_widths(sheet, [5, 100])
        _append_header(sheet, ["No", "補足事項"])

        for number, note in enumerate(requirements.additional_notes, start=1):
            _append_body(sheet, [number, note], height=max(25, -(-len(note) // 50) * 15))
