"""Pattern-based extraction of candidate requirements from Japanese regulations.

Every scan is a pure function over the full text. Scans share no state, never
raise, and return an empty list when nothing matches. Results are candidates
for human review: a name may appear once per scan that matched it.
"""

import re
from typing import Optional, Sequence

from requirements_parser.config import DEFAULT_COLUMN_DELIMITER, ExtractorConfig
from requirements_parser.formula import extract_variables, translate_formula
from requirements_parser.logger import get_logger
from requirements_parser.models import (
    CalculationFormula,
    ExtractedRequirements,
    FeeItem,
    RequirementItem,
    TableData,
)
from requirements_parser.text import first_line, strip_thousands_separators, to_half_width

logger = get_logger(__name__)

DEFAULT_DOCUMENT_TITLE = "要件定義書"
DEFINITION_CATEGORY = "定義"

# 「term」とは、description。
DEFINITION_PATTERN = re.compile("[「『]?([^「『」』\n]+)[」』]?とは[、,]([^。]+)")

# clause は、description とする
FORMULA_PATTERN = re.compile("([^。\n]{5,50})は[、,]([^。]+)とする")

# Descriptions without one of these are ordinary definitions, not calculations
NUMERIC_HINT_PATTERN = re.compile("[0-9０-９]|割|分|倍|円|率|額")

# ...費/料/金/手当 は(を)、description。
FEE_PATTERN = re.compile("([^。\n]+(?:費|料|金|手当))[はを][、,]([^。]+)")
AMOUNT_PATTERN = re.compile(r"([0-9０-９,，]+)\s*円")

# 別表N title \n body, up to the next appendix, supplementary provisions, 以上 or end of text
TABLE_PATTERN = re.compile(
    r"[「『]?別表\s*([0-9０-９]+)[」』]?\s*([^\n]+)\n(.*?)(?=[「『]?別表|付則|以\s*上|\Z)",
    re.DOTALL,
)


def extract_definitions(text: str) -> list[RequirementItem]:
    """Find ``「X」とは、Y。`` definitions."""
    return [
        RequirementItem(
            category=DEFINITION_CATEGORY,
            name=match.group(1).strip(),
            description=match.group(2).strip(),
            input_type="text",
        )
        for match in DEFINITION_PATTERN.finditer(text)
    ]


def extract_formulas(text: str) -> list[CalculationFormula]:
    """Find ``XはYとする`` clauses whose Y looks numeric."""
    formulas: list[CalculationFormula] = []
    for match in FORMULA_PATTERN.finditer(text):
        name = match.group(1).strip()
        description = match.group(2).strip()
        if not NUMERIC_HINT_PATTERN.search(description):
            continue
        formulas.append(
            CalculationFormula(
                name=name,
                description=description,
                formula=translate_formula(description),
                variables=extract_variables(description),
            )
        )
    return formulas


def extract_fees(text: str) -> list[FeeItem]:
    """Find fee, charge and allowance clauses, with the first yen amount if any."""
    fees: list[FeeItem] = []
    for match in FEE_PATTERN.finditer(text):
        description = match.group(2).strip()
        amount_match = AMOUNT_PATTERN.search(description)
        amount = (
            to_half_width(strip_thousands_separators(amount_match.group(1)))
            if amount_match
            else None
        )
        fees.append(
            FeeItem(
                name=match.group(1).strip(),
                description=description,
                amount=amount,
            )
        )
    return fees


def split_cells(line: str, column_delimiter: str = DEFAULT_COLUMN_DELIMITER) -> list[str]:
    return [cell.strip() for cell in re.split(column_delimiter, line) if cell and cell.strip()]


def extract_tables(
    text: str, column_delimiter: str = DEFAULT_COLUMN_DELIMITER
) -> list[TableData]:
    """Find ``別表N`` appendices and split their bodies into rows and cells.

    Headers are left empty: in free text a header row cannot be told apart
    from a data row.
    """
    tables: list[TableData] = []
    for match in TABLE_PATTERN.finditer(text):
        title = f"別表{to_half_width(match.group(1))} {match.group(2).strip()}"
        lines = [line for line in match.group(3).split("\n") if line.strip()]
        if not lines:
            continue
        tables.append(
            TableData(
                title=title,
                headers=[],
                rows=[split_cells(line, column_delimiter) for line in lines],
            )
        )
    return tables


def extract_requirements(
    text: str, config: Optional[ExtractorConfig] = None
) -> ExtractedRequirements:
    """Run every scan over ``text`` and bundle the candidates."""
    config = config or ExtractorConfig()

    result = ExtractedRequirements(
        document_title=first_line(text) or DEFAULT_DOCUMENT_TITLE,
        input_items=extract_definitions(text),
        formulas=extract_formulas(text),
        fees=extract_fees(text),
        tables=extract_tables(text, column_delimiter=config.column_delimiter),
    )

    logger.info(
        "Heuristic extraction completed",
        extra_data={
            "character_count": len(text),
            "definitions": len(result.input_items),
            "formulas": len(result.formulas),
            "fees": len(result.fees),
            "tables": len(result.tables),
        },
    )
    return result


def combine_requirements(results: Sequence[ExtractedRequirements]) -> ExtractedRequirements:
    """Concatenate per-document scan results in document order.

    The title is the first one taken from a document's own text.
    """
    titles = [r.document_title for r in results if r.document_title != DEFAULT_DOCUMENT_TITLE]
    combined = ExtractedRequirements(document_title=titles[0] if titles else DEFAULT_DOCUMENT_TITLE)
    for result in results:
        combined.input_items.extend(result.input_items)
        combined.calculation_items.extend(result.calculation_items)
        combined.formulas.extend(result.formulas)
        combined.fees.extend(result.fees)
        combined.other_requirements.extend(result.other_requirements)
        combined.tables.extend(result.tables)
    return combined
