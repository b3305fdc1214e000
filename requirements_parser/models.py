"""Data models for requirements parser."""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Optional


class ExtractionMethod(str, Enum):
    """Which path produced the text of a ParsedDocument."""

    NATIVE = "native"
    VISION_FALLBACK = "vision-fallback"


@dataclass
class DocumentMetadata:
    page_count: int
    title: Optional[str] = None
    author: Optional[str] = None


@dataclass
class NativeExtractionResult:
    """Raw output of the PDF text layer."""

    text: str
    page_count: int
    title: Optional[str] = None
    author: Optional[str] = None


@dataclass
class ParsedDocument:
    """Text of one PDF, split into pages, tagged with its provenance."""

    raw_text: str
    pages: list[str]
    metadata: DocumentMetadata
    extraction_method: ExtractionMethod
    file_name: str = ""
    japanese_char_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["extraction_method"] = self.extraction_method.value
        return data


@dataclass
class RequirementItem:
    category: str
    name: str
    description: str
    input_type: Optional[str] = None
    required: Optional[bool] = None


@dataclass
class CalculationFormula:
    name: str
    description: str
    formula: str  # hint for human review, not a computable expression
    variables: list[str] = field(default_factory=list)
    conditions: Optional[list[str]] = None


@dataclass
class FeeItem:
    name: str
    description: str
    amount: Optional[str] = None  # half-width digits, separators stripped
    conditions: Optional[list[str]] = None


@dataclass
class TableData:
    title: str
    headers: list[str] = field(default_factory=list)
    rows: list[list[str]] = field(default_factory=list)


# Structured requirements, as returned by the hosted model


@dataclass
class InputField:
    name: str
    description: str = ""
    data_type: str = ""
    required: bool = False
    validation_rules: list[str] = field(default_factory=list)


@dataclass
class InputCategory:
    category: str
    items: list[InputField] = field(default_factory=list)


@dataclass
class CalculationRule:
    name: str
    description: str = ""
    formula: str = ""
    conditions: list[str] = field(default_factory=list)
    examples: list[str] = field(default_factory=list)


@dataclass
class FeeEntry:
    name: str
    description: str = ""
    amount: Optional[str] = None
    unit: Optional[str] = None
    conditions: list[str] = field(default_factory=list)


@dataclass
class FeeCategory:
    category: str
    items: list[FeeEntry] = field(default_factory=list)


@dataclass
class StructuredTable:
    title: str
    description: str = ""
    headers: list[str] = field(default_factory=list)
    rows: list[list[str]] = field(default_factory=list)


def _str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None]


def _opt_str(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def _str(value: Any) -> str:
    return _opt_str(value) or ""


def _flag(value: Any) -> bool:
    # The model sometimes quotes booleans
    return value is True or (isinstance(value, str) and value.strip().lower() == "true")


@dataclass
class AIExtractedRequirements:
    """Requirements model produced by the hosted model (or converted from heuristics)."""

    document_title: str = ""
    document_type: str = ""
    summary: str = ""
    input_items: list[InputCategory] = field(default_factory=list)
    calculation_rules: list[CalculationRule] = field(default_factory=list)
    fee_structure: list[FeeCategory] = field(default_factory=list)
    tables: list[StructuredTable] = field(default_factory=list)
    additional_notes: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AIExtractedRequirements":
        """Build from the model's camelCase JSON. Missing keys become empty values."""
        input_items = [
            InputCategory(
                category=_str(category.get("category")),
                items=[
                    InputField(
                        name=_str(item.get("name")),
                        description=_str(item.get("description")),
                        data_type=_str(item.get("dataType")),
                        required=_flag(item.get("required")),
                        validation_rules=_str_list(item.get("validationRules")),
                    )
                    for item in category.get("items") or []
                    if isinstance(item, dict)
                ],
            )
            for category in data.get("inputItems") or []
            if isinstance(category, dict)
        ]
        calculation_rules = [
            CalculationRule(
                name=_str(rule.get("name")),
                description=_str(rule.get("description")),
                formula=_str(rule.get("formula")),
                conditions=_str_list(rule.get("conditions")),
                examples=_str_list(rule.get("examples")),
            )
            for rule in data.get("calculationRules") or []
            if isinstance(rule, dict)
        ]
        fee_structure = [
            FeeCategory(
                category=_str(category.get("category")),
                items=[
                    FeeEntry(
                        name=_str(item.get("name")),
                        description=_str(item.get("description")),
                        amount=_opt_str(item.get("amount")),
                        unit=_opt_str(item.get("unit")),
                        conditions=_str_list(item.get("conditions")),
                    )
                    for item in category.get("items") or []
                    if isinstance(item, dict)
                ],
            )
            for category in data.get("feeStructure") or []
            if isinstance(category, dict)
        ]
        tables = [
            StructuredTable(
                title=_str(table.get("title")),
                description=_str(table.get("description")),
                headers=_str_list(table.get("headers")),
                rows=[_str_list(row) for row in table.get("rows") or []],
            )
            for table in data.get("tables") or []
            if isinstance(table, dict)
        ]
        return cls(
            document_title=_str(data.get("documentTitle")),
            document_type=_str(data.get("documentType")),
            summary=_str(data.get("summary")),
            input_items=input_items,
            calculation_rules=calculation_rules,
            fee_structure=fee_structure,
            tables=tables,
            additional_notes=_str_list(data.get("additionalNotes")),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ExtractedRequirements:
    """Candidate requirements found by the heuristic pattern scans."""

    document_title: str
    input_items: list[RequirementItem] = field(default_factory=list)
    calculation_items: list[RequirementItem] = field(default_factory=list)
    formulas: list[CalculationFormula] = field(default_factory=list)
    fees: list[FeeItem] = field(default_factory=list)
    other_requirements: list[str] = field(default_factory=list)
    tables: list[TableData] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def to_structured(self) -> AIExtractedRequirements:
        """Convert to the structured shape so both results render through one writer."""
        categories: dict[str, InputCategory] = {}
        for item in [*self.input_items, *self.calculation_items]:
            category = categories.setdefault(item.category, InputCategory(category=item.category))
            category.items.append(
                InputField(
                    name=item.name,
                    description=item.description,
                    data_type=item.input_type or "",
                    required=bool(item.required),
                )
            )

        fees = FeeCategory(
            category="費用",
            items=[
                FeeEntry(
                    name=fee.name,
                    description=fee.description,
                    amount=fee.amount,
                    unit="円" if fee.amount else None,
                    conditions=list(fee.conditions or []),
                )
                for fee in self.fees
            ],
        )

        return AIExtractedRequirements(
            document_title=self.document_title,
            document_type="",
            summary="",
            input_items=list(categories.values()),
            calculation_rules=[
                CalculationRule(
                    name=formula.name,
                    description=formula.description,
                    formula=formula.formula,
                    conditions=list(formula.conditions or []),
                )
                for formula in self.formulas
            ],
            fee_structure=[fees] if fees.items else [],
            tables=[
                StructuredTable(title=table.title, headers=list(table.headers), rows=[list(r) for r in table.rows])
                for table in self.tables
            ],
            additional_notes=list(self.other_requirements),
        )
