import pytest

from requirements_parser.config import ExtractorConfig
from requirements_parser.heuristics import (
    DEFAULT_DOCUMENT_TITLE,
    combine_requirements,
    extract_definitions,
    extract_fees,
    extract_formulas,
    extract_requirements,
    extract_tables,
)

REGULATION = """社宅管理規程
第1条（定義）
「住宅」とは、社員が居住する建物をいう。
『扶養家族』とは、社員の収入により生計を維持する者をいう。
第2条（使用料）
社宅の使用料は、家賃の2割とする。
第3条（所管）
この規程の所管部署は、人事部とする。
第4条（手当）
住宅手当は、月額10,000円とする。
別表1 家賃限度額
1級    100000
2級    80000
付則
この規程は2024年4月1日から施行する。
"""


def test_definition_with_quoted_term():
    items = extract_definitions("「住宅」とは、社員が居住する建物をいう。")

    assert len(items) == 1
    assert items[0].category == "定義"
    assert items[0].name == "住宅"
    assert items[0].description == "社員が居住する建物をいう"
    assert items[0].input_type == "text"


def test_definitions_accept_double_brackets_and_ascii_comma():
    items = extract_definitions("『赴任』とは,勤務地へ移動することをいう。")

    assert [(item.name, item.description) for item in items] == [("赴任", "勤務地へ移動することをいう")]


def test_formula_kept_only_when_description_is_numeric():
    formulas = extract_formulas(REGULATION)
    names = [formula.name for formula in formulas]

    assert "社宅の使用料" in names
    assert "この規程の所管部署" not in names

    usage_fee = next(f for f in formulas if f.name == "社宅の使用料")
    assert usage_fee.description == "家賃の2割"
    assert usage_fee.formula == "家賃の2 * 0.1"


def test_formula_variables_come_from_description():
    formulas = extract_formulas("本人負担額は、基準額、負担率、基準額の積とする。")

    assert len(formulas) == 1
    assert formulas[0].variables == ["基準額", "負担率"]


def test_formula_name_length_is_bounded():
    assert extract_formulas("額は、3割とする。") == []


def test_fee_amount_is_half_width_without_separators():
    fees = extract_fees("住宅手当は、月額10,000円とする。赴任旅費を、実費で２０，０００円まで支給する。")

    assert [(fee.name, fee.amount) for fee in fees] == [("住宅手当", "10000"), ("赴任旅費", "20000")]
    assert fees[0].description == "月額10,000円とする"


def test_fee_without_amount():
    fees = extract_fees("引越費は、会社が負担する。")

    assert len(fees) == 1
    assert fees[0].name == "引越費"
    assert fees[0].amount is None


def test_table_stops_at_supplementary_provisions():
    text = "別表1 家賃限度額\n1級 100000\n2級 80000\n付則\nこの規程は2024年4月1日から施行する。"

    tables = extract_tables(text)

    assert len(tables) == 1
    assert tables[0].title == "別表1 家賃限度額"
    assert tables[0].headers == []
    assert len(tables[0].rows) == 2
    assert not any("施行" in cell for row in tables[0].rows for cell in row)


def test_table_cells_split_on_wide_gaps_and_tabs():
    text = "別表2 赴任手当\n区分    単身\t家族帯同\n国内  30000  50000\n\n以上"

    tables = extract_tables(text)

    assert tables[0].rows == [["区分", "単身", "家族帯同"], ["国内", "30000", "50000"]]


def test_consecutive_tables_are_separated():
    text = "別表1 等級\nA  1\n別表2 地区\n東京  甲\n"

    tables = extract_tables(text)

    assert [table.title for table in tables] == ["別表1 等級", "別表2 地区"]
    assert tables[0].rows == [["A", "1"]]
    assert tables[1].rows == [["東京", "甲"]]


def test_custom_column_delimiter():
    tables = extract_tables("別表1 等級\n1級|100000\n", column_delimiter=r"\|")

    assert tables[0].rows == [["1級", "100000"]]


def test_full_width_table_number_is_normalized():
    tables = extract_tables("別表１ 家賃限度額\n1級  100000\n")

    assert tables[0].title == "別表1 家賃限度額"


@pytest.mark.parametrize(
    "scan", [extract_definitions, extract_formulas, extract_fees, extract_tables]
)
def test_empty_text_yields_empty_collections(scan):
    assert scan("") == []


def test_extract_requirements_bundles_all_scans():
    result = extract_requirements(REGULATION)

    assert result.document_title == "社宅管理規程"
    assert [item.name for item in result.input_items] == ["住宅", "扶養家族"]
    assert any(f.name == "社宅の使用料" for f in result.formulas)
    assert any(fee.name == "住宅手当" and fee.amount == "10000" for fee in result.fees)
    assert len(result.tables) == 1
    assert result.tables[0].rows == [["1級", "100000"], ["2級", "80000"]]
    assert result.calculation_items == []
    assert result.other_requirements == []


def test_extract_requirements_on_empty_text():
    result = extract_requirements("")

    assert result.document_title == DEFAULT_DOCUMENT_TITLE
    assert result.input_items == []
    assert result.formulas == []
    assert result.fees == []
    assert result.tables == []


def test_extract_requirements_uses_configured_delimiter():
    config = ExtractorConfig(column_delimiter=r"\s+")

    result = extract_requirements("別表1 家賃限度額\n1級 100000\n", config=config)

    assert result.tables[0].rows == [["1級", "100000"]]


def test_combine_requirements_keeps_document_order():
    first = extract_requirements("社宅管理規程\n別表1 等級\n1級  100000")
    second = extract_requirements("第1条 社宅\n「住宅」とは、建物をいう。")

    combined = combine_requirements([first, second])

    assert combined.document_title == "社宅管理規程"
    assert combined.tables[0].rows == [["1級", "100000"]]
    assert [item.name for item in combined.input_items] == ["住宅"]


def test_combine_requirements_skips_default_titles():
    untitled = extract_requirements("")
    titled = extract_requirements("転勤取扱基準\n")

    assert combine_requirements([untitled, titled]).document_title == "転勤取扱基準"
    assert combine_requirements([]).document_title == DEFAULT_DOCUMENT_TITLE
