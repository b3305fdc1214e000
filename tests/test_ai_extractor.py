import json

import pytest

from requirements_parser.ai_extractor import (
    AIRequirementsExtractor,
    combine_documents,
    parse_requirements_response,
)
from requirements_parser.exceptions import ModelCallError, ResponseParseError
from requirements_parser.models import (
    AIExtractedRequirements,
    DocumentMetadata,
    ExtractionMethod,
    ParsedDocument,
)

MODEL_JSON = {
    "documentTitle": "社宅管理規程",
    "documentType": "社宅規程",
    "summary": "社宅の貸与と使用料について定める。",
    "inputItems": [
        {
            "category": "入居者情報",
            "items": [
                {
                    "name": "等級",
                    "description": "社員の資格等級",
                    "dataType": "選択肢",
                    "required": True,
                    "validationRules": ["1級から5級"],
                }
            ],
        }
    ],
    "calculationRules": [
        {
            "name": "使用料",
            "description": "家賃の2割",
            "formula": "家賃 * 0.2",
            "conditions": ["社宅入居者"],
            "examples": ["家賃100000円の場合20000円"],
        }
    ],
    "feeStructure": [
        {
            "category": "手当",
            "items": [{"name": "住宅手当", "description": "月額", "amount": 10000, "unit": "円"}],
        }
    ],
    "tables": [
        {
            "title": "別表1 家賃限度額",
            "description": "等級別の上限",
            "headers": ["等級", "限度額"],
            "rows": [["1級", "100000"], ["2級", 80000]],
        }
    ],
    "additionalNotes": ["付則は対象外"],
}


def make_document(name, text):
    return ParsedDocument(
        raw_text=text,
        pages=[text],
        metadata=DocumentMetadata(page_count=1),
        extraction_method=ExtractionMethod.NATIVE,
        file_name=name,
    )


def test_from_dict_reads_camel_case_keys():
    result = AIExtractedRequirements.from_dict(MODEL_JSON)

    assert result.document_title == "社宅管理規程"
    assert result.document_type == "社宅規程"
    field = result.input_items[0].items[0]
    assert result.input_items[0].category == "入居者情報"
    assert (field.name, field.data_type, field.required) == ("等級", "選択肢", True)
    assert field.validation_rules == ["1級から5級"]
    assert result.calculation_rules[0].formula == "家賃 * 0.2"
    assert result.calculation_rules[0].examples == ["家賃100000円の場合20000円"]
    assert result.fee_structure[0].items[0].amount == "10000"
    assert result.tables[0].rows == [["1級", "100000"], ["2級", "80000"]]
    assert result.additional_notes == ["付則は対象外"]


def test_from_dict_defaults_missing_keys():
    result = AIExtractedRequirements.from_dict({"documentTitle": "規程"})

    assert result.document_title == "規程"
    assert result.summary == ""
    assert result.input_items == []
    assert result.calculation_rules == []
    assert result.fee_structure == []
    assert result.tables == []
    assert result.additional_notes == []


def test_from_dict_nulls_and_quoted_booleans():
    result = AIExtractedRequirements.from_dict(
        {
            "documentTitle": None,
            "summary": None,
            "inputItems": [
                {
                    "category": "入居者情報",
                    "items": [
                        {"name": "等級", "description": None, "required": "false"},
                        {"name": "家賃", "required": "true"},
                        {"name": "備考", "required": 1},
                    ],
                }
            ],
        }
    )

    assert result.document_title == ""
    assert result.summary == ""
    fields = result.input_items[0].items
    assert fields[0].description == ""
    assert [field.required for field in fields] == [False, True, False]


def test_reply_wrapped_in_prose_and_fences():
    reply = "以下が結果です。\n```json\n" + json.dumps(MODEL_JSON, ensure_ascii=False) + "\n```\n以上"

    result = parse_requirements_response(reply)

    assert result.document_title == "社宅管理規程"


def test_stray_braces_after_the_object_are_ignored():
    reply = '{"documentTitle": "社宅管理規程"}\n補足: {別表} を参照'

    assert parse_requirements_response(reply).document_title == "社宅管理規程"


def test_code_block_is_preferred_over_surrounding_braces():
    reply = 'メモ {"documentTitle": "下書き"}\n```json\n{"documentTitle": "社宅管理規程", "summary": "{注記}"}\n```'

    result = parse_requirements_response(reply)

    assert result.document_title == "社宅管理規程"
    assert result.summary == "{注記}"


def test_invalid_candidate_is_skipped_when_a_later_one_is_valid():
    reply = '前置き {not json} 本文 {"documentTitle": "規程"}'

    assert parse_requirements_response(reply).document_title == "規程"


def test_reply_without_json_is_rejected():
    with pytest.raises(ResponseParseError, match="JSONとして解析できませんでした"):
        parse_requirements_response("申し訳ありませんが、抽出できませんでした。")


def test_invalid_json_is_rejected():
    with pytest.raises(ResponseParseError, match="JSON解析エラー"):
        parse_requirements_response('{"documentTitle": "規程",}')


def test_combine_documents_adds_headers():
    combined = combine_documents([("a.pdf", "本文A"), ("b.pdf", "本文B")])

    assert combined == "\n\n=== a.pdf ===\n\n本文A\n\n\n=== b.pdf ===\n\n本文B"


def test_single_document_sent_without_header(gemini_client_factory):
    client = gemini_client_factory(reply=json.dumps(MODEL_JSON, ensure_ascii=False))

    AIRequirementsExtractor(client).extract_many([make_document("a.pdf", "本文A")])

    prompt = client._client.models.calls[0]["contents"][0]
    assert prompt.endswith("PDFテキスト:\n本文A")
    assert "=== a.pdf ===" not in prompt


def test_multiple_documents_share_one_call(gemini_client_factory):
    client = gemini_client_factory(reply=json.dumps(MODEL_JSON, ensure_ascii=False))

    result = AIRequirementsExtractor(client).extract_many(
        [make_document("a.pdf", "本文A"), make_document("b.pdf", "本文B")]
    )

    calls = client._client.models.calls
    assert len(calls) == 1
    prompt = calls[0]["contents"][0]
    assert "=== a.pdf ===" in prompt
    assert prompt.index("=== a.pdf ===") < prompt.index("=== b.pdf ===")
    assert result.document_title == "社宅管理規程"


def test_model_failure_propagates(gemini_client_factory):
    client = gemini_client_factory(error=TimeoutError("timed out"))

    with pytest.raises(ModelCallError):
        AIRequirementsExtractor(client).extract("本文")


def test_unparseable_reply_propagates(gemini_client_factory):
    client = gemini_client_factory(reply="no json here")

    with pytest.raises(ResponseParseError):
        AIRequirementsExtractor(client).extract("本文")
