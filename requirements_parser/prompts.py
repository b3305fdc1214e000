"""Prompt templates sent to the hosted model."""

PAGE_BREAK_MARKER = "--- ページ区切り ---"

VISION_TRANSCRIPTION_PROMPT = f"""このPDFに含まれるすべてのテキストを、記載されている順序どおりに正確に書き起こしてください。

ルール:
- 文字は一字一句そのまま書き起こし、要約・補足・翻訳はしないこと
- 表はできる限りレイアウトを保ち、列と列の間は2つ以上の空白またはタブで区切ること
- ページが変わる箇所には、次の行だけを単独で出力すること: {PAGE_BREAK_MARKER}
- 書き起こしたテキスト以外の説明やコメントは一切出力しないこと"""

REQUIREMENTS_EXTRACTION_PROMPT = """あなたは要件定義書を作成する専門家です。
以下のPDFテキストから、システム開発のための要件定義を抽出してください。

特に以下の点に注目して抽出してください：

1. **入力が必要な項目**
   - 使用料算定に必要な入力項目
   - 申請・届出に必要な項目
   - データ型（数値、テキスト、日付、選択肢など）
   - **重要**: 別表・付表のヘッダー項目も入力項目として抽出すること（例：等級、家賃限度額、地区、赴任方法、支給額など）

2. **算定に必要な項目**
   - 計算に使用される変数
   - 参照テーブル
   - 条件分岐のパラメータ

3. **算定方法・計算式**
   - 日本語で記載された計算ルールを数式に変換
   - 条件付きの計算ロジック
   - 上限・下限のルール

4. **費用項目**
   - 各種費用の名称と説明
   - 金額や計算方法
   - 適用条件

5. **その他重要な要件**
   - 期限・期間に関するルール
   - 例外処理
   - 参照すべき別表・付表

回答は以下のJSON形式のみで出力してください（説明文は不要）：

{
  "documentTitle": "ドキュメントタイトル",
  "documentType": "規程種別（例：社宅規程、転勤取扱基準）",
  "summary": "ドキュメントの概要（100文字程度）",
  "inputItems": [
    {
      "category": "カテゴリ名",
      "items": [
        {
          "name": "項目名",
          "description": "説明",
          "dataType": "データ型",
          "required": true,
          "validationRules": ["バリデーションルール"]
        }
      ]
    }
  ],
  "calculationRules": [
    {
      "name": "計算名",
      "description": "説明",
      "formula": "計算式（例：家賃 × 本人負担率）",
      "conditions": ["適用条件"],
      "examples": ["計算例"]
    }
  ],
  "feeStructure": [
    {
      "category": "費用カテゴリ",
      "items": [
        {
          "name": "費用名",
          "description": "説明",
          "amount": "金額（あれば）",
          "unit": "単位",
          "conditions": ["適用条件"]
        }
      ]
    }
  ],
  "tables": [
    {
      "title": "テーブル名",
      "description": "説明",
      "headers": ["列1", "列2"],
      "rows": [["値1", "値2"]]
    }
  ],
  "additionalNotes": ["その他の重要事項"]
}"""


def build_extraction_prompt(document_text: str) -> str:
    return f"{REQUIREMENTS_EXTRACTION_PROMPT}\n\n---\n\nPDFテキスト:\n{document_text}"
