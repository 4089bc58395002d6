from models import ChunkExtraction, StoryMeta
from parsing import parse_scores
from processing.phase_prompts import (
    build_extraction_prompt,
    build_mapping_prompt,
    build_scoring_prompt,
    build_verification_prompt,
    format_extractions,
)
from rubric_constants import ITEM_NAMES


def test_format_extractions():
    text = format_extractions(
        [
            ChunkExtraction(label="第1話〜第8話", result="A"),
            ChunkExtraction(label="第9話〜第9話", result="B"),
        ]
    )
    assert text == "=== 第1話〜第8話 ===\nA\n\n=== 第9話〜第9話 ===\nB"


def test_format_extractions_empty():
    assert format_extractions([]) == ""


def test_extraction_prompt_contains_chunk_and_premise(story_meta):
    prompt = build_extraction_prompt(story_meta, "第1話〜第8話", "本文テキスト", 2, 5)
    assert "本文テキスト" in prompt
    assert "（2/5：第1話〜第8話）" in prompt
    assert "主人公: ミナ" in prompt
    assert "主要キャラクター: ミナ、カイ" in prompt


def test_blank_premise_fields_are_marked_unspecified():
    meta = StoryMeta(protagonist="ミナ")
    prompt = build_mapping_prompt(meta, "抽出")
    assert "ジャンル: （未指定）" in prompt
    assert "主要キャラクター" not in prompt


def test_mapping_prompt_lists_every_item(story_meta):
    prompt = build_mapping_prompt(story_meta, "=== 第1話〜第1話 ===\n抽出")
    for i, name in enumerate(ITEM_NAMES, start=1):
        assert f"{i:02d}. {name}" in prompt
    assert "=== 第1話〜第1話 ===\n抽出" in prompt


def test_scoring_prompt_requests_parseable_format(story_meta):
    prompt = build_scoring_prompt(story_meta, "マッピング結果")
    for i, name in enumerate(ITEM_NAMES, start=1):
        assert f"{i:02d}. {name}：X.X" in prompt
    assert "マッピング結果" in prompt


def test_verification_prompt(story_meta):
    prompt = build_verification_prompt(story_meta, "01. オープニングイメージ：8.0")
    assert "01. オープニングイメージ：8.0" in prompt
    assert "テーマ: 喪失と再生" in prompt
    assert parse_scores(prompt)[0] == 8.0
