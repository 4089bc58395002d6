import pytest
from conftest import SAMPLE_SCORES, numbered_scoring_text

from parsing import ScoreParser, parse_scores
from rubric_constants import ITEM_NAMES


def test_numbered_lines_parse_back_exactly():
    assert parse_scores(numbered_scoring_text(SAMPLE_SCORES)) == SAMPLE_SCORES


@pytest.mark.parametrize("text", ["", "採点できませんでした。", None, 42])
def test_always_returns_fourteen_values(text):
    scores = parse_scores(text)
    assert len(scores) == 14
    assert scores == [0.0] * 14


def test_missing_item_defaults_to_zero():
    scores = parse_scores(numbered_scoring_text(SAMPLE_SCORES, skip={4}))
    assert scores[4] == 0.0
    assert scores[:4] == SAMPLE_SCORES[:4]
    assert scores[5:] == SAMPLE_SCORES[5:]


def test_full_width_punctuation_and_unpadded_index():
    text = "1．オープニングイメージ: 7\n2.セットアップ：6.5"
    scores = parse_scores(text)
    assert scores[0] == 7.0
    assert scores[1] == 6.5


def test_markdown_table_rows():
    rows = ["| No | 項目 | 点数 |", "|---|---|---|"]
    rows += [
        f"| {i:02d} | {name} | {score} |"
        for i, (name, score) in enumerate(zip(ITEM_NAMES, SAMPLE_SCORES), start=1)
    ]
    assert parse_scores("\n".join(rows)) == SAMPLE_SCORES


def test_loose_proximity_requires_decimal():
    parser = ScoreParser()
    assert parser.extract_item(8, "ミッドポイントは見事で 9.5 点") == 9.5
    assert parser.extract_item(8, "ミッドポイントは 9 点") is None


def test_numbered_line_beats_later_mentions():
    text = "ミッドポイント の評価は 3.0 とする案もあった\n08. ミッドポイント：9.5"
    # Strategy order wins over position in the text.
    assert ScoreParser().extract_item(8, text) == 9.5


def test_first_match_wins_within_a_strategy():
    text = "01. オープニングイメージ：8.0\n01. オープニングイメージ：3.0"
    assert parse_scores(text)[0] == 8.0


def test_custom_item_table():
    parser = ScoreParser(item_names=["導入", "展開"])
    assert parser.parse("01. 導入：5.5\n02. 展開：6") == [5.5, 6.0]
