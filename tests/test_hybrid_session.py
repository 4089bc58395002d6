import pytest

from orchestration.hybrid_session import (
    HybridInputError,
    build_hybrid_prompt,
    validate_pasted_response,
)

LONG_ANSWER = "分析結果：" + "あ" * 120


def test_phase_one_uses_whole_story(story_meta):
    story = "＜第1話＞はじまり\n＜第2話＞おわり"
    prompt = build_hybrid_prompt(1, story_meta, story_text=story)
    assert prompt.phase == 1
    assert story in prompt.prompt
    assert "（1/1：全文）" in prompt.prompt
    assert prompt.char_count == len(prompt.prompt)


def test_phase_one_requires_story(story_meta):
    with pytest.raises(HybridInputError):
        build_hybrid_prompt(1, story_meta, story_text="  ")


@pytest.mark.parametrize("phase", [2, 3, 4])
def test_later_phases_embed_previous_answer(phase, story_meta):
    prompt = build_hybrid_prompt(phase, story_meta, previous_result=LONG_ANSWER)
    assert prompt.phase == phase
    assert LONG_ANSWER in prompt.prompt


@pytest.mark.parametrize("answer", [None, "", "   ", "短い回答"])
def test_short_or_missing_answers_are_rejected(answer, story_meta):
    with pytest.raises(HybridInputError):
        build_hybrid_prompt(2, story_meta, previous_result=answer)


def test_answer_length_is_measured_after_trimming():
    assert validate_pasted_response("  " + "a" * 100 + "  ") == "a" * 100
    with pytest.raises(HybridInputError):
        validate_pasted_response(" " * 50 + "a" * 99 + " " * 50)


def test_unknown_phase(story_meta):
    with pytest.raises(HybridInputError):
        build_hybrid_prompt(5, story_meta, previous_result=LONG_ANSWER)
