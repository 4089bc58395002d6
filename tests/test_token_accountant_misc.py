import logging

from orchestration.token_accountant import Stage, TokenAccountant


def test_token_accountant_add_completion_tokens(caplog):
    caplog.set_level(logging.INFO)
    tracker = TokenAccountant()
    tracker.record_usage(Stage.EXTRACTION, {"completion_tokens": 5})
    tracker.record_usage(Stage.EXTRACTION.value, {"completion_tokens": 7})
    tracker.record_usage(Stage.SCORING, {"completion_tokens": 3})
    assert tracker.total == 15
    assert tracker.get_stage_total(Stage.EXTRACTION) == 12
    assert tracker.summary() == {"extraction": 12, "scoring": 3, "total": 15}
    assert any("tokens from" in record.message.lower() for record in caplog.records)


def test_token_accountant_add_total_tokens_only(caplog):
    caplog.set_level(logging.INFO)
    tracker = TokenAccountant()
    tracker.record_usage(Stage.MAPPING, {"total_tokens": 10})
    assert tracker.total == 0
    assert any("total tokens" in record.message.lower() for record in caplog.records)


def test_token_accountant_add_invalid_usage(caplog):
    caplog.set_level(logging.WARNING)
    tracker = TokenAccountant()
    tracker.record_usage(Stage.MAPPING, {"other": 1})
    assert tracker.total == 0
    assert any("missing" in record.message.lower() for record in caplog.records)


def test_token_accountant_ignores_missing_usage():
    tracker = TokenAccountant()
    tracker.record_usage(Stage.VERIFICATION, None)
    assert tracker.summary() == {"total": 0}
