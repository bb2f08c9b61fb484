from __future__ import annotations

import logging

import pytest

from xapnode.main import pop_log_level


@pytest.mark.parametrize("value,expected", [("debug", "DEBUG"), ("Warning", "WARNING"), ("INFO", "INFO")])
def test_log_level_name_is_case_insensitive(value, expected):
    options = {"log_level": value, "port": 4000}

    level = pop_log_level(options)

    assert level == expected
    assert isinstance(logging.getLevelName(level), int)
    assert options == {"port": 4000}


def test_log_level_defaults_to_info():
    assert pop_log_level({}) == "INFO"
    assert pop_log_level({"log_level": ""}) == "INFO"
