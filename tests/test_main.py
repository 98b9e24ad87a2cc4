"""Tests for the command-line entrypoint."""

import json

import pytest

from mood_adapt.config import get_settings
from mood_adapt.main import main


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_rules_prints_default_table(capsys):
    main(["rules"])
    rules = json.loads(capsys.readouterr().out)
    assert [r["name"] for r in rules] == [
        "stress_reduction",
        "focus_enhancement",
        "mood_lifting",
        "engagement_boost",
    ]


def test_rules_from_file(tmp_path, capsys):
    path = tmp_path / "rules.json"
    path.write_text(json.dumps([
        {
            "name": "calm",
            "conditions": {"mood": "stressed"},
            "adaptations": [{"type": "visual", "action": "reduce_brightness"}],
        }
    ]))
    main(["rules", "--file", str(path)])
    rules = json.loads(capsys.readouterr().out)
    assert rules[0]["conditions"] == [{"kind": "equals", "field": "mood", "value": "stressed"}]


def test_no_command_exits(capsys):
    with pytest.raises(SystemExit):
        main([])
