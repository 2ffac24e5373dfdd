from pathlib import Path

import pytest

from src.app_shell.config import ConfigurationError, validate_ops_rules
from src.rules.models import OpsRules, Rules


def make_rules(required_env: list[str]) -> Rules:
    return Rules.model_validate(
        {
            "project": {"slug": "test", "rules_version": "1.0"},
            "ops": OpsRules(required_env=required_env).model_dump(),
        }
    )


def test_creates_data_dir(tmp_path: Path) -> None:
    data_dir = tmp_path / "nested" / "data"
    validate_ops_rules(make_rules([]), data_dir)
    assert data_dir.is_dir()


def test_missing_required_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PROPOSAL_TEST_SECRET", raising=False)
    with pytest.raises(ConfigurationError, match="PROPOSAL_TEST_SECRET"):
        validate_ops_rules(make_rules(["PROPOSAL_TEST_SECRET"]), tmp_path)


def test_required_env_present(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PROPOSAL_TEST_SECRET", "x")
    validate_ops_rules(make_rules(["PROPOSAL_TEST_SECRET"]), tmp_path)

