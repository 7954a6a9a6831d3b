from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from seedgraph.config import (
    DUPLICATE_POLICY_ENV_VAR,
    ConfigurationError,
    InvalidConfigurationError,
    MissingConfigurationError,
    get_seeding_config,
    optional_env_var,
    require_env_vars,
)
from seedgraph.domain.policy import DuplicatePolicy

if TYPE_CHECKING:
    from pathlib import Path


def test_require_env_vars_returns_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "value")

    result = require_env_vars(["EXAMPLE_VAR"])

    assert result["EXAMPLE_VAR"] == "value"


def test_require_env_vars_raises_when_any_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISSING_VAR", raising=False)
    monkeypatch.setenv("BLANK_VAR", "   ")

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["MISSING_VAR", "BLANK_VAR"])

    assert "BLANK_VAR, MISSING_VAR" in str(exc.value)


def test_optional_env_var_strips_and_treats_blank_as_unset(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("PADDED_VAR", "  merge ")
    monkeypatch.setenv("BLANK_VAR", "")

    assert optional_env_var("PADDED_VAR") == "merge"
    assert optional_env_var("BLANK_VAR") is None


def test_seeding_config_defaults_to_halt() -> None:
    config = get_seeding_config()

    assert config.duplicate_policy is DuplicatePolicy.HALT


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("merge", DuplicatePolicy.MERGE),
        ("SKIP", DuplicatePolicy.SKIP),
        ("always-add", DuplicatePolicy.ALWAYS_ADD),
    ],
)
def test_seeding_config_parses_policy(
    monkeypatch: pytest.MonkeyPatch,
    raw: str,
    expected: DuplicatePolicy,
) -> None:
    monkeypatch.setenv(DUPLICATE_POLICY_ENV_VAR, raw)

    assert get_seeding_config().duplicate_policy is expected


def test_seeding_config_rejects_unknown_policy(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(DUPLICATE_POLICY_ENV_VAR, "overwrite")

    with pytest.raises(InvalidConfigurationError) as exc:
        get_seeding_config()

    assert isinstance(exc.value, ConfigurationError)
    assert exc.value.name == DUPLICATE_POLICY_ENV_VAR
    assert "'overwrite'" in str(exc.value)


def test_seeding_config_reads_env_file(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(f"{DUPLICATE_POLICY_ENV_VAR}=skip\n")

    config = get_seeding_config(env_file=env_file)

    assert config.duplicate_policy is DuplicatePolicy.SKIP


def test_process_environment_wins_over_env_file(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(f"{DUPLICATE_POLICY_ENV_VAR}=skip\n")
    monkeypatch.setenv(DUPLICATE_POLICY_ENV_VAR, "merge")

    config = get_seeding_config(env_file=env_file)

    assert config.duplicate_policy is DuplicatePolicy.MERGE
