"""Seeder configuration values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from seedgraph.domain.policy import DuplicatePolicy

from .env import optional_env_var
from .errors import InvalidConfigurationError

if TYPE_CHECKING:
    from pathlib import Path

DUPLICATE_POLICY_ENV_VAR = "SEEDGRAPH_DUPLICATE_POLICY"


@dataclass(frozen=True, slots=True)
class SeedingConfig:
    duplicate_policy: DuplicatePolicy = DuplicatePolicy.HALT


def get_seeding_config(*, env_file: str | Path | None = None) -> SeedingConfig:
    """Build the seeder configuration from the environment.

    When ``env_file`` is given it is loaded first; variables already present in the
    process environment take precedence over the file.
    """

    if env_file is not None:
        load_dotenv(env_file, override=False)

    raw_policy = optional_env_var(DUPLICATE_POLICY_ENV_VAR)
    if raw_policy is None:
        return SeedingConfig()
    try:
        policy = DuplicatePolicy.parse(raw_policy)
    except ValueError:
        expected = ", ".join(member.value for member in DuplicatePolicy)
        raise InvalidConfigurationError(
            name=DUPLICATE_POLICY_ENV_VAR,
            value=raw_policy,
            expected=expected,
        ) from None
    return SeedingConfig(duplicate_policy=policy)
