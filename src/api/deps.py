import os
from functools import lru_cache
from pathlib import Path

from fastapi import Depends

from src.adapters.auth.crypto import Argon2PasswordHasher
from src.adapters.clock import SystemClock
from src.adapters.sqlite_db import SQLiteEngagementSessionRepo, SQLiteShareRepo
from src.rules.adapters import (
    EngagementRulesAdapter,
    IntelligenceRulesAdapter,
    SharingRulesAdapter,
)
from src.rules.loader import default_rules_path, load_rules
from src.rules.models import Rules


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("PROPOSAL_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "proposals.db")
        self.rules_path = default_rules_path(self.base_dir)
        self.migrations_dir = self.base_dir / "migrations"


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return load_rules(settings.rules_path)


def get_intelligence_rules(rules: Rules = Depends(get_rules)) -> IntelligenceRulesAdapter:
    return IntelligenceRulesAdapter(rules)


def get_engagement_rules(rules: Rules = Depends(get_rules)) -> EngagementRulesAdapter:
    return EngagementRulesAdapter(rules)


def get_sharing_rules(rules: Rules = Depends(get_rules)) -> SharingRulesAdapter:
    return SharingRulesAdapter(rules)


# --- Repos ---
def get_engagement_session_repo(
    settings: Settings = Depends(get_settings),
) -> SQLiteEngagementSessionRepo:
    return SQLiteEngagementSessionRepo(settings.db_path)


def get_share_repo(settings: Settings = Depends(get_settings)) -> SQLiteShareRepo:
    return SQLiteShareRepo(settings.db_path)


# --- Adapters ---
def get_password_hasher() -> Argon2PasswordHasher:
    return Argon2PasswordHasher()


# Time adapter for deterministic time operations
_clock_instance: SystemClock | None = None


def get_clock() -> SystemClock:
    """Get clock singleton."""
    global _clock_instance
    if _clock_instance is None:
        _clock_instance = SystemClock()
    return _clock_instance
