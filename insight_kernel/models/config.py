"""Engine configuration — cooldown policy, session cap, diagnostic thresholds."""

import logging
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)


class CooldownPolicy(BaseModel):
    """Suppression policy applied by the cooldown evaluator."""

    ladder_days: List[int] = Field(default=[1, 3, 7, 30], min_length=1)
    max_shows_per_day: int = Field(default=1, ge=1)
    snooze_options_days: List[int] = [7, 30]


class DiagnosticThresholds(BaseModel):
    """Exposure thresholds for governance risk flags and compliance checks."""

    excessive_exposure: int = 10            # Governance risk flag
    fatigue_exposure: int = 5               # Exposures with no action -> fatigued
    low_engagement_exposure: int = 3
    compliance_excessive_exposure: int = 15
    repeated_pressure_exposure: int = 10
    repeated_pressure_window_days: int = 7
    dark_pattern_exposure: int = 5


class EngineConfig(BaseModel):
    cooldown: CooldownPolicy = CooldownPolicy()
    max_per_session: int = 3
    thresholds: DiagnosticThresholds = DiagnosticThresholds()
    state_db_path: str = ":memory:"
    memory_db_path: str = ":memory:"

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "EngineConfig":
        """
        Load configuration from a JSON file. A missing or invalid file falls
        back to defaults with a logged warning.
        """
        if config_path is None:
            return cls()

        config_path = Path(config_path)
        if not config_path.exists():
            logger.warning(f"Config not found at {config_path}, using defaults")
            return cls()

        try:
            return cls.model_validate_json(config_path.read_text())
        except ValidationError as e:
            logger.warning(f"Invalid config at {config_path}: {e.error_count()} error(s), using defaults")
            return cls()
