"""
Configuration module for ballot-box anomaly analysis.

Centralizes the detector thresholds and runtime settings. Every value can be
overridden through environment variables.

Usage:
    from config import config

    print(config.thresholds.distance_alert)
    print(config.ballots_encoding)
"""

import os
from dataclasses import dataclass, field, asdict


@dataclass(frozen=True)
class Thresholds:
    """
    Policy constants used by the anomaly detectors.

    Attributes:
        fringe_local_min_share: A party above this local share may be a "high fringe" party
        fringe_national_max_share: ...if its national share is below this value
        major_national_min_share: A party above this national share is a "major" party
        major_local_max_share: ...and is "low major" locally when below this share
        min_settlement_ballots: Settlements with fewer ballot boxes are not scored
        distance_alert: Settlement distance above which a ballot box is reported to the operator
    """
    fringe_local_min_share: float = 0.05
    fringe_national_max_share: float = 0.01
    major_national_min_share: float = 0.2
    major_local_max_share: float = 0.001
    min_settlement_ballots: int = 5
    distance_alert: float = 0.5

    @classmethod
    def from_env(cls) -> "Thresholds":
        """Build thresholds from environment variables, falling back to the defaults."""
        defaults = cls()
        return cls(
            fringe_local_min_share=float(os.environ.get("FRINGE_LOCAL_MIN_SHARE", defaults.fringe_local_min_share)),
            fringe_national_max_share=float(os.environ.get("FRINGE_NATIONAL_MAX_SHARE", defaults.fringe_national_max_share)),
            major_national_min_share=float(os.environ.get("MAJOR_NATIONAL_MIN_SHARE", defaults.major_national_min_share)),
            major_local_max_share=float(os.environ.get("MAJOR_LOCAL_MAX_SHARE", defaults.major_local_max_share)),
            min_settlement_ballots=int(os.environ.get("MIN_SETTLEMENT_BALLOTS", defaults.min_settlement_ballots)),
            distance_alert=float(os.environ.get("DISTANCE_ALERT", defaults.distance_alert)),
        )


DEFAULT_THRESHOLDS = Thresholds()


@dataclass
class Config:
    """
    Application configuration.

    Use Config.from_env() to load settings from environment variables.
    """

    # Detector policy
    thresholds: Thresholds = field(default_factory=Thresholds)

    # Input settings
    ballots_encoding: str = "ISO-8859-8"  # Encoding of the published ballot file
    http_timeout: int = 60  # seconds

    # Logging Settings
    log_level: str = "INFO"

    # Report Settings
    report_dir: str = "analysis"

    # Web UI Settings
    web_ui_host: str = "127.0.0.1"
    web_ui_port: int = 7860

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        return cls(
            thresholds=Thresholds.from_env(),
            ballots_encoding=os.environ.get("BALLOTS_ENCODING", "ISO-8859-8"),
            http_timeout=int(os.environ.get("HTTP_TIMEOUT", "60")),
            log_level=os.environ.get("LOG_LEVEL", "INFO"),
            report_dir=os.environ.get("REPORT_DIR", "analysis"),
            web_ui_host=os.environ.get("WEB_UI_HOST", "127.0.0.1"),
            web_ui_port=int(os.environ.get("WEB_UI_PORT", "7860")),
        )

    def validate(self) -> list[str]:
        """
        Validate configuration and return list of issues.

        Returns:
            List of configuration issues (empty if valid)
        """
        issues = []
        t = self.thresholds

        for name in ("fringe_local_min_share", "fringe_national_max_share",
                     "major_national_min_share", "major_local_max_share"):
            value = getattr(t, name)
            if not 0.0 <= value <= 1.0:
                issues.append(f"{name.upper()} must be a share between 0 and 1, got {value}")

        if t.fringe_national_max_share >= t.major_national_min_share:
            issues.append("FRINGE_NATIONAL_MAX_SHARE must be below MAJOR_NATIONAL_MIN_SHARE")

        if t.min_settlement_ballots < 1:
            issues.append(f"MIN_SETTLEMENT_BALLOTS must be at least 1, got {t.min_settlement_ballots}")

        if t.distance_alert < 0:
            issues.append(f"DISTANCE_ALERT must not be negative, got {t.distance_alert}")

        if self.http_timeout < 1:
            issues.append(f"HTTP_TIMEOUT must be at least 1 second, got {self.http_timeout}")

        return issues

    def to_dict(self) -> dict:
        """Convert configuration to dictionary (safe for logging)."""
        return {
            "thresholds": asdict(self.thresholds),
            "ballots_encoding": self.ballots_encoding,
            "http_timeout": self.http_timeout,
            "log_level": self.log_level,
            "report_dir": self.report_dir,
            "web_ui_host": self.web_ui_host,
            "web_ui_port": self.web_ui_port,
        }


# Global configuration instance
config = Config.from_env()


def get_config() -> Config:
    """Get the global configuration instance."""
    return config


def reload_config() -> Config:
    """Reload configuration from environment variables."""
    global config
    config = Config.from_env()
    return config
