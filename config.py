import os
import yaml

from settings_schema import AnalyticsThresholds, DEFAULT_THRESHOLDS, validate_settings

APP_VERSION = "1.0.0"


class YamlConfig:
    """Load and save analytics threshold overrides in a YAML file."""

    def __init__(self, path: str | None = None) -> None:
        self.path = path or os.environ.get(
            "FITNESS_INSIGHTS_CONFIG", "thresholds.yaml"
        )

    def load_raw(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} must contain a mapping")
        return data

    def load(self) -> AnalyticsThresholds:
        data = self.load_raw()
        if not data:
            return DEFAULT_THRESHOLDS
        return validate_settings(data)

    def save(self, thresholds: AnalyticsThresholds) -> None:
        """Write only the values that differ from the defaults."""
        defaults = DEFAULT_THRESHOLDS.model_dump()
        out = {}
        for key, value in thresholds.model_dump().items():
            if value != defaults[key]:
                out[key] = list(value) if isinstance(value, tuple) else value
        with open(self.path, "w", encoding="utf-8") as f:
            yaml.safe_dump(out, f)
