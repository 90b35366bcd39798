# gambit/config.py
import logging
import os
import tomllib
from dataclasses import dataclass, field
from typing import Optional

from gambit.core.pieces import Color, Difficulty


@dataclass
class SearchConfig:
    default_difficulty: str = Difficulty.MEDIUM.value
    random_seed: Optional[int] = None  # seeds the easy tier; None means unseeded


@dataclass
class UIConfig:
    engine_name: str = "Gambit"
    human_color: str = Color.WHITE.value
    show_san: bool = True


@dataclass
class Config:
    search: SearchConfig = field(default_factory=SearchConfig)
    ui: UIConfig = field(default_factory=UIConfig)
    log_level: str = "WARNING"

    @staticmethod
    def load_from_toml(path: str = "gambit.toml") -> "Config":
        cfg = Config()
        if not os.path.exists(path):
            return cfg
        with open(path, "rb") as f:
            raw = tomllib.load(f)
        # only known keys are merged; unknown ones are ignored
        for section in ("search", "ui"):
            values = raw.get(section, {})
            if not isinstance(values, dict):
                raise ValueError(f"Invalid configuration: [{section}] must be a table")
            for k, v in values.items():
                target = getattr(cfg, section)
                if hasattr(target, k):
                    setattr(target, k, v)
        if "log_level" in raw:
            cfg.log_level = str(raw["log_level"])
        cfg.validate()
        return cfg

    def validate(self) -> None:
        try:
            Difficulty(self.search.default_difficulty)
            Color(self.ui.human_color)
        except ValueError as e:
            raise ValueError(f"Invalid configuration: {e}") from e
        if str(self.log_level).upper() not in logging.getLevelNamesMapping():
            raise ValueError(f"Invalid configuration: unknown log_level {self.log_level!r}")


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=(level or CONFIG.log_level).upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


# single globally importable config instance
CONFIG = Config.load_from_toml(os.environ.get("GAMBIT_CONFIG_TOML", "gambit.toml"))
if os.environ.get("GAMBIT_LOG_LEVEL"):
    CONFIG.log_level = os.environ["GAMBIT_LOG_LEVEL"]
