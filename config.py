"""Configuration management for the expense tracker.

Reads configuration from ~/.config/expense-tracker.toml and creates default
config if needed.
"""

from pathlib import Path
from dataclasses import dataclass
import tomllib
import tomli_w


@dataclass
class Config:
    """Application configuration."""

    base_dir: Path
    data_dir: Path
    taxonomy_filename: str
    auto_create_taxonomy: bool
    log_level: str
    log_dir: Path

    @property
    def taxonomy_path(self) -> Path:
        """Get the full taxonomy file path (data_dir/filename)."""
        return self.data_dir / self.taxonomy_filename

    @classmethod
    def default(cls) -> "Config":
        """Create a Config with default values."""
        home = Path.home()
        base_dir = home / "data" / "expense-tracker"
        return cls(
            base_dir=base_dir,
            data_dir=base_dir / "data",
            taxonomy_filename="taxonomy.json",
            auto_create_taxonomy=True,
            log_level="INFO",
            log_dir=base_dir / "logs",
        )


def get_config_path() -> Path:
    """Get the path to the config file."""
    return Path.home() / ".config" / "expense-tracker.toml"


def load_config() -> Config:
    """Load configuration from file, creating default if it doesn't exist.

    Returns:
        Config object with loaded or default values.
    """
    config_path = get_config_path()

    # If config doesn't exist, create it with defaults
    if not config_path.exists():
        config = Config.default()
        _write_config(config)
        return config

    # Load existing config
    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    # Parse with defaults for any missing values
    base_dir = Path(data.get("base_dir", Path.home() / "data" / "expense-tracker"))

    taxonomy_config = data.get("taxonomy", {})
    data_dir = Path(taxonomy_config.get("data_dir", base_dir / "data"))
    taxonomy_filename = taxonomy_config.get("filename", "taxonomy.json")
    auto_create_taxonomy = taxonomy_config.get("auto_create", True)

    log_config = data.get("logging", {})
    log_level = log_config.get("level", "INFO")
    log_dir = Path(log_config.get("log_dir", base_dir / "logs"))

    return Config(
        base_dir=base_dir,
        data_dir=data_dir,
        taxonomy_filename=taxonomy_filename,
        auto_create_taxonomy=auto_create_taxonomy,
        log_level=log_level,
        log_dir=log_dir,
    )


def _write_config(config: Config) -> None:
    """Write config to the config file.

    Args:
        config: Config object to write.
    """
    config_path = get_config_path()

    # Ensure config directory exists
    config_path.parent.mkdir(parents=True, exist_ok=True)

    # Convert config to TOML structure
    data = {
        "base_dir": str(config.base_dir),
        "taxonomy": {
            "data_dir": str(config.data_dir),
            "filename": config.taxonomy_filename,
            "auto_create": config.auto_create_taxonomy,
        },
        "logging": {
            "level": config.log_level,
            "log_dir": str(config.log_dir),
        },
    }

    # Write TOML file
    with open(config_path, "wb") as f:
        tomli_w.dump(data, f)
