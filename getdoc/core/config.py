import os
import yaml
import logging
from typing import List, Optional, Dict, Any, Tuple
from pathlib import Path
from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ConfigurationError

# Default configuration values
DEFAULT_CONFIG_PATH = "getdoc.config.yaml"
DEFAULT_MANIFEST_PATH = "Cargo.toml"
DEFAULT_CARGO_COMMAND = "cargo"
DEFAULT_CARGO_HOME = "~/.cargo"
DEFAULT_OUTPUT_PATH = "report.md"
DEFAULT_JOBS = 1
REGISTRY_SUBDIR = ("registry", "src")
GIT_CHECKOUT_SUBDIR = ("git", "checkouts")


class GetDocConfig(BaseModel):
    """
    Central configuration model for getdoc.
    """
    project_root: Optional[str] = None
    manifest_path: str = Field(default=DEFAULT_MANIFEST_PATH)
    cargo_command: str = Field(default=DEFAULT_CARGO_COMMAND)
    extra_check_args: List[str] = Field(default_factory=list)

    # Dependency source caches; derived from cargo_home when unset
    cargo_home: Optional[str] = None
    registry_root: Optional[str] = None
    git_checkout_root: Optional[str] = None

    output_path: str = Field(default=DEFAULT_OUTPUT_PATH)
    features: Optional[List[str]] = None
    jobs: int = Field(default=DEFAULT_JOBS)

    class Config:
        extra = "allow"

    @field_validator("jobs")
    @classmethod
    def _positive_jobs(cls, value: int) -> int:
        if value < 1:
            raise ValueError("jobs must be at least 1")
        return value

    @field_validator("features", mode="before")
    @classmethod
    def _split_features(cls, value: Any) -> Any:
        # Accept "a,b" as well as a list, matching the CLI's comma syntax
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value

    def resolve_project_root(self) -> Path:
        return Path(self.project_root or ".").expanduser().resolve()

    def resolve_manifest_path(self) -> Path:
        manifest = Path(self.manifest_path).expanduser()
        if manifest.is_absolute():
            return manifest
        return self.resolve_project_root() / manifest

    def resolve_output_path(self) -> Path:
        output = Path(self.output_path).expanduser()
        if output.is_absolute():
            return output
        return self.resolve_project_root() / output

    def resolve_cargo_home(self) -> str:
        return self.cargo_home or os.environ.get("CARGO_HOME") or DEFAULT_CARGO_HOME

    def dependency_roots(self) -> Tuple[str, str]:
        """Registry source root and git checkout root used to spot dependency files."""
        cargo_home = Path(os.path.expanduser(self.resolve_cargo_home()))
        registry = self.registry_root or str(cargo_home.joinpath(*REGISTRY_SUBDIR))
        git = self.git_checkout_root or str(cargo_home.joinpath(*GIT_CHECKOUT_SUBDIR))
        return registry, git


def load_config(
    config_path: Optional[str] = None,
    cli_args: Optional[Dict[str, Any]] = None
) -> GetDocConfig:
    """
    Load configuration from file and overrides.

    Priority:
    1. CLI Arguments (if provided and not None)
    2. Config File (if provided or found at default path)
    3. Default Values

    Args:
        config_path: Path to the YAML config file. If None, tries 'getdoc.config.yaml'.
        cli_args: Dictionary of CLI arguments to override config values.

    Returns:
        GetDocConfig: The resolved configuration object.

    Raises:
        ConfigurationError: If the merged values do not validate.
    """
    config_data: Dict[str, Any] = {}

    target_path = config_path if config_path else DEFAULT_CONFIG_PATH
    path_obj = Path(target_path)

    if path_obj.exists() and path_obj.is_file():
        try:
            with open(path_obj, 'r', encoding='utf-8') as f:
                file_data = yaml.safe_load(f)
                if isinstance(file_data, dict):
                    config_data.update(file_data)
                elif file_data is not None:
                    raise ConfigurationError(f"Config file {target_path} must contain a mapping")
            logging.info(f"Loaded configuration from {target_path}")
        except (OSError, yaml.YAMLError) as e:
            logging.warning(f"Failed to load config file {target_path}: {e}")
    elif config_path:
        logging.warning(f"Config file not found at explicit path: {config_path}")
    else:
        logging.debug(f"No config file found at {DEFAULT_CONFIG_PATH}, using defaults.")

    if cli_args:
        for key, value in cli_args.items():
            if value is not None:
                config_data[key] = value

    try:
        return GetDocConfig(**config_data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
