"""Configuration management for Field Pay.

Configuration is split into two files:

1. settings.json - Machine-specific settings
   - data_dir: where the entry store keeps logged days
   - profile: path to profile.yaml (optional, if not colocated)

2. profile.yaml - The contractor's own configuration
   - rates: day rate, truck rate, travel rate, subsistence
   - schedule: preferred pay-period cadence
   - performance: dashboard bucket thresholds

Config directory resolution:
1. FIELD_PAY_CONFIG_PATH environment variable (if set)
2. ~/.config/field-pay/ (XDG_CONFIG_HOME fallback)

Data directory resolution:
1. settings.json "data_dir" key
2. XDG_DATA_HOME/field-pay/ or ~/.local/share/field-pay/
"""

import json
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from .schemas import ContractorProfile


APP_NAME = "field-pay"
SETTINGS_FILENAME = "settings.json"
PROFILE_FILENAME = "profile.yaml"


class ProfileNotFoundError(Exception):
    """Raised when no profile is found."""
    pass


class ProfileValidationError(Exception):
    """Raised when profile.yaml does not match the expected schema."""

    def __init__(self, path: Path, errors: list):
        self.path = path
        self.errors = errors
        error_str = "\n  ! ".join(errors)
        super().__init__(f"Profile has validation errors:\n\n  ! {error_str}\n\nProfile: {path}")


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Resolution order:
    1. FIELD_PAY_CONFIG_PATH environment variable
    2. ~/.config/field-pay/ (XDG_CONFIG_HOME)
    """
    env_path = os.environ.get("FIELD_PAY_CONFIG_PATH")
    if env_path:
        return Path(env_path)

    xdg_config_home = os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
    return Path(xdg_config_home) / APP_NAME


def get_settings_path() -> Path:
    """Get the path to settings.json (may not exist yet)."""
    return get_config_dir() / SETTINGS_FILENAME


def load_settings() -> dict:
    """Load machine-specific settings from settings.json.

    Returns:
        Settings dictionary (empty dict if file doesn't exist)
    """
    settings_file = get_settings_path()

    if not settings_file.exists():
        return {}

    with open(settings_file, "r") as f:
        return json.load(f)


def save_settings(settings: dict) -> Path:
    """Save machine-specific settings to settings.json.

    Returns:
        Path to the saved settings file
    """
    config_dir = get_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)

    settings_file = config_dir / SETTINGS_FILENAME

    with open(settings_file, "w") as f:
        json.dump(settings, f, indent=2)

    return settings_file


def get_setting(key: str, default: Any = None) -> Any:
    """Get a setting value from settings.json."""
    return load_settings().get(key, default)


def set_setting(key: str, value: Any) -> Path:
    """Set a setting value in settings.json."""
    settings = load_settings()
    settings[key] = value
    return save_settings(settings)


def get_profile_path(require_exists: bool = False) -> Path:
    """Get the path to the profile.yaml file.

    Resolution order:
    1. settings.json "profile" key (if set)
    2. profile.yaml in config directory

    Raises:
        ProfileNotFoundError: If require_exists=True and no profile found
    """
    custom_profile = load_settings().get("profile")
    if custom_profile:
        profile_path = Path(custom_profile)
        if require_exists and not profile_path.exists():
            raise ProfileNotFoundError(
                f"Profile not found at configured path: {profile_path}\n\n"
                f"Update settings.json 'profile' or remove it to use the default location."
            )
        return profile_path

    profile_path = get_config_dir() / PROFILE_FILENAME
    if require_exists and not profile_path.exists():
        raise ProfileNotFoundError(
            f"No profile found at {profile_path}\n\n"
            f"Create one with: field-pay profile init"
        )
    return profile_path


def load_profile(require_exists: bool = True) -> dict:
    """Load profile.yaml as a plain dict.

    Returns:
        Profile dictionary (empty dict if not required and not found)

    Raises:
        ProfileNotFoundError: If require_exists=True and no profile found
    """
    profile_path = get_profile_path(require_exists=require_exists)

    if not profile_path.exists():
        return {}

    with open(profile_path, "r") as f:
        return yaml.safe_load(f) or {}


def save_profile(profile: dict, path: Optional[Path] = None) -> Path:
    """Save profile.yaml.

    Returns:
        Path to the saved profile file
    """
    if path is None:
        path = get_profile_path(require_exists=False)

    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        yaml.dump(profile, f, default_flow_style=False, sort_keys=False)

    return path


def load_contractor_profile(require_exists: bool = False) -> ContractorProfile:
    """Load and validate profile.yaml.

    A missing profile (when not required) yields the defaults.

    Raises:
        ProfileNotFoundError: If require_exists=True and no profile found
        ProfileValidationError: If the file does not match the schema
    """
    raw = load_profile(require_exists=require_exists)
    try:
        return ContractorProfile.model_validate(raw)
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(p) for p in err['loc']) or 'root'}: {err['msg']}"
            for err in e.errors()
        ]
        raise ProfileValidationError(get_profile_path(), errors) from e


def default_profile() -> dict:
    """Starter profile.yaml contents with every supported key."""
    profile = ContractorProfile().model_dump(mode="json")
    profile["name"] = "Your Name"
    profile["gst_number"] = ""
    return profile


def get_data_path() -> Path:
    """Get the data directory path.

    Resolution order:
    1. settings.json "data_dir"
    2. XDG_DATA_HOME/field-pay/ (~/.local/share/field-pay/)

    Returns:
        Path to the data directory (created if doesn't exist)
    """
    custom = get_setting("data_dir")
    if custom:
        data_path = Path(custom).expanduser()
    else:
        xdg_data_home = os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share")
        data_path = Path(xdg_data_home) / APP_NAME
    data_path.mkdir(parents=True, exist_ok=True)
    return data_path
