# =============================================================================
# Configuration Management
# =============================================================================
# Loads and saves default sender settings from a TOML file.
#
# XDG Base Directory Compliance (https://specifications.freedesktop.org/basedir-spec/):
#   - Config:  $XDG_CONFIG_HOME/emailesque/  (default: ~/.config/emailesque/)
#
# File layout (config.toml):
#
#   [general]
#   default_profile = "work"
#
#   [defaults]                  # applies to every profile
#   from = "me@example.com"
#
#   [profiles.work]             # named overrides
#   driver = "smtp"
#   host = "smtp.example.com"
#   user = "me@example.com"
#
# IMPORTANT: Passwords don't belong in this file. SMTP passwords are looked
# up in the system keyring (see emailesque.transport.smtp).
# =============================================================================

import logging
import os
import tomllib  # Built into Python 3.11+
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomli_w  # For writing TOML (tomllib is read-only)

from emailesque.exceptions import ConfigError

logger = logging.getLogger(__name__)


# =============================================================================
# XDG Directory Management
# =============================================================================

# Application identifier used in XDG paths
APP_NAME = "emailesque"


def get_xdg_config_home() -> Path:
    """
    Returns the XDG config directory for Emailesque.

    Respects $XDG_CONFIG_HOME if set, otherwise uses ~/.config/emailesque/
    """
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        base = Path(xdg_config)
    else:
        base = Path.home() / ".config"
    return base / APP_NAME


# =============================================================================
# Configuration Data Structures
# =============================================================================

@dataclass
class Config:
    """
    Stored sender settings.

    Attributes:
        default_profile: Profile used when none is requested.
        defaults: Options applied to every profile.
        profiles: Named option sets, keyed by profile name. A profile's
                  options override the defaults.

    Usage:
        >>> config = Config.load()
        >>> mailer = Emailesque(config.settings_for("work"))
    """
    default_profile: str = ""
    defaults: dict[str, Any] = field(default_factory=dict)
    profiles: dict[str, dict[str, Any]] = field(default_factory=dict)

    @staticmethod
    def config_file_path() -> Path:
        """Returns the path to the config file."""
        return get_xdg_config_home() / "config.toml"

    def settings_for(self, profile: str | None = None) -> dict[str, Any]:
        """
        Return the settings for a profile, merged over the defaults.

        Args:
            profile: Profile name. Falls back to default_profile, then to
                     the bare defaults.

        Raises:
            ConfigError: If the named profile doesn't exist.
        """
        name = profile or self.default_profile
        settings = dict(self.defaults)
        if not name:
            return settings

        if name not in self.profiles:
            raise ConfigError(f"Unknown profile: {name!r}")

        settings.update(self.profiles[name])
        return settings

    # -------------------------------------------------------------------------
    # Loading and Saving
    # -------------------------------------------------------------------------

    @classmethod
    def load(cls, path: Path | None = None) -> "Config":
        """
        Load configuration from the config file.

        If the config file doesn't exist, returns an empty configuration.

        Raises:
            ConfigError: If the config file exists but is invalid.
        """
        config_path = path or cls.config_file_path()

        if not config_path.exists():
            logger.debug(f"No config file at {config_path}, using defaults")
            return cls()

        try:
            with open(config_path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid config file {config_path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Cannot read config file {config_path}: {e}") from e

        return cls._from_dict(data)

    def save(self, path: Path | None = None) -> None:
        """
        Save configuration to the config file.

        Creates the config directory if it doesn't exist.
        """
        config_path = path or self.config_file_path()
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "wb") as f:
            tomli_w.dump(self._to_dict(), f)

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> "Config":
        """Create a Config object from a dictionary (parsed TOML)."""
        general = data.get("general", {})
        defaults = data.get("defaults", {})
        profiles = data.get("profiles", {})

        if not isinstance(defaults, dict) or not isinstance(profiles, dict):
            raise ConfigError("[defaults] and [profiles] must be tables")

        for name, options in profiles.items():
            if not isinstance(options, dict):
                raise ConfigError(f"Profile {name!r} must be a table")
            if "pass" in options:
                logger.warning(
                    f"Profile {name!r} stores a password in the config file; "
                    "consider the system keyring instead"
                )

        return cls(
            default_profile=general.get("default_profile", ""),
            defaults=dict(defaults),
            profiles={name: dict(options) for name, options in profiles.items()},
        )

    def _to_dict(self) -> dict[str, Any]:
        """Convert Config to a dictionary for TOML serialization."""
        return {
            "general": {"default_profile": self.default_profile},
            "defaults": dict(self.defaults),
            "profiles": {name: dict(options) for name, options in self.profiles.items()},
        }


# =============================================================================
# Utility Functions
# =============================================================================

def print_paths() -> None:
    """
    Print the config path for debugging.
    Useful for users wondering where their settings are stored.
    """
    print(f"Config:       {get_xdg_config_home()}")
    print(f"Config file:  {Config.config_file_path()}")
