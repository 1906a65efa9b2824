"""
Configuration management using Dynaconf and Pydantic.

Settings are layered: Dynaconf reads `settings.toml` files and `LMMS_PKG_*`
environment variables, a project-local `settings.toml` is overlaid, and a few
explicit environment overrides win last. Pydantic validates the merged data
into a typed `PackagerSettings` object.

Command-line flags always take precedence; the CLI resolves them against these
settings and hands a plain options record to the packaging pipeline.
"""

import os
from pathlib import Path
from typing import List, Optional

import toml
from dynaconf import Dynaconf
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from rich.console import Console

console = Console(stderr=True)

USER_CONFIG_DIR = Path.home() / ".config" / "lmms-pkg"
USER_SETTINGS_FILE = USER_CONFIG_DIR / "settings.toml"

LOCAL_SETTINGS_FILE = Path("settings.toml")

settings_loader = Dynaconf(
    envvar_prefix="LMMS_PKG",
    # First wins, later overrides
    settings_files=[
        "settings.toml",
        str(USER_SETTINGS_FILE),
    ],
    load_dotenv=True,
)

# LMMS releases whose project files this tool knows how to package
SUPPORTED_VERSIONS = [
    "1.0.0",
    "1.0.1",
    "1.0.2",
    "1.0.3",
    "1.1.0",
    "1.1.1",
    "1.1.2",
    "1.1.3",
    "1.1.90",
    "1.2.0",
    "1.2.1",
    "1.2.2",
]

PACKAGE_EXTENSION = ".mmpk"


class PackagerSettings(BaseModel):
    """A Pydantic model that defines and validates all application settings."""

    # Used to turn .mmpz projects into plain XML; set it if LMMS is not on $PATH
    lmms_command: str = "lmms"
    resource_dirs: List[Path] = Field(default_factory=list)
    include_soundfonts: bool = False
    zip_package: bool = True
    supported_versions: List[str] = Field(default_factory=lambda: list(SUPPORTED_VERSIONS))
    package_extension: str = PACKAGE_EXTENSION

    model_config = ConfigDict(validate_assignment=True)


_settings_instance: Optional[PackagerSettings] = None


def _normalized_keys(data: dict) -> dict:
    # Dynaconf upper-cases keys read from the environment
    return {str(k).lower(): v for k, v in data.items()}


def get_settings() -> PackagerSettings:
    """Get the application settings as a singleton Pydantic model."""
    global _settings_instance
    if _settings_instance is None:
        try:
            config_dict = {}

            # 1) Dynaconf loader (project + user scope, LMMS_PKG_* env vars)
            dc_dict = settings_loader.as_dict() or {}
            config_dict.update(_normalized_keys(dc_dict))

            # 2) Optional project-local settings.toml overlay
            ignore_local = os.getenv("LMMS_PKG_IGNORE_LOCAL_SETTINGS") == "1"
            if (not ignore_local) and LOCAL_SETTINGS_FILE.exists():
                local_data = toml.loads(LOCAL_SETTINGS_FILE.read_text(encoding="utf-8")) or {}
                if isinstance(local_data, dict):
                    config_dict.update(_normalized_keys(local_data))

            # 3) Explicit environment overrides
            env_command = os.getenv("LMMS_PKG_LMMS_COMMAND")
            env_dirs = os.getenv("LMMS_PKG_RESOURCE_DIRS")
            if env_command:
                config_dict["lmms_command"] = env_command
            if env_dirs:
                config_dict["resource_dirs"] = [d for d in env_dirs.split(os.pathsep) if d]

            known = set(PackagerSettings.model_fields)
            _settings_instance = PackagerSettings(
                **{k: v for k, v in config_dict.items() if k in known}
            )
        except ValidationError as e:
            console.print(f"[red]Configuration error:[/red]\n{e}")
            raise

    return _settings_instance


def reset_settings():
    """Reset in-memory settings (do not delete on-disk settings)."""
    global _settings_instance
    _settings_instance = None
