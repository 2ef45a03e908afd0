"""Path resolver for bundled resources and per-user files.

Shaders ship inside the package (or inside PyInstaller's extraction folder in
a frozen build). The user configuration lives in the home directory.
"""

import sys
from pathlib import Path

from mipview.constants import CONFIG_DIR_NAME, CONFIG_FILE_NAME


def get_package_dir() -> Path:
    """Get the directory of the installed mipview package."""
    return Path(__file__).resolve().parent.parent


def get_shader_dir() -> Path:
    """Get the shader directory path.
    
    In frozen mode the shaders are extracted to a temporary location by
    PyInstaller. Otherwise they sit next to the package sources.
    """
    if getattr(sys, 'frozen', False):
        return Path(sys._MEIPASS) / "shaders"
    return get_package_dir() / "shaders"


def get_config_dir() -> Path:
    """Get the per-user configuration directory (~/.mipview)."""
    return Path.home() / CONFIG_DIR_NAME


def get_config_path() -> Path:
    """Get the default configuration file path."""
    return get_config_dir() / CONFIG_FILE_NAME
