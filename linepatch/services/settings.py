"""
Application settings management.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, asdict
from enum import Enum, auto
from pathlib import Path
from typing import Any, Optional

from linepatch.core.diff.line_diff import DiffAlgorithm
from linepatch.core.patch.caret import CaretMode


class NewlineStyle(Enum):
    """Newline written for inserted lines that have none of their own."""
    LF = auto()
    CRLF = auto()
    CR = auto()

    @property
    def sequence(self) -> str:
        return {
            NewlineStyle.LF: '\n',
            NewlineStyle.CRLF: '\r\n',
            NewlineStyle.CR: '\r',
        }[self]


@dataclass
class FormatterSettings:
    """Settings for the external formatter process."""
    # Command line; "{path}" is replaced with the file path when known
    command: list[str] = field(default_factory=list)
    timeout: float = 30.0
    working_dir: str = ""
    encoding: str = 'utf-8'


@dataclass
class PatchSettings:
    """Settings for applying formatted text to a buffer."""
    undo_name: str = "Reformat"
    default_newline: NewlineStyle = NewlineStyle.LF
    verify_snapshot: bool = True
    caret_mode: CaretMode = CaretMode.CLAMP
    desync_retries: int = 1
    algorithm: DiffAlgorithm = DiffAlgorithm.MYERS


@dataclass
class ApplicationSettings:
    """Main application settings container."""
    formatter: FormatterSettings = field(default_factory=FormatterSettings)
    patch: PatchSettings = field(default_factory=PatchSettings)


class SettingsManager:
    """Manager for loading/saving application settings."""

    def __init__(self, settings_path: Optional[Path] = None):
        self.settings_path = Path(settings_path) if settings_path else self._get_default_path()
        self._settings: Optional[ApplicationSettings] = None

    @staticmethod
    def _get_default_path() -> Path:
        """Get the default settings file path."""
        if os.name == 'nt':
            # Windows
            app_data = os.environ.get('APPDATA', os.path.expanduser('~'))
            return Path(app_data) / 'LinePatch' / 'settings.json'
        else:
            # Linux/Mac
            config_home = os.environ.get('XDG_CONFIG_HOME',
                                         os.path.expanduser('~/.config'))
            return Path(config_home) / 'linepatch' / 'settings.json'

    @property
    def settings(self) -> ApplicationSettings:
        """Get current settings, loading from disk if needed."""
        if self._settings is None:
            self._settings = self.load()
        return self._settings

    def load(self) -> ApplicationSettings:
        """Load settings from disk."""
        if not self.settings_path.exists():
            return ApplicationSettings()

        try:
            with open(self.settings_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            return self._from_dict(data)
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logging.warning(f"SettingsManager - Failed to load {self.settings_path}: {e}")
            return ApplicationSettings()

    def save(self, settings: Optional[ApplicationSettings] = None) -> bool:
        """Save settings to disk."""
        settings = settings or self._settings
        if settings is None:
            return False

        try:
            self.settings_path.parent.mkdir(parents=True, exist_ok=True)

            with open(self.settings_path, 'w', encoding='utf-8') as f:
                json.dump(self._to_dict(settings), f, indent=2)

            self._settings = settings
            return True

        except OSError as e:
            logging.error(f"SettingsManager - Failed to save {self.settings_path}: {e}")
            return False

    def _to_dict(self, settings: ApplicationSettings) -> dict:
        """Convert settings to dictionary for JSON serialization."""
        def convert(obj: Any) -> Any:
            if isinstance(obj, Enum):
                return obj.name
            elif isinstance(obj, list):
                return [convert(item) for item in obj]
            elif isinstance(obj, dict):
                return {k: convert(v) for k, v in obj.items()}
            else:
                return obj

        return convert(asdict(settings))

    def _from_dict(self, data: dict) -> ApplicationSettings:
        """Convert dictionary back to settings objects."""
        def get_enum(enum_class: type, value: Any, default: Enum) -> Enum:
            if isinstance(value, str):
                try:
                    return enum_class[value.upper()]
                except KeyError:
                    return default
            return default

        formatter_data = data.get('formatter', {})
        defaults = FormatterSettings()
        command = formatter_data.get('command', defaults.command)
        if isinstance(command, str):
            command = command.split()

        formatter = FormatterSettings(
            command=list(command),
            timeout=float(formatter_data.get('timeout', defaults.timeout)),
            working_dir=formatter_data.get('working_dir', defaults.working_dir),
            encoding=formatter_data.get('encoding', defaults.encoding),
        )

        patch_data = data.get('patch', {})
        patch_defaults = PatchSettings()
        patch = PatchSettings(
            undo_name=patch_data.get('undo_name', patch_defaults.undo_name),
            default_newline=get_enum(
                NewlineStyle, patch_data.get('default_newline'), patch_defaults.default_newline
            ),
            verify_snapshot=bool(patch_data.get('verify_snapshot', patch_defaults.verify_snapshot)),
            caret_mode=get_enum(
                CaretMode, patch_data.get('caret_mode'), patch_defaults.caret_mode
            ),
            desync_retries=max(0, int(patch_data.get('desync_retries', patch_defaults.desync_retries))),
            algorithm=get_enum(
                DiffAlgorithm, patch_data.get('algorithm'), patch_defaults.algorithm
            ),
        )

        return ApplicationSettings(
            formatter=formatter,
            patch=patch,
        )
