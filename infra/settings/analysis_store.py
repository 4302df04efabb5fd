from __future__ import annotations

import math
from pathlib import Path

from PySide6.QtCore import QSettings

from core.domain.enums import CriticalityMode, TraceDirection
from core.services.criticality.models import AnalysisConfig
from infra.path import APP_NAME, COMPANY_NAME, default_settings_path


class AnalysisSettingsStore:
    """Adapter around QSettings for the analysis configuration kept between sessions."""

    ORG_NAME = COMPANY_NAME
    APP_NAME = APP_NAME

    _KEY_MODE = "analysis/criticality_mode"
    _KEY_FLOAT_THRESHOLD = "analysis/float_threshold"
    _KEY_SHOW_NEAR_CRITICAL = "analysis/show_near_critical"
    _KEY_MULTI_PATH = "analysis/multi_path_enabled"
    _KEY_PATH_INDEX = "analysis/selected_path_index"
    _KEY_TRACE_DIRECTION = "trace/direction"
    _KEY_SHOW_ALL_TASKS = "trace/show_all_tasks"

    def __init__(self, settings: QSettings | None = None) -> None:
        self._settings = settings or QSettings(self.ORG_NAME, self.APP_NAME)

    @classmethod
    def portable(cls, ini_path: str | Path | None = None) -> "AnalysisSettingsStore":
        """INI-backed store under the user data dir instead of the platform registry."""
        target = Path(ini_path) if ini_path is not None else default_settings_path()
        return cls(QSettings(str(target), QSettings.IniFormat))

    @staticmethod
    def _as_bool(raw: object, default: bool) -> bool:
        if isinstance(raw, bool):
            return raw
        if raw is None:
            return default
        text = str(raw).strip().lower()
        if text in {"1", "true", "yes", "on"}:
            return True
        if text in {"0", "false", "no", "off"}:
            return False
        return default

    def load_mode(self, default_mode: CriticalityMode = CriticalityMode.LONGEST_PATH) -> CriticalityMode:
        raw = str(self._settings.value(self._KEY_MODE, default_mode.value)).strip()
        valid = {mode.value: mode for mode in CriticalityMode}
        return valid.get(raw, default_mode)

    def save_mode(self, mode: CriticalityMode | str) -> None:
        self._settings.setValue(self._KEY_MODE, CriticalityMode.parse(mode).value)
        self._settings.sync()

    def load_float_threshold(self, default_threshold: float = 0.0) -> float:
        raw = self._settings.value(self._KEY_FLOAT_THRESHOLD, default_threshold)
        try:
            value = float(raw)
        except (TypeError, ValueError):
            return default_threshold
        if math.isnan(value) or math.isinf(value) or value < 0:
            return default_threshold
        return value

    def save_float_threshold(self, threshold: float) -> None:
        self._settings.setValue(self._KEY_FLOAT_THRESHOLD, max(0.0, float(threshold or 0.0)))
        self._settings.sync()

    def load_show_near_critical(self, default_enabled: bool = True) -> bool:
        return self._as_bool(self._settings.value(self._KEY_SHOW_NEAR_CRITICAL, default_enabled), default_enabled)

    def save_show_near_critical(self, enabled: bool) -> None:
        self._settings.setValue(self._KEY_SHOW_NEAR_CRITICAL, bool(enabled))
        self._settings.sync()

    def load_multi_path_enabled(self, default_enabled: bool = False) -> bool:
        return self._as_bool(self._settings.value(self._KEY_MULTI_PATH, default_enabled), default_enabled)

    def save_multi_path_enabled(self, enabled: bool) -> None:
        self._settings.setValue(self._KEY_MULTI_PATH, bool(enabled))
        self._settings.sync()

    def load_selected_path_index(self, default_index: int = 1) -> int:
        raw = self._settings.value(self._KEY_PATH_INDEX, default_index)
        try:
            idx = int(raw)
        except (TypeError, ValueError):
            idx = default_index
        return max(1, idx)

    def save_selected_path_index(self, index: int) -> None:
        self._settings.setValue(self._KEY_PATH_INDEX, max(1, int(index)))
        self._settings.sync()

    def load_trace_direction(self, default_direction: TraceDirection = TraceDirection.BACKWARD) -> TraceDirection:
        raw = str(self._settings.value(self._KEY_TRACE_DIRECTION, default_direction.value)).strip().lower()
        valid = {direction.value: direction for direction in TraceDirection}
        return valid.get(raw, default_direction)

    def save_trace_direction(self, direction: TraceDirection | str) -> None:
        self._settings.setValue(self._KEY_TRACE_DIRECTION, TraceDirection.parse(direction).value)
        self._settings.sync()

    def load_show_all_tasks(self, default_enabled: bool = True) -> bool:
        return self._as_bool(self._settings.value(self._KEY_SHOW_ALL_TASKS, default_enabled), default_enabled)

    def save_show_all_tasks(self, enabled: bool) -> None:
        self._settings.setValue(self._KEY_SHOW_ALL_TASKS, bool(enabled))
        self._settings.sync()

    def load_config(self, selected_task_id: str | None = None) -> AnalysisConfig:
        """Persisted configuration; the selected task comes from the host, never from disk."""
        return AnalysisConfig(
            mode=self.load_mode(),
            float_threshold=self.load_float_threshold(),
            show_near_critical=self.load_show_near_critical(),
            multi_path_enabled=self.load_multi_path_enabled(),
            selected_path_index=self.load_selected_path_index(),
            selected_task_id=selected_task_id,
            trace_direction=self.load_trace_direction(),
            show_all_tasks=self.load_show_all_tasks(),
        )

    def save_config(self, config: AnalysisConfig) -> None:
        self.save_mode(config.mode)
        self.save_float_threshold(config.float_threshold)
        self.save_show_near_critical(config.show_near_critical)
        self.save_multi_path_enabled(config.multi_path_enabled)
        self.save_selected_path_index(config.selected_path_index)
        self.save_trace_direction(config.trace_direction)
        self.save_show_all_tasks(config.show_all_tasks)
