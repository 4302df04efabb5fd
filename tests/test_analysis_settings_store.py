from PySide6.QtCore import QSettings

from core.domain import CriticalityMode, TraceDirection
from core.services.criticality import AnalysisConfig
from infra.settings.analysis_store import AnalysisSettingsStore


def _store_with_ini(tmp_path):
    ini_path = tmp_path / "analysis_settings.ini"
    settings = QSettings(str(ini_path), QSettings.IniFormat)
    settings.clear()
    settings.sync()
    return AnalysisSettingsStore(settings), settings


def test_analysis_settings_store_round_trip(tmp_path):
    store, _settings = _store_with_ini(tmp_path)

    store.save_mode(CriticalityMode.FLOAT_BASED)
    store.save_float_threshold(2.5)
    store.save_multi_path_enabled(True)
    store.save_selected_path_index(3)
    store.save_trace_direction("forward")
    store.save_show_near_critical(False)
    store.save_show_all_tasks(False)

    assert store.load_mode() == CriticalityMode.FLOAT_BASED
    assert store.load_float_threshold() == 2.5
    assert store.load_multi_path_enabled() is True
    assert store.load_selected_path_index() == 3
    assert store.load_trace_direction() == TraceDirection.FORWARD
    assert store.load_show_near_critical() is False
    assert store.load_show_all_tasks() is False


def test_analysis_settings_store_normalizes_invalid_values(tmp_path):
    store, settings = _store_with_ini(tmp_path)
    settings.setValue("analysis/criticality_mode", "INVALID")
    settings.setValue("analysis/float_threshold", "-4")
    settings.setValue("analysis/selected_path_index", "-3")
    settings.setValue("analysis/multi_path_enabled", "maybe")
    settings.setValue("trace/direction", "sideways")
    settings.sync()

    assert store.load_mode(default_mode=CriticalityMode.FLOAT_BASED) == CriticalityMode.FLOAT_BASED
    assert store.load_float_threshold(default_threshold=1.0) == 1.0
    assert store.load_selected_path_index(default_index=2) == 1
    assert store.load_multi_path_enabled(default_enabled=True) is True
    assert store.load_trace_direction() == TraceDirection.BACKWARD


def test_analysis_settings_store_config_round_trip(tmp_path):
    store, _settings = _store_with_ini(tmp_path)
    config = AnalysisConfig(
        mode=CriticalityMode.FLOAT_BASED,
        float_threshold=4,
        multi_path_enabled=True,
        selected_path_index=2,
        trace_direction=TraceDirection.FORWARD,
        show_all_tasks=False,
    )

    store.save_config(config)

    assert store.load_config(selected_task_id="T-1") == config.with_changes(selected_task_id="T-1")


def test_portable_store_defaults_to_user_data_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("CPL_DATA_DIR", str(tmp_path))

    store = AnalysisSettingsStore.portable()
    store.save_selected_path_index(4)

    assert (tmp_path / "analysis_settings.ini").exists()
    assert AnalysisSettingsStore.portable(tmp_path / "analysis_settings.ini").load_selected_path_index() == 4
