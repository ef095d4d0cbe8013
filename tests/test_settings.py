import pytest

from agentchat.settings import AgentSettings, PermissionMode, UserPreferences


def test_labels_match_dropdown_text():
    assert PermissionMode.READ_ONLY.label() == "Read Only"
    assert PermissionMode.DEFAULT.label() == "Default"
    assert PermissionMode.FULL_ACCESS.label() == "Full Access"


@pytest.mark.parametrize("mode", list(PermissionMode))
def test_label_round_trip(mode):
    assert PermissionMode.from_label(mode.label()) is mode


def test_unknown_label_falls_back_to_full_access():
    assert PermissionMode.from_label("Whatever") is PermissionMode.FULL_ACCESS


def test_settings_defaults():
    s = AgentSettings()
    assert s.max_blueprint_summary_chars == 8000
    assert s.request_timeout_seconds == 300
    assert s.mcp_server_port == 47777
    assert s.auto_include_open_assets is True
    assert s.agent_args == []


def test_mcp_url_enabled_and_disabled():
    assert AgentSettings().mcp_url() == "http://127.0.0.1:47777/mcp"
    assert AgentSettings(enable_mcp_server=False).mcp_url() == ""


@pytest.mark.parametrize(
    "kwargs",
    [
        {"mcp_server_port": 80},
        {"mcp_server_port": 70000},
        {"max_blueprint_summary_chars": 10},
        {"request_timeout_seconds": -1},
        {"request_timeout_seconds": 3601},
    ],
)
def test_out_of_range_values_rejected(kwargs):
    with pytest.raises(ValueError):
        AgentSettings(**kwargs)


def test_in_memory_preferences_round_trip():
    prefs = UserPreferences()
    assert prefs.load_model() == ""
    prefs.save_model("model-a")
    prefs.save_permission_mode(PermissionMode.READ_ONLY)
    assert prefs.load_model() == "model-a"
    assert prefs.load_permission_mode() is PermissionMode.READ_ONLY


def test_missing_mode_is_full_access(tmp_path):
    prefs = UserPreferences(tmp_path / "prefs.ini")
    assert prefs.load_permission_mode() is PermissionMode.FULL_ACCESS


def test_file_preferences_survive_new_instance(tmp_path):
    path = tmp_path / "sub" / "prefs.ini"
    first = UserPreferences(path)
    first.save_permission_mode(PermissionMode.DEFAULT)
    first.save_model("model-b")
    second = UserPreferences(path)
    assert second.load_permission_mode() is PermissionMode.DEFAULT
    assert second.load_model() == "model-b"


def test_saving_model_keeps_mode(tmp_path):
    prefs = UserPreferences(tmp_path / "prefs.ini")
    prefs.save_permission_mode(PermissionMode.READ_ONLY)
    prefs.save_model("m")
    assert prefs.load_permission_mode() is PermissionMode.READ_ONLY