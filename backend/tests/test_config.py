import pytest

from config import _env_flag


@pytest.mark.parametrize('raw', ['0', 'false', 'FALSE', 'False', 'no', 'No', 'off', ' OFF '])
def test_env_flag_false_spellings(monkeypatch, raw):
    monkeypatch.setenv('SIMULATION_ENABLED', raw)
    assert _env_flag('SIMULATION_ENABLED', True) is False


@pytest.mark.parametrize('raw', ['1', 'true', 'TRUE', 'yes', 'on'])
def test_env_flag_true_spellings(monkeypatch, raw):
    monkeypatch.setenv('SIMULATION_ENABLED', raw)
    assert _env_flag('SIMULATION_ENABLED', False) is True


@pytest.mark.parametrize('raw', [None, '', '   '])
def test_env_flag_unset_uses_default(monkeypatch, raw):
    if raw is None:
        monkeypatch.delenv('SIMULATION_ENABLED', raising=False)
    else:
        monkeypatch.setenv('SIMULATION_ENABLED', raw)
    assert _env_flag('SIMULATION_ENABLED', True) is True
    assert _env_flag('SIMULATION_ENABLED', False) is False
