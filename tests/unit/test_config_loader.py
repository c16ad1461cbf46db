"""Test configuration loader."""

from pathlib import Path

import pytest

from audiobatch.infrastructure.config import ConfigLoader, BatchConfig
from audiobatch.domain.exceptions import ConfigurationError


ENV_VARS = [
    'AUDIOBATCH_API_KEY', 'AUDIOBATCH_WORKFLOW', 'AUDIOBATCH_INPUT', 'AUDIOBATCH_OUTPUT',
    'AUDIOBATCH_CONCURRENCY', 'AUDIOBATCH_POLL_INTERVAL', 'AUDIOBATCH_POLL_TIMEOUT',
    'AUDIOBATCH_API_BASE', 'AUDIOBATCH_ABORT_PENDING', 'AUDIOBATCH_LOG_FILE',
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults(tmp_path):
    config = ConfigLoader(tmp_path / "missing.yaml").load()

    assert config.concurrency == 5
    assert config.poll_interval == 1.0
    assert config.poll_timeout is None
    assert config.extensions == ('mp3', 'wav', 'm4a')
    assert config.abort_pending_on_cancel is False
    assert config.output_folder == Path("./output")


def test_config_loader_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv('AUDIOBATCH_API_KEY', 'secret-key')
    monkeypatch.setenv('AUDIOBATCH_WORKFLOW', 'stems')
    monkeypatch.setenv('AUDIOBATCH_CONCURRENCY', '3')
    monkeypatch.setenv('AUDIOBATCH_ABORT_PENDING', 'yes')

    config = ConfigLoader(tmp_path / "missing.yaml").load()

    assert config.api_key == 'secret-key'
    assert config.workflow_id == 'stems'
    assert config.concurrency == 3
    assert config.abort_pending_on_cancel is True


def test_precedence_file_env_overrides(monkeypatch, tmp_path):
    config_file = tmp_path / "audiobatch.yaml"
    config_file.write_text(
        "workflow_id: from-file\n"
        "concurrency: 2\n"
        "poll_interval: 0.5\n"
        "input_folder: /data/in\n"
    )
    monkeypatch.setenv('AUDIOBATCH_CONCURRENCY', '4')

    config = ConfigLoader(config_file).load(overrides={'concurrency': 8, 'workflow_id': None})

    assert config.workflow_id == 'from-file'
    assert config.concurrency == 8
    assert config.poll_interval == 0.5
    assert config.input_folder == Path('/data/in')


def test_invalid_env_number_ignored(monkeypatch, tmp_path):
    monkeypatch.setenv('AUDIOBATCH_CONCURRENCY', 'lots')

    config = ConfigLoader(tmp_path / "missing.yaml").load()

    assert config.concurrency == 5


def test_unknown_keys_dropped(tmp_path):
    config_file = tmp_path / "audiobatch.yaml"
    config_file.write_text("concurrency: 2\nspinner_color: blue\n")

    config = ConfigLoader(config_file).load()

    assert config.concurrency == 2


def test_invalid_yaml(tmp_path):
    config_file = tmp_path / "audiobatch.yaml"
    config_file.write_text("concurrency: [1, 2\n")

    with pytest.raises(ConfigurationError):
        ConfigLoader(config_file).load()


def test_non_mapping_yaml(tmp_path):
    config_file = tmp_path / "audiobatch.yaml"
    config_file.write_text("- a\n- b\n")

    with pytest.raises(ConfigurationError):
        ConfigLoader(config_file).load()


@pytest.mark.parametrize("kwargs", [
    {"concurrency": 0},
    {"concurrency": "5"},
    {"poll_interval": 0},
    {"poll_timeout": -1},
    {"extensions": ()},
])
def test_config_validation(kwargs):
    with pytest.raises(ConfigurationError):
        BatchConfig(**kwargs)


def test_extensions_from_string():
    config = BatchConfig(extensions="mp3, flac")
    assert config.extensions == ('mp3', 'flac')


def test_require_credentials():
    with pytest.raises(ConfigurationError, match="api_key"):
        BatchConfig(workflow_id='wf').require_credentials()
    with pytest.raises(ConfigurationError, match="workflow_id"):
        BatchConfig(api_key='key').require_credentials()
    BatchConfig(api_key='key', workflow_id='wf').require_credentials()


def test_masked_hides_key():
    masked = BatchConfig(api_key='abcdef123456', workflow_id='wf').masked()
    assert masked['api_key'] == 'abcd***'
    assert masked['output_folder'] == 'output'
