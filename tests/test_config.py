import pytest
from pathlib import Path
from pydantic import ValidationError

from pyda.core.config import ServerConfig, load_config_from_env
from pyda.core.da.avail.config import AvailConfig


def test_config_defaults():
    """Test that the configuration has expected defaults."""
    config = ServerConfig()

    assert config.host == "127.0.0.1"
    assert config.port == 1234
    assert config.backend == "avail"
    assert config.kv_path == Path.home() / ".pyda" / "kv.db"
    assert config.da_config_file is None
    assert config.read_da_config() == b""


def test_config_override(monkeypatch, tmp_path):
    """Test that environment variables override defaults."""
    monkeypatch.setenv("PYDA_PORT", "4321")
    monkeypatch.setenv("PYDA_BACKEND", "mock")
    monkeypatch.setenv("PYDA_KV_PATH", str(tmp_path / "kv.db"))
    monkeypatch.setenv("PYDA_REQUEST_TIMEOUT", "12.5")

    config = load_config_from_env()

    assert config.port == 4321
    assert config.backend == "mock"
    assert config.kv_path == tmp_path / "kv.db"
    assert config.request_timeout == 12.5


def test_config_validation():
    """Test that configuration values are validated."""
    with pytest.raises(ValueError):
        ServerConfig(port=70000)

    with pytest.raises(ValueError):
        ServerConfig(request_timeout=0)

    config = ServerConfig()
    with pytest.raises(ValueError):
        config.port = -1


def test_read_da_config(tmp_path):
    """Test that the backend config file is read as raw bytes."""
    path = tmp_path / "avail.json"
    path.write_bytes(b'{"app_id": 1}')

    assert ServerConfig(da_config_file=path).read_da_config() == b'{"app_id": 1}'


def test_avail_config_from_json():
    """Test that avail config parses the documented JSON fields."""
    config = AvailConfig.model_validate_json(
        b'{"base_url": "http://lc/v1", "seed": "s", "api_url": "http://node", '
        b'"app_id": 4, "confidence": 95.0}'
    )

    assert config.base_url == "http://lc/v1"
    assert config.app_id == 4
    assert config.confidence == 95.0
    assert config.retrieve_max_attempts == 10


def test_avail_config_is_immutable():
    config = AvailConfig()

    with pytest.raises(ValidationError):
        config.confidence = 10.0


@pytest.mark.parametrize(
    "field,value",
    [("confidence", -1), ("confidence", 100.5), ("request_timeout", 0), ("retrieve_max_attempts", 0)],
)
def test_avail_config_validation(field, value):
    with pytest.raises(ValidationError):
        AvailConfig(**{field: value})
