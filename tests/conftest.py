import platformdirs
import pytest
from google.auth.transport.requests import AuthorizedSession

from gcs_resource.constants import CONFIG_PATH_ENV_VAR, LOG_LEVEL_ENV_VAR
from gcs_resource.storage.interfaces import StorageClient

_NETWORK_BLOCK_MSG = (
    "Network access is blocked during tests. Mock the StorageClient or storage.Client."
)


def _block_network(*_args, **_kwargs):
    """
    Prevent calls to Google APIs in tests by raising a RuntimeError.

    Raises:
        RuntimeError: with `_NETWORK_BLOCK_MSG` indicating that network access is blocked during tests.
    """
    raise RuntimeError(_NETWORK_BLOCK_MSG)


def pytest_configure(config):
    """
    Register the markers used across the suite.

    Parameters:
        config: pytest.Config
            The pytest configuration object used to register markers.
    """
    for marker in (
        "unit: fast tests without I/O beyond tmp_path",
        "integration: tests that run a whole operation through the CLI",
        "versions: version parsing, ordering and selection",
        "storage: storage backend behaviour",
        "configuration: source validation and local defaults",
        "files: filesystem and archive handling",
    ):
        config.addinivalue_line("markers", marker)


@pytest.fixture(autouse=True)
def _isolate_test_environment(tmp_path_factory, monkeypatch):
    """
    Point platformdirs and the XDG variables at a temporary layout and clear
    the environment variables that change gcs-resource behaviour.
    """
    base = tmp_path_factory.mktemp("gcs-resource")
    config_dir = base / "config"
    log_dir = base / "log"
    for path in (config_dir, log_dir):
        path.mkdir(parents=True, exist_ok=True)

    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_dir))
    monkeypatch.delenv(CONFIG_PATH_ENV_VAR, raising=False)
    monkeypatch.delenv(LOG_LEVEL_ENV_VAR, raising=False)
    monkeypatch.delenv("GOOGLE_APPLICATION_CREDENTIALS", raising=False)

    monkeypatch.setattr(
        platformdirs, "user_config_dir", lambda *_args, **_kwargs: str(config_dir)
    )
    monkeypatch.setattr(
        platformdirs, "user_log_dir", lambda *_args, **_kwargs: str(log_dir)
    )


@pytest.fixture(autouse=True)
def _block_google_network(monkeypatch):
    """Replace the authorized HTTP session used by google-cloud-storage with a blocker."""
    monkeypatch.setattr(AuthorizedSession, "request", _block_network)


@pytest.fixture
def mock_storage(mocker):
    """A StorageClient double; configure return values per test."""
    storage = mocker.Mock(spec=StorageClient)
    storage.list_object_names.return_value = []
    storage.list_object_generations.return_value = []
    storage.is_versioned.return_value = True
    return storage


@pytest.fixture
def regexp_source():
    return {"bucket": "bucket-name", "regexp": "folder/file-(.*).tgz"}


@pytest.fixture
def versioned_source():
    return {"bucket": "bucket-name", "versioned_file": "folder/version"}
