import os

import pytest

from gcs_resource.config import default_config_path, load_config, merge_source_defaults
from gcs_resource.constants import CONFIG_PATH_ENV_VAR
from gcs_resource.exceptions import ConfigFileError, ConfigurationError

pytestmark = [pytest.mark.unit, pytest.mark.configuration]


def test_missing_default_file_is_empty():
    assert not os.path.exists(default_config_path())
    assert load_config() == {}


def test_default_file_is_loaded():
    path = default_config_path()
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write("source:\n  bucket: default-bucket\nlog_level: DEBUG\n")

    assert load_config() == {"source": {"bucket": "default-bucket"}, "log_level": "DEBUG"}


def test_explicit_path(tmp_path):
    path = tmp_path / "custom.yaml"
    path.write_text("source:\n  project: my-project\n")

    assert load_config(str(path)) == {"source": {"project": "my-project"}}


def test_env_var_path(tmp_path, monkeypatch):
    path = tmp_path / "env.yaml"
    path.write_text("log_level: WARNING\n")
    monkeypatch.setenv(CONFIG_PATH_ENV_VAR, str(path))

    assert load_config() == {"log_level": "WARNING"}


def test_explicit_missing_path(tmp_path):
    with pytest.raises(ConfigFileError) as exc_info:
        load_config(str(tmp_path / "missing.yaml"))

    assert isinstance(exc_info.value, ConfigurationError)
    assert exc_info.value.details == str(tmp_path / "missing.yaml")


def test_empty_file(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")

    assert load_config(str(path)) == {}


@pytest.mark.parametrize(
    "content",
    ["source: [unclosed\n", "- just\n- a list\n", "source: not-a-mapping\n"],
)
def test_malformed_files(tmp_path, content):
    path = tmp_path / "bad.yaml"
    path.write_text(content)

    with pytest.raises(ConfigFileError):
        load_config(str(path))


class TestMergeSourceDefaults:
    def test_request_values_win(self):
        payload = {"source": {"bucket": "request-bucket", "regexp": "(.*)"}}
        config = {"source": {"bucket": "default-bucket", "json_key": "{}"}}

        assert merge_source_defaults(payload, config) == {
            "source": {"bucket": "request-bucket", "regexp": "(.*)", "json_key": "{}"}
        }

    def test_missing_source_gets_defaults(self):
        payload = {"version": {"path": "p"}}

        assert merge_source_defaults(payload, {"source": {"bucket": "b"}}) == {
            "version": {"path": "p"},
            "source": {"bucket": "b"},
        }

    def test_payload_is_not_modified(self):
        payload = {"source": {"regexp": "(.*)"}}

        merge_source_defaults(payload, {"source": {"bucket": "b"}})

        assert payload == {"source": {"regexp": "(.*)"}}

    @pytest.mark.parametrize("payload", [["list"], {"source": "text"}, None])
    def test_unmergeable_payloads_are_returned_unchanged(self, payload):
        assert merge_source_defaults(payload, {"source": {"bucket": "b"}}) == payload

    def test_no_defaults(self):
        payload = {"source": {"bucket": "b"}}

        assert merge_source_defaults(payload, {}) is payload
