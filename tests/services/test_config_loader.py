import pytest

from nidsdeploy.errors import DeployError
from nidsdeploy.services.config_loader import ConfigLoader


def test_config_loader_loads_yaml_mapping(tmp_path):
    config_file = tmp_path / ".nidsdeploy.yml"
    config_file.write_text(
        "domain: example.test\nport: 8443\nskip_firewall: true\n",
        encoding="utf-8",
    )

    loader = ConfigLoader()
    loaded = loader.load(str(config_file))

    assert loaded["domain"] == "example.test"
    assert loaded["port"] == 8443
    assert loaded["skip_firewall"] is True


def test_config_loader_returns_empty_mapping_without_path():
    assert ConfigLoader().load(None) == {}


def test_config_loader_rejects_unknown_keys(tmp_path):
    config_file = tmp_path / ".nidsdeploy.yml"
    config_file.write_text("unknown_key: true\n", encoding="utf-8")

    loader = ConfigLoader()

    with pytest.raises(DeployError, match="Unknown configuration keys"):
        loader.load(str(config_file))


def test_config_loader_rejects_non_list_bundle_files(tmp_path):
    config_file = tmp_path / ".nidsdeploy.yml"
    config_file.write_text("bundle_files: index.html\n", encoding="utf-8")

    with pytest.raises(DeployError, match="bundle_files"):
        ConfigLoader().load(str(config_file))


def test_config_loader_reports_missing_file(tmp_path):
    with pytest.raises(DeployError, match="Config file not found"):
        ConfigLoader().load(str(tmp_path / "missing.yml"))


def test_config_loader_treats_null_values_as_unset(tmp_path):
    config_file = tmp_path / ".nidsdeploy.yml"
    config_file.write_text("domain: null\nemail:\nport: 8443\n", encoding="utf-8")

    assert ConfigLoader().load(str(config_file)) == {"port": 8443}


@pytest.mark.parametrize(
    "content, key",
    [
        ("skip_ssl: 'false'\n", "skip_ssl"),
        ("verbose: 1\n", "verbose"),
        ("port: '8443'\n", "port"),
        ("port: true\n", "port"),
        ("domain: 42\n", "domain"),
        ("deploy_root: [/srv/nids]\n", "deploy_root"),
        ("service_user: [www-data]\n", "service_user"),
    ],
)
def test_config_loader_rejects_mistyped_values(tmp_path, content, key):
    config_file = tmp_path / ".nidsdeploy.yml"
    config_file.write_text(content, encoding="utf-8")

    with pytest.raises(DeployError, match=key):
        ConfigLoader().load(str(config_file))


def test_config_loader_accepts_numeric_service_account(tmp_path):
    config_file = tmp_path / ".nidsdeploy.yml"
    config_file.write_text("service_user: 33\nservice_group: www-data\n", encoding="utf-8")

    assert ConfigLoader().load(str(config_file)) == {"service_user": 33, "service_group": "www-data"}
