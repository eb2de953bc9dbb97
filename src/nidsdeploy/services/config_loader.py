"""Configuration loader for nidsdeploy."""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from nidsdeploy.errors import DeployError


class ConfigLoader:
    """Loads YAML configuration files for CLI defaults."""

    SUPPORTED_KEYS = {
        "domain",
        "email",
        "port",
        "skip_ssl",
        "skip_firewall",
        "deploy_root",
        "backup_root",
        "log_file",
        "bundle_dir",
        "bundle_files",
        "service_user",
        "service_group",
        "verbose",
    }
    STRING_KEYS = ("domain", "email", "deploy_root", "backup_root", "log_file", "bundle_dir")
    ACCOUNT_KEYS = ("service_user", "service_group")
    FLAG_KEYS = ("skip_ssl", "skip_firewall", "verbose")

    def load(self, config_path: Optional[str]) -> Dict[str, Any]:
        if not config_path:
            return {}

        path = Path(config_path)
        if not path.exists():
            raise DeployError(f"Config file not found: {config_path}")

        try:
            parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, OSError) as exc:
            raise DeployError(f"Invalid config file '{config_path}': {exc}") from exc

        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            raise DeployError("Config file must contain a YAML mapping at the root.")

        unknown = sorted(set(parsed.keys()) - self.SUPPORTED_KEYS)
        if unknown:
            unknown_list = ", ".join(unknown)
            raise DeployError(f"Unknown configuration keys: {unknown_list}")

        # An explicit null leaves the key unset.
        parsed = {key: value for key, value in parsed.items() if value is not None}
        self._check_types(parsed)
        return parsed

    def _check_types(self, parsed: Dict[str, Any]):
        for key in self.STRING_KEYS:
            if key in parsed and not isinstance(parsed[key], str):
                raise DeployError(f"'{key}' must be a string.")
        for key in self.ACCOUNT_KEYS:
            value = parsed.get(key)
            if value is not None and (isinstance(value, bool) or not isinstance(value, (str, int))):
                raise DeployError(f"'{key}' must be an account name or numeric id.")
        for key in self.FLAG_KEYS:
            if key in parsed and not isinstance(parsed[key], bool):
                raise DeployError(f"'{key}' must be true or false.")

        port = parsed.get("port")
        if port is not None and (isinstance(port, bool) or not isinstance(port, int)):
            raise DeployError("'port' must be an integer.")

        bundle_files = parsed.get("bundle_files")
        if bundle_files is not None and (
            not isinstance(bundle_files, list)
            or not all(isinstance(item, str) and item.strip() for item in bundle_files)
        ):
            raise DeployError("'bundle_files' must be a list of file or directory names.")
