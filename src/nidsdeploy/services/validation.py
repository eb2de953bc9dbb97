"""Input and reachability validation helpers for nidsdeploy."""

import os

import requests

from nidsdeploy.constants import HTTP_PROBE_TIMEOUT, MAX_PORT, MIN_PORT
from nidsdeploy.errors import DeployError, ValidationError
from nidsdeploy.models import RunConfig


class ValidationService:
    """Validates run inputs and probes the deployed site."""

    def __init__(self, requests_module=requests, timeout: float = HTTP_PROBE_TIMEOUT):
        self.requests = requests_module
        self.timeout = timeout

    def validate_run_config(self, config: RunConfig):
        if config.custom_port is not None:
            if isinstance(config.custom_port, bool) or not isinstance(config.custom_port, int):
                raise DeployError(f"Custom port must be an integer, got {config.custom_port!r}.")
            if not MIN_PORT <= config.custom_port <= MAX_PORT:
                raise DeployError(
                    f"Custom port {config.custom_port} is outside the range {MIN_PORT}-{MAX_PORT}."
                )

        if not config.bundle_files:
            raise DeployError("At least one bundle file must be configured.")

        for label, path in (
            ("deploy_root", config.deploy_root),
            ("backup_root", config.backup_root),
            ("log_file", config.log_file),
        ):
            if not path or not os.path.isabs(path):
                raise DeployError(f"{label} must be an absolute path, got {path!r}.")

        if os.path.abspath(config.backup_root).startswith(
            os.path.abspath(config.deploy_root).rstrip(os.sep) + os.sep
        ):
            raise DeployError("backup_root must not live inside deploy_root.")

    def probe_url(self, url: str) -> int:
        """GET ``url`` without following redirects; return the status code or raise."""
        try:
            response = self.requests.get(url, timeout=self.timeout, allow_redirects=False)
        except self.requests.RequestException as exc:
            raise ValidationError(f"HTTP probe of {url} failed: {exc}") from exc

        status = response.status_code
        response.close()
        if status >= 400:
            raise ValidationError(f"HTTP probe of {url} returned status {status}.")
        return status
