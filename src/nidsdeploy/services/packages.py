"""Package manager helpers for nidsdeploy."""

from typing import Callable, Iterable

from nidsdeploy.errors import DeployError, InstallError
from nidsdeploy.errors_catalog import actionable_error


class PackageService:
    """Installs Debian packages through apt-get.

    apt-get already treats installed packages as a no-op, so callers can
    request the full list on every run.
    """

    APT_ENV = {"DEBIAN_FRONTEND": "noninteractive"}

    def __init__(self, run_cmd: Callable, logger, retry_count: int = 1, retry_backoff_seconds: float = 5.0):
        self.run_cmd = run_cmd
        self.logger = logger
        self.retry_count = retry_count
        self.retry_backoff_seconds = retry_backoff_seconds
        self._index_updated = False

    def update_index(self):
        if self._index_updated:
            return
        try:
            self.run_cmd(
                ["apt-get", "update", "-qq"],
                capture_output=True,
                retry_count=self.retry_count,
                retry_backoff_seconds=self.retry_backoff_seconds,
                env=self.APT_ENV,
            )
        except DeployError as exc:
            raise InstallError(actionable_error("package_install_failed", error=str(exc))) from exc
        self._index_updated = True

    def install(self, packages: Iterable[str]):
        package_list = list(packages)
        if not package_list:
            return

        self.update_index()
        self.logger.debug("Installing packages: %s", ", ".join(package_list))
        try:
            self.run_cmd(
                ["apt-get", "install", "-y", "-qq"] + package_list,
                capture_output=True,
                env=self.APT_ENV,
            )
        except DeployError as exc:
            raise InstallError(actionable_error("package_install_failed", error=str(exc))) from exc
