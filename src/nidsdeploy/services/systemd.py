"""systemd helpers for nidsdeploy."""

from typing import Callable


class SystemdService:
    """Thin wrapper over ``systemctl`` calls used by several stages."""

    def __init__(self, run_cmd: Callable, logger):
        self.run_cmd = run_cmd
        self.logger = logger

    def is_active(self, unit: str) -> bool:
        result = self.run_cmd(
            ["systemctl", "is-active", "--quiet", unit],
            check=False,
            capture_output=True,
        )
        return result.returncode == 0

    def daemon_reload(self):
        self.run_cmd(["systemctl", "daemon-reload"])

    def enable(self, unit: str):
        self.run_cmd(["systemctl", "enable", unit], capture_output=True)

    def start(self, unit: str):
        self.run_cmd(["systemctl", "start", unit])

    def reload_or_restart(self, unit: str):
        self.run_cmd(["systemctl", "reload-or-restart", unit])
