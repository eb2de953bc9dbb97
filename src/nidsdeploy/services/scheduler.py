"""Crontab management for jobs installed by the stages."""

from typing import Callable, List

from nidsdeploy.constants import CRON_TAG_PREFIX
from nidsdeploy.errors import DeployError


class CrontabService:
    """Keeps one tagged root crontab line per job.

    Each job line ends with ``# nidsdeploy:<tag>``. Installing a job drops
    any line carrying the same tag before appending the new one, so repeated
    runs replace entries instead of stacking them, and lines owned by other
    jobs or by the operator are preserved.
    """

    def __init__(self, run_cmd: Callable, logger):
        self.run_cmd = run_cmd
        self.logger = logger

    @staticmethod
    def marker(tag: str) -> str:
        return f"# {CRON_TAG_PREFIX}:{tag}"

    def read_lines(self) -> List[str]:
        result = self.run_cmd(["crontab", "-l"], check=False, capture_output=True)
        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            if "no crontab" in stderr.lower():
                return []
            raise DeployError(f"Could not read the root crontab: {stderr or result.returncode}")
        return [line for line in (result.stdout or "").splitlines()]

    def install(self, tag: str, schedule: str, command: str) -> bool:
        """Install or replace the job; returns False when it was already current."""
        marker = self.marker(tag)
        entry = f"{schedule} {command} {marker}"
        current = self.read_lines()

        kept = [line for line in current if not line.rstrip().endswith(marker)]
        desired = kept + [entry]
        if desired == current:
            self.logger.debug("Cron job '%s' already installed.", tag)
            return False

        self.write_lines(desired)
        self.logger.debug("Cron job '%s' installed: %s", tag, entry)
        return True

    def write_lines(self, lines: List[str]):
        content = "\n".join(lines).rstrip("\n") + "\n"
        self.run_cmd(["crontab", "-"], input_text=content)
