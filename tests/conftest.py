import os
import subprocess
from datetime import datetime

import pytest
import requests

from nidsdeploy.errors import DeployError
from nidsdeploy.models import HostLayout, RunConfig, RunVersion
from nidsdeploy.services.filesystem import FileSystemService
from nidsdeploy.services.packages import PackageService
from nidsdeploy.services.reporter import StatusReporter
from nidsdeploy.services.scheduler import CrontabService
from nidsdeploy.services.systemd import SystemdService
from nidsdeploy.services.validation import ValidationService
from nidsdeploy.stages.base import StageContext


class DummyLogger:
    def debug(self, *_args, **_kwargs):
        return None

    def info(self, *_args, **_kwargs):
        return None

    def warning(self, *_args, **_kwargs):
        return None

    def exception(self, *_args, **_kwargs):
        return None


class FakeRunner:
    """Records host commands and answers with canned results.

    ``responses`` maps a command prefix tuple to ``(returncode, stdout, stderr)``
    and ``errors`` maps a prefix to an exception raised instead of running.
    The root crontab is simulated in memory; ``crontab_read_error`` makes
    ``crontab -l`` fail with that stderr.
    """

    def __init__(self, responses=None):
        self.calls = []
        self.responses = dict(responses or {})
        self.errors = {}
        self.options = []
        self.crontab = None
        self.crontab_writes = 0
        self.crontab_read_error = None

    def run(self, cmd, check=True, capture_output=False, input_text=None, **kwargs):
        self.calls.append(list(cmd))
        self.options.append((list(cmd), kwargs))

        for prefix, error in self.errors.items():
            if tuple(cmd[: len(prefix)]) == prefix:
                raise error

        if cmd[:2] == ["crontab", "-l"]:
            if self.crontab_read_error is not None:
                return subprocess.CompletedProcess(cmd, 1, "", self.crontab_read_error)
            if self.crontab is None:
                return subprocess.CompletedProcess(cmd, 1, "", "no crontab for root")
            return subprocess.CompletedProcess(cmd, 0, self.crontab, "")
        if cmd[:2] == ["crontab", "-"]:
            self.crontab = input_text
            self.crontab_writes += 1
            return subprocess.CompletedProcess(cmd, 0, "", "")

        returncode, stdout, stderr = 0, "", ""
        for prefix, response in self.responses.items():
            if tuple(cmd[: len(prefix)]) == prefix:
                returncode, stdout, stderr = response
                break

        if returncode != 0 and check:
            raise DeployError(f"Command failed ({returncode}): {' '.join(cmd)}\n{stderr}")
        return subprocess.CompletedProcess(cmd, returncode, stdout, stderr)

    def commands(self, *prefix):
        return [call for call in self.calls if tuple(call[: len(prefix)]) == prefix]

    def options_for(self, *prefix):
        return [kwargs for cmd, kwargs in self.options if tuple(cmd[: len(prefix)]) == prefix]

    def cron_lines(self):
        return [line for line in (self.crontab or "").splitlines() if line.strip()]


class FakeResponse:
    def __init__(self, status_code):
        self.status_code = status_code

    def close(self):
        return None


class FakeRequests:
    RequestException = requests.RequestException

    def __init__(self, status_code=200, error=None):
        self.status_code = status_code
        self.error = error
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error is not None:
            raise self.error
        return FakeResponse(self.status_code)


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def fake_requests():
    return FakeRequests()


@pytest.fixture
def as_root(monkeypatch):
    monkeypatch.setattr(os, "geteuid", lambda: 0, raising=False)


@pytest.fixture
def layout(tmp_path):
    host = tmp_path / "host"
    return HostLayout(
        sites_available_dir=str(host / "etc" / "nginx" / "sites-available"),
        sites_enabled_dir=str(host / "etc" / "nginx" / "sites-enabled"),
        htpasswd_file=str(host / "etc" / "nginx" / ".htpasswd"),
        nginx_log_dir=str(host / "var" / "log" / "nginx"),
        logrotate_file=str(host / "etc" / "logrotate.d" / "nids"),
        system_log_glob=str(host / "var" / "log" / "nids*.log"),
        systemd_unit_file=str(host / "etc" / "systemd" / "system" / "nids.service"),
        monitor_script=str(host / "usr" / "local" / "bin" / "nids-monitor.sh"),
        monitor_log=str(host / "var" / "log" / "nids-monitor.log"),
    )


@pytest.fixture
def bundle_dir(tmp_path):
    bundle = tmp_path / "bundle"
    bundle.mkdir()
    (bundle / "index.html").write_text("<html>NIDS</html>", encoding="utf-8")
    (bundle / "README.md").write_text("# Advanced NIDS\n", encoding="utf-8")
    (bundle / "LICENSE").write_text("MIT\n", encoding="utf-8")
    return bundle


@pytest.fixture
def make_config(tmp_path, bundle_dir):
    def _make(**overrides):
        values = {
            "deploy_root": str(tmp_path / "host" / "var" / "www" / "nids"),
            "backup_root": str(tmp_path / "host" / "var" / "backups" / "nids"),
            "log_file": str(tmp_path / "host" / "var" / "log" / "nids-deploy.log"),
            "bundle_dir": str(bundle_dir),
            "service_user": str(os.getuid()),
            "service_group": str(os.getgid()),
        }
        values.update(overrides)
        return RunConfig(**values)

    return _make


@pytest.fixture
def make_context(layout, runner, fake_requests):
    def _make(reporter=None, version="20240101_120000"):
        logger = DummyLogger()
        return StageContext(
            version=RunVersion(value=version, started_at=datetime(2024, 1, 1, 12, 0, 0)),
            layout=layout,
            reporter=reporter or StatusReporter(),
            run_cmd=runner.run,
            filesystem=FileSystemService(logger=logger),
            packages=PackageService(runner.run, logger=logger, retry_backoff_seconds=0.0),
            crontab=CrontabService(runner.run, logger=logger),
            systemd=SystemdService(runner.run, logger=logger),
            validation=ValidationService(requests_module=fake_requests),
            logger=logger,
        )

    return _make
