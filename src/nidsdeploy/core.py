import logging
from typing import List, Optional

import requests
from rich.console import Console
from rich.table import Table
from rich.text import Text

from .errors import DeployError
from .errors_catalog import actionable_error
from .models import (
    ABORT_AFTER_COMMIT,
    ABORT_BEFORE_COMMIT,
    STATUS_FAILED,
    STATUS_OK,
    STATUS_SKIPPED,
    DeploymentReport,
    HostLayout,
    RunConfig,
    RunVersion,
    StageResult,
)
from .services.command_runner import CommandRunner
from .services.filesystem import FileSystemService
from .services.packages import PackageService
from .services.reporter import ConsoleSink, RunLogSink, StatusReporter
from .services.scheduler import CrontabService
from .services.systemd import SystemdService
from .services.validation import ValidationService
from .stages.artifacts import ArtifactDeployer
from .stages.backup import BackupManager
from .stages.base import Stage, StageContext
from .stages.host import (
    DependencyInstaller,
    DirectoryProvisioner,
    FirewallConfigurator,
    PermissionGuard,
)
from .stages.logrotate import LogRotationConfigurator
from .stages.monitoring import MonitoringInstaller
from .stages.proxy import ReverseProxyConfigurator
from .stages.service import ServiceRegistrar
from .stages.tls import TLSProvisioner
from .stages.validator import DeploymentValidator

console = Console()
logger = logging.getLogger("nidsdeploy")

PIPELINE = (
    PermissionGuard,
    DirectoryProvisioner,
    BackupManager,
    DependencyInstaller,
    FirewallConfigurator,
    ArtifactDeployer,
    ReverseProxyConfigurator,
    TLSProvisioner,
    MonitoringInstaller,
    LogRotationConfigurator,
    ServiceRegistrar,
    DeploymentValidator,
)


class Deployer:
    """Runs the provisioning pipeline for one invocation.

    Stages run strictly in order; the first failure stops the run. Whether
    that failure happened before or after the live directory was replaced
    decides the recovery advice printed to the operator. Concurrent runs
    against the same host are not supported.
    """

    def __init__(
        self,
        config: RunConfig,
        layout: Optional[HostLayout] = None,
        command_runner: Optional[CommandRunner] = None,
        reporter: Optional[StatusReporter] = None,
        version: Optional[RunVersion] = None,
        requests_module=requests,
        stages: Optional[List[Stage]] = None,
    ):
        self.config = config
        self.layout = layout or HostLayout()
        self.validation_service = ValidationService(requests_module=requests_module)
        self.validation_service.validate_run_config(config)

        self.version = version or RunVersion.generate()
        self.command_runner = command_runner or CommandRunner(logger=logger)
        self.reporter = reporter or StatusReporter(
            sinks=[ConsoleSink(console), RunLogSink(config.log_file, logger=logger)]
        )
        self.context = StageContext(
            version=self.version,
            layout=self.layout,
            reporter=self.reporter,
            run_cmd=self._run_cmd,
            filesystem=FileSystemService(logger=logger),
            packages=PackageService(self._run_cmd, logger=logger),
            crontab=CrontabService(self._run_cmd, logger=logger),
            systemd=SystemdService(self._run_cmd, logger=logger),
            validation=self.validation_service,
            logger=logger,
        )
        self.stages = stages if stages is not None else self.build_stages()
        self.report = DeploymentReport(config=self.config, version=self.version)

    def build_stages(self) -> List[Stage]:
        return [stage_class(self.context) for stage_class in PIPELINE]

    def _run_cmd(self, cmd: List[str], **kwargs):
        return self.command_runner.run(cmd, **kwargs)

    def _failure_hint(self, stage: Stage) -> str:
        if stage.after_commit:
            code = "abort_after_commit"
        elif stage.writes_live_tree:
            code = "abort_during_commit"
        else:
            return actionable_error("abort_before_commit")

        backup = self.report.backup
        if backup is None:
            return actionable_error(f"{code}_no_backup", deploy_root=self.config.deploy_root)
        return actionable_error(code, deploy_root=self.config.deploy_root, archive=backup.archive_path)

    def _record_failure(self, stage: Stage, error: str):
        self.report.results.append(
            StageResult(stage=stage.name, status=STATUS_FAILED, message=error)
        )
        self.report.failed_stage = stage.name
        self.report.failure_class = ABORT_AFTER_COMMIT if stage.after_commit else ABORT_BEFORE_COMMIT
        self.report.error = error

        if isinstance(stage, PermissionGuard):
            self.reporter.error(error)
        else:
            self.reporter.error(f"{stage.title} failed: {error} {self._failure_hint(stage)}")

    def run_stage(self, stage: Stage) -> bool:
        logger.debug("Stage %s started (run %s)", stage.name, self.version)
        try:
            result = stage.run(self.config)
        except DeployError as exc:
            self._record_failure(stage, str(exc))
            return False
        except Exception as exc:
            logger.exception("Unexpected error in stage %s", stage.name)
            self._record_failure(stage, f"Unexpected error: {exc}")
            return False

        self.report.results.append(result)
        logger.debug("Stage %s finished: %s", stage.name, result.status)
        return True

    def run(self) -> int:
        exit_code = 1
        current: Optional[Stage] = None
        try:
            for stage in self.stages:
                current = stage
                if not self.run_stage(stage):
                    return exit_code
                if isinstance(stage, PermissionGuard):
                    self.reporter.info(f"Starting Advanced NIDS deployment (version {self.version})...")

            self.reporter.success("Advanced NIDS deployment completed successfully!")
            exit_code = 0
            return exit_code
        except KeyboardInterrupt:
            if current is not None:
                self._record_failure(current, "Operation cancelled by user.")
            return exit_code
        finally:
            self.print_report()
            self.reporter.close()

    def print_report(self):
        if self.report.failed_stage == PermissionGuard.name:
            return

        table = Table(title=f"Deployment {self.version}")
        table.add_column("Stage")
        table.add_column("Status")
        table.add_column("Message", overflow="fold")
        styles = {STATUS_OK: "green", STATUS_SKIPPED: "yellow", STATUS_FAILED: "red"}
        for result in self.report.results:
            style = styles.get(result.status, "white")
            table.add_row(result.stage, Text(result.status, style=style), Text(result.message))
        console.print(table)

        if not self.report.succeeded:
            return

        config = self.config
        console.print(f"Application URL: http://{config.site_domain}/")
        if config.has_real_domain and not config.skip_ssl:
            console.print(f"HTTPS URL: https://{config.domain_name}/")
        console.print(f"Deploy Directory: {config.deploy_root}")
        console.print(f"Backup Directory: {config.backup_root}")
        if self.report.backup:
            console.print(f"Backup Archive: {self.report.backup.archive_path}")
        console.print(f"Log File: {config.log_file}")
        console.print("")
        console.print("Useful commands:")
        console.print(f"  - View logs: tail -f {config.log_file}")
        console.print("  - Check nginx status: systemctl status nginx")
        console.print(f"  - Check readiness: systemctl status {self.layout.unit_name}")
        console.print(f"  - View application logs: tail -f {config.deploy_root}/logs/*.log")
        console.print("")
        console.print("Security notes:")
        console.print(f"  - Create /logs/ credentials: htpasswd -c {self.layout.htpasswd_file} admin")
        console.print("  - Change default passwords and configure proper authentication")
        console.print("  - Review firewall settings: ufw status verbose")
        console.print("  - Monitor the system regularly")
