"""Common plumbing for provisioning stages."""

import logging
from dataclasses import dataclass
from typing import Any, Callable

from nidsdeploy.models import (
    STATUS_OK,
    STATUS_SKIPPED,
    HostLayout,
    RunConfig,
    RunVersion,
    StageResult,
)
from nidsdeploy.services.filesystem import FileSystemService
from nidsdeploy.services.packages import PackageService
from nidsdeploy.services.reporter import StatusReporter
from nidsdeploy.services.scheduler import CrontabService
from nidsdeploy.services.systemd import SystemdService
from nidsdeploy.services.validation import ValidationService


@dataclass(frozen=True)
class StageContext:
    """Collaborators shared by every stage of one run."""

    version: RunVersion
    layout: HostLayout
    reporter: StatusReporter
    run_cmd: Callable
    filesystem: FileSystemService
    packages: PackageService
    crontab: CrontabService
    systemd: SystemdService
    validation: ValidationService
    logger: logging.Logger


class Stage:
    """One idempotent provisioning step.

    Subclasses implement :meth:`run` and either return a result or raise a
    :class:`~nidsdeploy.errors.DeployError`; the orchestrator turns raised
    errors into a failed result and stops the pipeline.
    """

    name = "stage"
    title = "Stage"
    # True once the live deploy directory has been overwritten by an earlier stage.
    after_commit = False
    # True for the stage that copies files over the live deploy directory.
    writes_live_tree = False

    def __init__(self, context: StageContext):
        self.context = context
        self.reporter = context.reporter
        self.logger = context.logger

    def run(self, config: RunConfig) -> StageResult:
        raise NotImplementedError

    def ok(self, message: str, **details: Any) -> StageResult:
        self.reporter.success(message)
        return StageResult(stage=self.name, status=STATUS_OK, message=message, details=details)

    def skipped(self, message: str, warn: bool = False, **details: Any) -> StageResult:
        if warn:
            self.reporter.warning(message)
        else:
            self.reporter.info(message)
        return StageResult(stage=self.name, status=STATUS_SKIPPED, message=message, details=details)
