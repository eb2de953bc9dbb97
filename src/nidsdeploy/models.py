"""Shared domain models for nidsdeploy."""

import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .constants import (
    DEFAULT_BACKUP_ROOT,
    DEFAULT_BUNDLE_FILES,
    DEFAULT_DEPLOY_ROOT,
    DEFAULT_DOMAIN,
    DEFAULT_LOG_FILE,
    DEFAULT_SERVICE_GROUP,
    DEFAULT_SERVICE_USER,
    SERVICE_NAME,
    VERSION_FORMAT,
)

STATUS_OK = "ok"
STATUS_SKIPPED = "skipped"
STATUS_FAILED = "failed"

ABORT_BEFORE_COMMIT = "abort-before-commit"
ABORT_AFTER_COMMIT = "abort-after-commit"


@dataclass(frozen=True)
class RunConfig:
    """Operator inputs for one invocation. Built once, never mutated."""

    deploy_root: str = DEFAULT_DEPLOY_ROOT
    backup_root: str = DEFAULT_BACKUP_ROOT
    log_file: str = DEFAULT_LOG_FILE
    domain_name: str = DEFAULT_DOMAIN
    admin_email: Optional[str] = None
    custom_port: Optional[int] = None
    skip_ssl: bool = False
    skip_firewall: bool = False
    bundle_dir: str = "."
    bundle_files: Tuple[str, ...] = DEFAULT_BUNDLE_FILES
    service_user: str = DEFAULT_SERVICE_USER
    service_group: str = DEFAULT_SERVICE_GROUP
    verbose: bool = False

    @property
    def has_real_domain(self) -> bool:
        domain = (self.domain_name or "").strip()
        return bool(domain) and domain != DEFAULT_DOMAIN

    @property
    def certificate_email(self) -> str:
        return self.admin_email or f"admin@{self.domain_name}"

    @property
    def site_domain(self) -> str:
        return self.domain_name or DEFAULT_DOMAIN


@dataclass(frozen=True)
class RunVersion:
    """Timestamp tag shared by the backup name and every log line of a run."""

    value: str
    started_at: datetime

    @classmethod
    def generate(cls, now: Optional[datetime] = None) -> "RunVersion":
        moment = now or datetime.now()
        return cls(value=moment.strftime(VERSION_FORMAT), started_at=moment)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class HostLayout:
    """Host locations touched by the stages."""

    sites_available_dir: str = "/etc/nginx/sites-available"
    sites_enabled_dir: str = "/etc/nginx/sites-enabled"
    default_site_name: str = "default"
    site_name: str = SERVICE_NAME
    htpasswd_file: str = "/etc/nginx/.htpasswd"
    nginx_log_dir: str = "/var/log/nginx"
    logrotate_file: str = "/etc/logrotate.d/nids"
    system_log_glob: str = "/var/log/nids*.log"
    systemd_unit_file: str = "/etc/systemd/system/nids.service"
    monitor_script: str = "/usr/local/bin/nids-monitor.sh"
    monitor_log: str = "/var/log/nids-monitor.log"
    local_url: str = "http://localhost/"

    @property
    def site_available_path(self) -> str:
        return os.path.join(self.sites_available_dir, self.site_name)

    @property
    def site_enabled_path(self) -> str:
        return os.path.join(self.sites_enabled_dir, self.site_name)

    @property
    def default_site_enabled_path(self) -> str:
        return os.path.join(self.sites_enabled_dir, self.default_site_name)

    @property
    def unit_name(self) -> str:
        return os.path.basename(self.systemd_unit_file)


@dataclass(frozen=True)
class BackupRecord:
    archive_path: str
    source_dir: str
    created_at: datetime


@dataclass(frozen=True)
class StageResult:
    stage: str
    status: str
    message: str
    timestamp: datetime = field(default_factory=datetime.now)
    details: Mapping[str, Any] = field(default_factory=dict)

    @property
    def failed(self) -> bool:
        return self.status == STATUS_FAILED


@dataclass
class DeploymentReport:
    """Aggregated outcome of one run, rendered for the operator."""

    config: RunConfig
    version: RunVersion
    results: List[StageResult] = field(default_factory=list)
    failure_class: Optional[str] = None
    failed_stage: Optional[str] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.failure_class is None and not any(result.failed for result in self.results)

    @property
    def backup(self) -> Optional[BackupRecord]:
        for result in self.results:
            record = result.details.get("backup")
            if record is not None:
                return record
        return None

    def statuses(self) -> Dict[str, str]:
        return {result.stage: result.status for result in self.results}
