"""Backup stage: snapshot the live deployment before it is overwritten."""

from typing import Optional

from nidsdeploy.errors import BackupError
from nidsdeploy.errors_catalog import actionable_error
from nidsdeploy.models import RunConfig, StageResult
from nidsdeploy.services.archive import ArchiveService

from .base import Stage


class BackupManager(Stage):
    name = "backup_existing"
    title = "Backup"

    def __init__(self, context, archive_service: Optional[ArchiveService] = None):
        super().__init__(context)
        self.archive_service = archive_service or ArchiveService(logger=context.logger)

    def run(self, config: RunConfig) -> StageResult:
        if not self.archive_service.has_content(config.deploy_root):
            return self.skipped("No existing deployment found, skipping backup")

        self.reporter.info("Backing up existing deployment...")
        try:
            record = self.archive_service.create_backup(
                config.deploy_root,
                config.backup_root,
                self.context.version.value,
            )
        except BackupError as exc:
            raise BackupError(
                actionable_error(
                    "backup_failed",
                    deploy_root=config.deploy_root,
                    backup_root=config.backup_root,
                    error=str(exc),
                )
            ) from exc

        return self.ok(f"Backup created: {record.archive_path}", backup=record)
