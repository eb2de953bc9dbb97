"""Backup archive helpers for nidsdeploy."""

import os
import tarfile
from datetime import datetime
from typing import Optional

from nidsdeploy.constants import BACKUP_NAME_TEMPLATE
from nidsdeploy.errors import BackupError
from nidsdeploy.models import BackupRecord


class ArchiveService:
    """Creates and verifies compressed snapshots of the deploy directory."""

    CHUNK_SIZE = 1024 * 1024

    def __init__(self, logger):
        self.logger = logger

    def backup_path(self, backup_root: str, version: str) -> str:
        return os.path.join(backup_root, BACKUP_NAME_TEMPLATE.format(version=version))

    def has_content(self, deploy_root: str) -> bool:
        if not os.path.isdir(deploy_root):
            return False
        with os.scandir(deploy_root) as entries:
            return next(entries, None) is not None

    def create_backup(self, deploy_root: str, backup_root: str, version: str) -> Optional[BackupRecord]:
        """Archive ``deploy_root`` into ``backup_root`` or return None when there is nothing to keep.

        The archive only appears under its final name once it has been
        written completely and read back without errors.
        """
        if not self.has_content(deploy_root):
            return None

        archive_path = self.backup_path(backup_root, version)
        if os.path.exists(archive_path):
            raise BackupError(f"Backup archive already exists: {archive_path}")

        partial_path = f"{archive_path}.partial"
        try:
            os.makedirs(backup_root, exist_ok=True)
            with tarfile.open(partial_path, "w:gz") as tar:
                tar.add(deploy_root, arcname=".")
            self.verify_archive(partial_path)
            os.replace(partial_path, archive_path)
        except (OSError, tarfile.TarError) as exc:
            self._discard(partial_path)
            raise BackupError(f"Could not write backup {archive_path}: {exc}") from exc
        except BackupError:
            self._discard(partial_path)
            raise

        self.logger.debug("Backup written: %s", archive_path)
        return BackupRecord(
            archive_path=archive_path,
            source_dir=deploy_root,
            created_at=datetime.now(),
        )

    def verify_archive(self, archive_path: str):
        """Read every member back so truncated or corrupt archives are caught."""
        try:
            with tarfile.open(archive_path, "r:gz") as tar:
                members = 0
                for member in tar:
                    members += 1
                    if not member.isfile():
                        continue
                    handle = tar.extractfile(member)
                    if handle is None:
                        raise BackupError(f"Unreadable archive member: {member.name}")
                    with handle:
                        while handle.read(self.CHUNK_SIZE):
                            pass
        except (OSError, EOFError, tarfile.TarError) as exc:
            raise BackupError(f"Backup archive failed verification: {archive_path}: {exc}") from exc

        if members == 0:
            raise BackupError(f"Backup archive is empty: {archive_path}")

    def _discard(self, path: str):
        if os.path.exists(path):
            try:
                os.remove(path)
            except OSError as exc:
                self.logger.warning("Could not remove incomplete backup %s: %s", path, exc)
