"""Artifact stage: copy the application bundle into the deploy root."""

import os

from nidsdeploy.constants import (
    DIR_MODE,
    FILE_MODE,
    RUNTIME_SUBDIRS,
    SCRIPT_MODE,
    WRITABLE_DIR_MODE,
    WRITABLE_SUBDIRS,
)
from nidsdeploy.errors import DeployError
from nidsdeploy.errors_catalog import actionable_error
from nidsdeploy.models import RunConfig, StageResult

from .base import Stage


class ArtifactDeployer(Stage):
    name = "deploy_application"
    title = "Application files"
    writes_live_tree = True

    def run(self, config: RunConfig) -> StageResult:
        self.reporter.info("Deploying application files...")
        filesystem = self.context.filesystem

        sources = [os.path.join(config.bundle_dir, entry) for entry in config.bundle_files]
        missing = [entry for entry, path in zip(config.bundle_files, sources) if not os.path.exists(path)]
        if missing:
            raise DeployError(
                actionable_error(
                    "bundle_missing",
                    bundle_dir=os.path.abspath(config.bundle_dir),
                    missing=", ".join(missing),
                )
            )

        uid, gid = filesystem.resolve_account(config.service_user, config.service_group)

        filesystem.ensure_dir(config.deploy_root)
        for source in sources:
            filesystem.copy_entry(source, config.deploy_root)

        for subdir in RUNTIME_SUBDIRS:
            filesystem.ensure_dir(os.path.join(config.deploy_root, subdir))

        filesystem.chown_tree(config.deploy_root, uid, gid)
        filesystem.set_tree_permissions(
            config.deploy_root,
            dir_mode=DIR_MODE,
            file_mode=FILE_MODE,
            script_mode=SCRIPT_MODE,
        )
        for subdir in WRITABLE_SUBDIRS:
            filesystem.set_permissions(os.path.join(config.deploy_root, subdir), WRITABLE_DIR_MODE)

        return self.ok(
            "Application deployed successfully",
            files=tuple(config.bundle_files),
        )
