"""Validation stage: post-deployment smoke checks."""

import os

from nidsdeploy.constants import ENTRY_ARTIFACT
from nidsdeploy.errors import ValidationError
from nidsdeploy.models import RunConfig, StageResult

from .base import Stage
from .proxy import PROXY_UNIT


class DeploymentValidator(Stage):
    name = "validate_deployment"
    title = "Validation"
    after_commit = True

    def run(self, config: RunConfig) -> StageResult:
        self.reporter.info("Validating deployment...")

        entry = os.path.join(config.deploy_root, ENTRY_ARTIFACT)
        if not os.path.isfile(entry):
            raise ValidationError(f"{ENTRY_ARTIFACT} not found in deployment directory {config.deploy_root}")

        if not self.context.systemd.is_active(PROXY_UNIT):
            raise ValidationError(f"{PROXY_UNIT} is not running")

        url = self.context.layout.local_url
        status = self.context.validation.probe_url(url)
        self.reporter.success(f"Site is accessible via HTTP ({url} -> {status})")

        return self.ok("Deployment validation completed", http_status=status)
