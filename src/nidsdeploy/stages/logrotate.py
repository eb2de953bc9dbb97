"""Log-rotation stage: install the logrotate policy."""

import os

from nidsdeploy.constants import APP_LOG_ROTATIONS, FILE_MODE, SYSTEM_LOG_ROTATIONS
from nidsdeploy.models import HostLayout, RunConfig, StageResult

from .base import Stage
from .proxy import PROXY_UNIT


class LogRotationConfigurator(Stage):
    name = "configure_logrotate"
    title = "Log rotation"
    after_commit = True

    def render_policy(self, config: RunConfig, layout: HostLayout) -> str:
        app_logs = os.path.join(config.deploy_root, "logs", "*.log")
        return f"""{app_logs} {{
    daily
    missingok
    rotate {APP_LOG_ROTATIONS}
    compress
    delaycompress
    notifempty
    copytruncate
    postrotate
        systemctl reload {PROXY_UNIT} > /dev/null 2>&1 || true
    endscript
}}

{layout.system_log_glob} {{
    daily
    missingok
    rotate {SYSTEM_LOG_ROTATIONS}
    compress
    delaycompress
    notifempty
    copytruncate
}}
"""

    def run(self, config: RunConfig) -> StageResult:
        self.reporter.info("Configuring log rotation...")
        layout = self.context.layout
        self.context.filesystem.write_text_atomic(
            layout.logrotate_file,
            self.render_policy(config, layout),
            mode=FILE_MODE,
        )
        return self.ok("Log rotation configured successfully", policy=layout.logrotate_file)
