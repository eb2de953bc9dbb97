"""Monitoring stage: install the periodic health-check script."""

import os

from nidsdeploy.constants import (
    DISK_USAGE_WARN_PERCENT,
    LOG_RETENTION_DAYS,
    MONITOR_SCHEDULE,
    SCRIPT_MODE,
)
from nidsdeploy.models import HostLayout, RunConfig, StageResult

from .base import Stage
from .proxy import PROXY_UNIT

MONITOR_TAG = "monitor"


class MonitoringInstaller(Stage):
    name = "configure_monitoring"
    title = "Health monitor"
    after_commit = True

    def render_script(self, config: RunConfig, layout: HostLayout) -> str:
        logs_dir = os.path.join(config.deploy_root, "logs")
        return f"""#!/bin/bash
# Health check for the NIDS web interface. Installed by nidsdeploy.

LOG_FILE="{layout.monitor_log}"
DEPLOY_DIR="{config.deploy_root}"

if ! systemctl is-active --quiet {PROXY_UNIT}; then
    echo "$(date '+%Y-%m-%d %H:%M:%S'): {PROXY_UNIT} is not running, attempting to restart" >> "$LOG_FILE"
    systemctl restart {PROXY_UNIT}
fi

DISK_USAGE=$(df -P "$DEPLOY_DIR" | awk 'NR==2 {{print $5}}' | tr -d '%')
if [ -n "$DISK_USAGE" ] && [ "$DISK_USAGE" -gt {DISK_USAGE_WARN_PERCENT} ]; then
    echo "$(date '+%Y-%m-%d %H:%M:%S'): WARNING: high disk usage: ${{DISK_USAGE}}%" >> "$LOG_FILE"
fi

find "{logs_dir}" -name "*.log" -type f -mtime +{LOG_RETENTION_DAYS} -delete 2>/dev/null

exit 0
"""

    def run(self, config: RunConfig) -> StageResult:
        self.reporter.info("Configuring monitoring...")
        layout = self.context.layout

        self.context.filesystem.write_text_atomic(
            layout.monitor_script,
            self.render_script(config, layout),
            mode=SCRIPT_MODE,
        )
        self.context.crontab.install(MONITOR_TAG, MONITOR_SCHEDULE, layout.monitor_script)

        return self.ok("Monitoring configured successfully", script=layout.monitor_script)
