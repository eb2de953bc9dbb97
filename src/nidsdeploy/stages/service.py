"""Service stage: register the systemd unit operators query for readiness."""

from nidsdeploy.constants import FILE_MODE
from nidsdeploy.models import RunConfig, StageResult

from .base import Stage
from .proxy import PROXY_UNIT


class ServiceRegistrar(Stage):
    name = "register_service"
    title = "systemd unit"
    after_commit = True

    def render_unit(self) -> str:
        return f"""[Unit]
Description=Advanced Network Intrusion Detection System
After=network.target {PROXY_UNIT}.service
Requires={PROXY_UNIT}.service

[Service]
Type=oneshot
ExecStart=/bin/echo "NIDS Web Interface Ready"
RemainAfterExit=true
StandardOutput=journal

[Install]
WantedBy=multi-user.target
"""

    def run(self, config: RunConfig) -> StageResult:
        self.reporter.info("Creating startup service...")
        layout = self.context.layout
        systemd = self.context.systemd

        self.context.filesystem.write_text_atomic(
            layout.systemd_unit_file,
            self.render_unit(),
            mode=FILE_MODE,
        )
        systemd.daemon_reload()
        systemd.enable(layout.unit_name)
        systemd.start(layout.unit_name)

        return self.ok(f"Service {layout.unit_name} registered and started", unit=layout.unit_name)
