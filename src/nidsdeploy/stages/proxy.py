"""Reverse-proxy stage: render, activate and reload the nginx site."""

import os
from dataclasses import dataclass
from typing import Optional

from nidsdeploy.constants import FILE_MODE, NGINX_CHECK_TIMEOUT
from nidsdeploy.errors import DeployError, ProxyConfigError
from nidsdeploy.errors_catalog import actionable_error
from nidsdeploy.models import HostLayout, RunConfig, StageResult

from .base import Stage

PROXY_UNIT = "nginx"


@dataclass(frozen=True)
class PathState:
    """What occupied a path before activation: a symlink, a regular file, or nothing."""

    path: str
    kind: Optional[str] = None
    value: Optional[str] = None

    @classmethod
    def capture(cls, path: str) -> "PathState":
        if os.path.islink(path):
            return cls(path=path, kind="link", value=os.readlink(path))
        if os.path.isfile(path):
            with open(path, "r", encoding="utf-8") as file_obj:
                return cls(path=path, kind="file", value=file_obj.read())
        return cls(path=path)


class ReverseProxyConfigurator(Stage):
    name = "configure_proxy"
    title = "nginx site"
    after_commit = True

    GZIP_TYPES = (
        "text/plain",
        "text/css",
        "text/xml",
        "text/javascript",
        "application/javascript",
        "application/xml+rss",
        "application/json",
    )

    def render_site(self, config: RunConfig, layout: HostLayout) -> str:
        access_log = os.path.join(layout.nginx_log_dir, f"{layout.site_name}_access.log")
        error_log = os.path.join(layout.nginx_log_dir, f"{layout.site_name}_error.log")
        gzip_types = " ".join(self.GZIP_TYPES)

        return f"""server {{
    listen 80;
    server_name {config.site_domain};
    root {config.deploy_root};
    index index.html;

    # Security headers
    add_header X-Frame-Options DENY;
    add_header X-Content-Type-Options nosniff;
    add_header X-XSS-Protection "1; mode=block";
    add_header Strict-Transport-Security "max-age=31536000; includeSubDomains" always;

    gzip on;
    gzip_vary on;
    gzip_min_length 1024;
    gzip_types {gzip_types};

    location / {{
        try_files $uri $uri/ =404;
    }}

    location ~ /\\.git {{
        deny all;
    }}

    location ~ /\\.env {{
        deny all;
    }}

    location ~ /config/ {{
        deny all;
    }}

    location /logs/ {{
        auth_basic "Restricted Access";
        auth_basic_user_file {layout.htpasswd_file};
        autoindex on;
    }}

    # No backend is deployed behind /api/.
    location /api/ {{
        return 404;
    }}

    error_page 404 /404.html;
    error_page 500 502 503 504 /50x.html;

    access_log {access_log};
    error_log {error_log};
}}
"""

    def run(self, config: RunConfig) -> StageResult:
        self.reporter.info("Configuring nginx...")
        layout = self.context.layout
        filesystem = self.context.filesystem

        previous = (
            PathState.capture(layout.site_available_path),
            PathState.capture(layout.site_enabled_path),
            PathState.capture(layout.default_site_enabled_path),
        )

        try:
            filesystem.write_text_atomic(
                layout.site_available_path,
                self.render_site(config, layout),
                mode=FILE_MODE,
            )
            filesystem.symlink_force(layout.site_available_path, layout.site_enabled_path)
            filesystem.remove_file(layout.default_site_enabled_path)
        except DeployError:
            self.restore(previous)
            raise

        try:
            check = self.context.run_cmd(
                ["nginx", "-t"],
                check=False,
                capture_output=True,
                timeout=NGINX_CHECK_TIMEOUT,
            )
        except DeployError as exc:
            self.restore(previous)
            raise ProxyConfigError(
                actionable_error("proxy_check_failed", domain=config.site_domain, error=str(exc))
            ) from exc

        if check.returncode != 0:
            self.restore(previous)
            details = (check.stderr or check.stdout or "").strip()
            message = actionable_error("proxy_syntax_invalid", domain=config.site_domain)
            if details:
                message = f"{message}\n{details}"
            raise ProxyConfigError(message)

        systemd = self.context.systemd
        systemd.reload_or_restart(PROXY_UNIT)
        systemd.enable(PROXY_UNIT)

        if not os.path.exists(layout.htpasswd_file):
            self.reporter.warning(
                f"{layout.htpasswd_file} does not exist; /logs/ will refuse every login "
                "until credentials are created with htpasswd."
            )

        return self.ok(
            "nginx configured successfully",
            site_file=layout.site_available_path,
        )

    def restore(self, states):
        """Put every captured path back the way it was before activation."""
        filesystem = self.context.filesystem
        for state in states:
            filesystem.remove_file(state.path)
            if state.kind == "link":
                filesystem.symlink_force(state.value, state.path)
            elif state.kind == "file":
                filesystem.write_text_atomic(state.path, state.value, mode=FILE_MODE)
        self.logger.info("Restored previous nginx site configuration.")
