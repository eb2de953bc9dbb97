"""Host preparation stages: privileges, directories, packages and firewall."""

import os

from nidsdeploy.constants import BASE_FIREWALL_PORTS, REQUIRED_PACKAGES
from nidsdeploy.errors import PrivilegeError
from nidsdeploy.errors_catalog import actionable_error
from nidsdeploy.models import STATUS_OK, RunConfig, StageResult

from .base import Stage


class PermissionGuard(Stage):
    name = "check_permissions"
    title = "Permission check"

    def run(self, config: RunConfig) -> StageResult:
        geteuid = getattr(os, "geteuid", None)
        if geteuid is None or geteuid() != 0:
            raise PrivilegeError(actionable_error("not_root"))
        return StageResult(stage=self.name, status=STATUS_OK, message="Running with root privileges")


class DirectoryProvisioner(Stage):
    name = "create_directories"
    title = "Directories"

    def run(self, config: RunConfig) -> StageResult:
        self.reporter.info("Creating deployment directories...")
        filesystem = self.context.filesystem
        filesystem.ensure_dir(config.deploy_root)
        filesystem.ensure_dir(config.backup_root)
        filesystem.ensure_dir(os.path.dirname(config.log_file) or "/")
        return self.ok("Directories created successfully")


class DependencyInstaller(Stage):
    name = "install_dependencies"
    title = "System packages"

    def __init__(self, context, packages=REQUIRED_PACKAGES):
        super().__init__(context)
        self.package_list = tuple(packages)

    def run(self, config: RunConfig) -> StageResult:
        self.reporter.info("Installing system dependencies...")
        self.context.packages.install(self.package_list)
        return self.ok("Dependencies installed successfully", packages=self.package_list)


class FirewallConfigurator(Stage):
    name = "configure_firewall"
    title = "Firewall"

    def ports(self, config: RunConfig):
        ports = list(BASE_FIREWALL_PORTS)
        if config.custom_port and config.custom_port not in ports:
            ports.append(config.custom_port)
        return ports

    def run(self, config: RunConfig) -> StageResult:
        if config.skip_firewall:
            return self.skipped("Firewall configuration skipped (--skip-firewall)")

        self.reporter.info("Configuring firewall...")
        run_cmd = self.context.run_cmd

        status = run_cmd(["ufw", "status"], check=False, capture_output=True)
        if "Status: active" not in (status.stdout or ""):
            run_cmd(["ufw", "--force", "enable"], capture_output=True)

        ports = self.ports(config)
        for port in ports:
            # ufw answers "Skipping adding existing rule" for duplicates.
            run_cmd(["ufw", "allow", f"{port}/tcp"], capture_output=True)

        return self.ok(
            "Firewall configured successfully (allowed: "
            + ", ".join(f"{port}/tcp" for port in ports)
            + ")",
            ports=tuple(ports),
        )
