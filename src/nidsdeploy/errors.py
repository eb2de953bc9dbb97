"""Domain errors for nidsdeploy."""


class DeployError(RuntimeError):
    """Raised when the deployment cannot continue safely."""


class PrivilegeError(DeployError):
    """Raised when the run lacks root privileges."""


class InstallError(DeployError):
    """Raised when the package manager fails."""


class BackupError(DeployError):
    """Raised when the existing deployment could not be archived."""


class ProxyConfigError(DeployError):
    """Raised when the generated nginx configuration is rejected."""


class ValidationError(DeployError):
    """Raised when a post-deployment check fails."""
