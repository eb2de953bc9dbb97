"""
nidsdeploy - provisioning orchestrator for the Advanced NIDS web interface
"""

__version__ = "1.0.0"

from .core import Deployer
from .errors import DeployError

__all__ = ["Deployer", "DeployError"]
