"""Shared constants for nidsdeploy."""

SERVICE_NAME = "nids"

DEFAULT_DEPLOY_ROOT = "/var/www/nids"
DEFAULT_BACKUP_ROOT = "/var/backups/nids"
DEFAULT_LOG_FILE = "/var/log/nids-deploy.log"
DEFAULT_DOMAIN = "localhost"
DEFAULT_SERVICE_USER = "www-data"
DEFAULT_SERVICE_GROUP = "www-data"
DEFAULT_BUNDLE_FILES = ("index.html", "README.md", "LICENSE")
DEFAULT_CONFIG_FILE = ".nidsdeploy.yml"

ENTRY_ARTIFACT = "index.html"
RUNTIME_SUBDIRS = ("logs", "config", "exports")
WRITABLE_SUBDIRS = ("logs", "exports")

DIR_MODE = 0o755
FILE_MODE = 0o644
SCRIPT_MODE = 0o755
WRITABLE_DIR_MODE = 0o775

VERSION_FORMAT = "%Y%m%d_%H%M%S"
BACKUP_NAME_TEMPLATE = "backup_{version}.tar.gz"

REQUIRED_PACKAGES = (
    "nginx",
    "python3",
    "python3-pip",
    "git",
    "curl",
    "wget",
    "ufw",
    "fail2ban",
    "logrotate",
    "cron",
)
TLS_PACKAGES = ("certbot", "python3-certbot-nginx")

BASE_FIREWALL_PORTS = (22, 80, 443)
MIN_PORT = 1
MAX_PORT = 65535

CRON_TAG_PREFIX = "nidsdeploy"
TLS_RENEW_SCHEDULE = "0 12 * * *"
MONITOR_SCHEDULE = "*/5 * * * *"
DISK_USAGE_WARN_PERCENT = 90
LOG_RETENTION_DAYS = 30
APP_LOG_ROTATIONS = 30
SYSTEM_LOG_ROTATIONS = 7

HTTP_PROBE_TIMEOUT = 10
NGINX_CHECK_TIMEOUT = 60
CERTBOT_TIMEOUT = 600
