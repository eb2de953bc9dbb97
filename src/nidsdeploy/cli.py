import logging
import os

import click
from rich.logging import RichHandler

from .constants import (
    DEFAULT_BACKUP_ROOT,
    DEFAULT_BUNDLE_FILES,
    DEFAULT_CONFIG_FILE,
    DEFAULT_DEPLOY_ROOT,
    DEFAULT_DOMAIN,
    DEFAULT_LOG_FILE,
    DEFAULT_SERVICE_GROUP,
    DEFAULT_SERVICE_USER,
    MAX_PORT,
    MIN_PORT,
)
from .core import Deployer
from .errors import DeployError
from .models import RunConfig
from .services.config_loader import ConfigLoader


def _resolve_option(cli_value, config, key, default=None):
    if cli_value is not None:
        return cli_value
    if key in config:
        return config[key]
    return default


logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(rich_tracebacks=True, show_level=False, show_path=False)],
)


@click.command(context_settings={"help_option_names": ["--help", "-h"]})
@click.option("--domain", required=False, help="Domain name for the application")
@click.option("--email", required=False, help="Admin email for SSL certificates")
@click.option(
    "--port",
    required=False,
    type=click.IntRange(MIN_PORT, MAX_PORT),
    help="Custom port to open in the firewall",
)
@click.option("--skip-ssl", is_flag=True, default=None, help="Skip SSL configuration")
@click.option("--skip-firewall", is_flag=True, default=None, help="Skip firewall configuration")
@click.option(
    "--config",
    required=False,
    type=click.Path(),
    help=f"Path to a YAML configuration file. Defaults to {DEFAULT_CONFIG_FILE} if present.",
)
@click.option(
    "--bundle-dir",
    required=False,
    type=click.Path(),
    help="Directory holding the application files (default: current directory).",
)
@click.option("--verbose", is_flag=True, default=None, help="Enable verbose logging")
def main(domain, email, port, skip_ssl, skip_firewall, config, bundle_dir, verbose):
    """Deploy the Advanced NIDS web interface to this host."""
    logger = logging.getLogger("nidsdeploy")

    try:
        config_loader = ConfigLoader()
        resolved_config = config
        if resolved_config is None:
            default_config_path = os.path.join(os.getcwd(), DEFAULT_CONFIG_FILE)
            if os.path.exists(default_config_path):
                resolved_config = default_config_path

        config_values = config_loader.load(resolved_config)
    except DeployError as exc:
        raise click.ClickException(str(exc)) from exc

    verbose = bool(_resolve_option(verbose, config_values, "verbose", default=False))
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)

    port = _resolve_option(port, config_values, "port")
    bundle_files = _resolve_option(None, config_values, "bundle_files", default=DEFAULT_BUNDLE_FILES)

    run_config = RunConfig(
        deploy_root=_resolve_option(None, config_values, "deploy_root", default=DEFAULT_DEPLOY_ROOT),
        backup_root=_resolve_option(None, config_values, "backup_root", default=DEFAULT_BACKUP_ROOT),
        log_file=_resolve_option(None, config_values, "log_file", default=DEFAULT_LOG_FILE),
        domain_name=_resolve_option(domain, config_values, "domain", default=DEFAULT_DOMAIN),
        admin_email=_resolve_option(email, config_values, "email"),
        custom_port=port,
        skip_ssl=bool(_resolve_option(skip_ssl, config_values, "skip_ssl", default=False)),
        skip_firewall=bool(_resolve_option(skip_firewall, config_values, "skip_firewall", default=False)),
        bundle_dir=_resolve_option(bundle_dir, config_values, "bundle_dir", default=os.getcwd()),
        bundle_files=tuple(bundle_files),
        service_user=str(_resolve_option(None, config_values, "service_user", default=DEFAULT_SERVICE_USER)),
        service_group=str(
            _resolve_option(None, config_values, "service_group", default=DEFAULT_SERVICE_GROUP)
        ),
        verbose=verbose,
    )

    try:
        deployer = Deployer(config=run_config)
    except DeployError as exc:
        raise click.ClickException(str(exc)) from exc

    raise SystemExit(deployer.run())


if __name__ == "__main__":
    main()
