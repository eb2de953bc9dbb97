"""TLS stage: request a Let's Encrypt certificate and schedule renewal."""

from nidsdeploy.constants import CERTBOT_TIMEOUT, TLS_PACKAGES, TLS_RENEW_SCHEDULE
from nidsdeploy.models import RunConfig, StageResult

from .base import Stage

RENEW_TAG = "certbot-renew"
RENEW_COMMAND = "/usr/bin/certbot renew --quiet"


class TLSProvisioner(Stage):
    name = "configure_tls"
    title = "TLS certificate"
    after_commit = True

    def run(self, config: RunConfig) -> StageResult:
        if config.skip_ssl:
            return self.skipped("SSL configuration skipped (--skip-ssl)", warn=True)
        if not config.has_real_domain:
            return self.skipped("No domain name specified, skipping SSL configuration", warn=True)

        self.reporter.info(f"Configuring SSL with Let's Encrypt for {config.domain_name}...")
        self.context.packages.install(TLS_PACKAGES)
        self.context.run_cmd(
            [
                "certbot",
                "--nginx",
                "-d",
                config.domain_name,
                "--non-interactive",
                "--agree-tos",
                "--email",
                config.certificate_email,
            ],
            capture_output=True,
            timeout=CERTBOT_TIMEOUT,
        )
        self.context.crontab.install(RENEW_TAG, TLS_RENEW_SCHEDULE, RENEW_COMMAND)

        return self.ok(f"SSL configured successfully for {config.domain_name}")
