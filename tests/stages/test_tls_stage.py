from nidsdeploy.constants import CERTBOT_TIMEOUT, TLS_RENEW_SCHEDULE
from nidsdeploy.stages.tls import RENEW_COMMAND, TLSProvisioner


def test_tls_skipped_for_localhost(runner, make_context, make_config):
    result = TLSProvisioner(make_context()).run(make_config())

    assert result.status == "skipped"
    assert "No domain name specified" in result.message
    assert runner.calls == []


def test_tls_skipped_by_flag_even_with_domain(runner, make_context, make_config):
    result = TLSProvisioner(make_context()).run(make_config(domain_name="nids.example.com", skip_ssl=True))

    assert result.status == "skipped"
    assert runner.calls == []


def test_tls_requests_certificate_and_schedules_renewal(runner, make_context, make_config):
    config = make_config(domain_name="nids.example.com", admin_email="ops@example.com")

    result = TLSProvisioner(make_context()).run(config)

    assert result.status == "ok"
    certbot = runner.commands("certbot", "--nginx")
    assert certbot == [
        [
            "certbot",
            "--nginx",
            "-d",
            "nids.example.com",
            "--non-interactive",
            "--agree-tos",
            "--email",
            "ops@example.com",
        ]
    ]
    assert runner.cron_lines() == [f"{TLS_RENEW_SCHEDULE} {RENEW_COMMAND} # nidsdeploy:certbot-renew"]


def test_tls_defaults_certificate_email_to_admin_at_domain(runner, make_context, make_config):
    TLSProvisioner(make_context()).run(make_config(domain_name="nids.example.com"))

    assert runner.commands("certbot")[0][-1] == "admin@nids.example.com"


def test_tls_rerun_keeps_single_renewal_line(runner, make_context, make_config):
    runner.crontab = "0 3 * * * /usr/local/bin/backup.sh\n"
    config = make_config(domain_name="nids.example.com")

    TLSProvisioner(make_context()).run(config)
    TLSProvisioner(make_context()).run(config)

    lines = runner.cron_lines()
    assert lines[0] == "0 3 * * * /usr/local/bin/backup.sh"
    assert sum(RENEW_COMMAND in line for line in lines) == 1
    assert runner.crontab_writes == 1


def test_tls_bounds_certbot_runtime(runner, make_context, make_config):
    TLSProvisioner(make_context()).run(make_config(domain_name="nids.example.com"))

    assert runner.options_for("certbot", "--nginx") == [{"timeout": CERTBOT_TIMEOUT}]
