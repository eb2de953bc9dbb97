"""Actionable error catalog for nidsdeploy."""

from typing import Dict

_ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    "not_root": {
        "what": "This deployment must be run as root or with sudo.",
        "next": "Re-run the command with `sudo`.",
    },
    "bundle_missing": {
        "what": "Application bundle entries not found in {bundle_dir}: {missing}",
        "next": "Run from the application directory or pass `--bundle-dir`.",
    },
    "package_install_failed": {
        "what": "Package installation failed: {error}",
        "next": "Check `apt-get` output and network access, then re-run.",
    },
    "backup_failed": {
        "what": "Could not archive the existing deployment in {deploy_root}: {error}",
        "next": "Free disk space in {backup_root} or fix its permissions before re-running.",
    },
    "proxy_syntax_invalid": {
        "what": "nginx rejected the generated site configuration for '{domain}'.",
        "next": "Check `--domain` for invalid characters; the previous configuration is still active.",
    },
    "proxy_check_failed": {
        "what": "Could not run the nginx syntax check for '{domain}': {error}",
        "next": "Make sure nginx is installed and responsive, then re-run; the previous configuration is still active.",
    },
    "abort_before_commit": {
        "what": "Deployment stopped before the live directory was touched.",
        "next": "Fix the reported problem and re-run; the previous deployment is intact.",
    },
    "abort_during_commit": {
        "what": "Deployment stopped while {deploy_root} was being updated; some files may already be replaced.",
        "next": "Restore the previous version with `tar -xzf {archive} -C {deploy_root}` or fix and re-run.",
    },
    "abort_during_commit_no_backup": {
        "what": "Deployment stopped while {deploy_root} was being updated; some files may already be replaced.",
        "next": "This was the first deployment, so there is no backup; fix the problem and re-run.",
    },
    "abort_after_commit": {
        "what": "Deployment stopped after {deploy_root} was overwritten.",
        "next": "Restore the previous version with `tar -xzf {archive} -C {deploy_root}` or fix and re-run.",
    },
    "abort_after_commit_no_backup": {
        "what": "Deployment stopped after {deploy_root} was overwritten.",
        "next": "This was the first deployment, so there is no backup; fix the problem and re-run.",
    },
}


def actionable_error(code: str, **kwargs: str) -> str:
    if code not in _ERROR_MESSAGES:
        raise KeyError(f"Unknown error catalog key: {code}")

    template = _ERROR_MESSAGES[code]
    what = template["what"].format(**kwargs)
    next_step = template["next"].format(**kwargs)
    return f"{what} Suggested action: {next_step}"
