import pytest

from nidsdeploy.errors_catalog import actionable_error


def test_actionable_error_formats_message_with_suggested_action():
    message = actionable_error(
        "abort_after_commit",
        deploy_root="/var/www/nids",
        archive="/var/backups/nids/backup_20240101_120000.tar.gz",
    )

    assert "/var/www/nids was overwritten" in message
    assert "tar -xzf /var/backups/nids/backup_20240101_120000.tar.gz -C /var/www/nids" in message
    assert "Suggested action:" in message


def test_actionable_error_rejects_unknown_code():
    with pytest.raises(KeyError):
        actionable_error("does_not_exist")


def test_actionable_error_for_partial_overwrite_names_archive():
    message = actionable_error(
        "abort_during_commit",
        deploy_root="/var/www/nids",
        archive="/var/backups/nids/backup_20240101_120000.tar.gz",
    )

    assert "some files may already be replaced" in message
    assert "tar -xzf /var/backups/nids/backup_20240101_120000.tar.gz -C /var/www/nids" in message
