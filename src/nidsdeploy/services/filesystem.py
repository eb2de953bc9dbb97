"""Filesystem helpers for nidsdeploy."""

import grp
import logging
import os
import pwd
import shutil
import tempfile
from typing import Tuple

from nidsdeploy.errors import DeployError


class FileSystemService:
    """Encapsulates file and directory side effects."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def ensure_dir(self, path: str):
        try:
            os.makedirs(path, exist_ok=True)
        except OSError as exc:
            raise DeployError(f"Could not create directory {path}: {exc}") from exc

    def set_permissions(self, path: str, mode: int):
        try:
            os.chmod(path, mode)
        except OSError as exc:
            raise DeployError(f"Could not set permissions {oct(mode)} on {path}: {exc}") from exc

    def set_tree_permissions(self, root: str, dir_mode: int, file_mode: int, script_mode: int):
        if not os.path.exists(root):
            return

        self.set_permissions(root, dir_mode)
        for current_root, dirs, files in os.walk(root):
            for directory in dirs:
                self.set_permissions(os.path.join(current_root, directory), dir_mode)
            for file_name in files:
                mode = script_mode if file_name.endswith(".sh") else file_mode
                self.set_permissions(os.path.join(current_root, file_name), mode)

    def resolve_account(self, user: str, group: str) -> Tuple[int, int]:
        """Return ``(uid, gid)`` for a user and group given by name or numeric id."""
        try:
            uid = int(user) if str(user).isdigit() else pwd.getpwnam(user).pw_uid
            gid = int(group) if str(group).isdigit() else grp.getgrnam(group).gr_gid
        except KeyError as exc:
            raise DeployError(f"Unknown service account {user}:{group}: {exc}") from exc
        return uid, gid

    def chown_tree(self, root: str, uid: int, gid: int):
        try:
            os.chown(root, uid, gid)
            for current_root, dirs, files in os.walk(root):
                for name in dirs + files:
                    os.lchown(os.path.join(current_root, name), uid, gid)
        except OSError as exc:
            raise DeployError(f"Could not change ownership of {root}: {exc}") from exc

    def copy_entry(self, source: str, destination_dir: str) -> str:
        target = os.path.join(destination_dir, os.path.basename(source.rstrip(os.sep)))
        try:
            if os.path.isdir(source):
                shutil.copytree(source, target, dirs_exist_ok=True)
            else:
                shutil.copy2(source, target)
        except OSError as exc:
            raise DeployError(f"Could not copy {source} to {destination_dir}: {exc}") from exc
        self.logger.debug("Copied %s -> %s", source, target)
        return target

    def write_text_atomic(self, path: str, content: str, mode: int = 0o644):
        """Write ``content`` to ``path`` through a sibling temp file and rename."""
        directory = os.path.dirname(path) or "."
        self.ensure_dir(directory)

        fd, temp_path = tempfile.mkstemp(prefix=".nidsdeploy-", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as file_obj:
                file_obj.write(content)
            os.chmod(temp_path, mode)
            os.replace(temp_path, path)
        except OSError as exc:
            raise DeployError(f"Could not write {path}: {exc}") from exc
        finally:
            if os.path.exists(temp_path):
                try:
                    os.remove(temp_path)
                except OSError:
                    pass
        self.logger.debug("Wrote %s", path)

    def remove_file(self, path: str):
        if not os.path.lexists(path):
            return
        try:
            os.remove(path)
            self.logger.debug("Removed file: %s", path)
        except OSError as exc:
            raise DeployError(f"Could not remove {path}: {exc}") from exc

    def symlink_force(self, target: str, link_path: str):
        """Point ``link_path`` at ``target``, replacing whatever is there (``ln -sf``)."""
        self.ensure_dir(os.path.dirname(link_path) or ".")
        temp_link = f"{link_path}.nidsdeploy-tmp"
        try:
            if os.path.lexists(temp_link):
                os.remove(temp_link)
            os.symlink(target, temp_link)
            os.replace(temp_link, link_path)
        except OSError as exc:
            raise DeployError(f"Could not link {link_path} -> {target}: {exc}") from exc
