# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
import re
import shlex
from collections.abc import Sequence
from urllib.parse import urlsplit

from provisioning._config_files import SubstituteRegex
from provisioning._core import Command
from provisioning._core import CompositeCommand
from provisioning._core import InstallFile
from provisioning._core import Run
from provisioning._users import LogInOnce

_group_name_re = re.compile(r'[a-zA-Z0-9_][a-zA-Z0-9_.-]*')


def sudoers_entry(group: str) -> str:
    """Render passwordless sudo rule for a group.

    >>> sudoers_entry('linux-admins')
    '%linux-admins ALL=(ALL) NOPASSWD:ALL\\n'
    >>> sudoers_entry('linux admins')
    Traceback (most recent call last):
    ...
    ValueError: Invalid group name: 'linux admins'
    """
    if not _group_name_re.fullmatch(group):
        raise ValueError(f"Invalid group name: {group!r}")
    return f'%{group} ALL=(ALL) NOPASSWD:ALL\n'


class GrantSudo(CompositeCommand):
    """Allow group members to run anything as root without password.

    sudo ignores files in sudoers.d with dots in names. The file is
    uploaded with a suffix, checked with visudo and only then renamed.
    """

    def __init__(self, group: str, sudoers_dir: str = '/etc/sudoers.d'):
        path = f'{sudoers_dir}/10-{group.replace(".", "-")}'
        staged = shlex.quote(path + '.new')
        super().__init__([
            InstallFile(sudoers_entry(group), path + '.new', mode='0440'),
            Run(f'sudo visudo -cf {staged}'),
            Run(f'sudo mv -f {staged} {shlex.quote(path)}'),
            ])
        self._repr = f'{GrantSudo.__name__}({group!r})'

    def __repr__(self):
        return self._repr


class CloneRepo(Run):
    """Clone repository into a directory, unless it is cloned already.

    >>> print(CloneRepo('https://github.com/mamonaco1973/gcp-filestore.git', '/nfs')._command)
    test -d /nfs/gcp-filestore/.git || sudo git -C /nfs clone -q https://github.com/mamonaco1973/gcp-filestore.git
    """

    def __init__(self, url: str, parent_dir: str):
        self.target = parent_dir.rstrip('/') + '/' + repo_dir_name(url)
        u = shlex.quote(url)
        p = shlex.quote(parent_dir)
        t = shlex.quote(self.target)
        super().__init__(f'test -d {t}/.git || sudo git -C {p} clone -q {u}')


def repo_dir_name(url: str) -> str:
    """Directory name git clone creates.

    >>> repo_dir_name('https://github.com/mamonaco1973/gcp-filestore.git')
    'gcp-filestore'
    >>> repo_dir_name('https://example.com/group/repo/')
    'repo'
    """
    path = urlsplit(url).path.rstrip('/')
    name = path.rsplit('/', 1)[-1]
    if name.endswith('.git'):
        name = name[:-len('.git')]
    if not name:
        raise ValueError(f"Cannot derive directory name from {url!r}")
    return name


class MakeHomesPrivate(Run):
    """Set mode 0700 on every home directory that exists.

    An empty home root, e.g. on a freshly created share, is not an error.

    >>> print(MakeHomesPrivate('/home')._command)
    sudo find /home -mindepth 1 -maxdepth 1 -type d -exec chmod 700 {} +
    """

    def __init__(self, home_root: str):
        h = shlex.quote(home_root)
        super().__init__(f'sudo find {h} -mindepth 1 -maxdepth 1 -type d -exec chmod 700 {{}} +')


class EnforcePermissions(CompositeCommand):
    """Make homes private and the shared area writable by the users group."""

    def __init__(self, users_group: str, initial_users: Sequence[str], helper_repo_url: str = ''):
        g = shlex.quote(users_group)
        commands: list[Command] = [
            # New home directories are created with 0700.
            SubstituteRegex('/etc/login.defs', r's/^\(\s*HOME_MODE\s*\)[0-9]\+/\10700/'),
            *[LogInOnce(user) for user in initial_users],
            Run(f'sudo chgrp {g} /nfs /nfs/data'),
            Run('sudo chmod 770 /nfs /nfs/data'),
            MakeHomesPrivate('/home'),
            ]
        if helper_repo_url:
            clone = CloneRepo(helper_repo_url, '/nfs')
            t = shlex.quote(clone.target)
            commands.extend([
                clone,
                Run(f'sudo chmod -R 775 {t}'),
                Run(f'sudo chgrp -R {g} {t}'),
                ])
        super().__init__(commands)
        self._repr = f'{EnforcePermissions.__name__}({users_group!r}, {list(initial_users)!r})'

    def __repr__(self):
        return self._repr
