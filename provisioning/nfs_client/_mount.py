# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
import shlex
from collections.abc import Sequence

from provisioning._config_files import ReplaceLine
from provisioning._config_files import sed_escape_pattern
from provisioning._core import CompositeCommand
from provisioning._core import Run
from provisioning._systemd import SystemCtl

# Basic tier Filestore serves NFSv3 only.
# _netdev: mount after the network is up.
NFS_MOUNT_OPTIONS = (
    'vers=3',
    'rw',
    'hard',
    'noatime',
    'rsize=65536',
    'wsize=65536',
    'timeo=600',
    '_netdev',
    )


def fstab_line(
        server_ip: str,
        export_path: str,
        mount_point: str,
        options: Sequence[str] = NFS_MOUNT_OPTIONS,
        ) -> str:
    """Render fstab entry for NFS export.

    >>> fstab_line('10.1.2.3', '/filestore/home', '/home')
    '10.1.2.3:/filestore/home /home nfs vers=3,rw,hard,noatime,rsize=65536,wsize=65536,timeo=600,_netdev 0 0'
    >>> fstab_line('10.1.2.3', 'filestore', '/nfs')
    Traceback (most recent call last):
    ...
    ValueError: Paths must be absolute: 'filestore', '/nfs'
    """
    if not export_path.startswith('/') or not mount_point.startswith('/'):
        raise ValueError(f"Paths must be absolute: {export_path!r}, {mount_point!r}")
    if not server_ip or any(c.isspace() for c in server_ip):
        raise ValueError(f"Invalid server address: {server_ip!r}")
    return f'{server_ip}:{export_path} {mount_point} nfs {",".join(options)} 0 0'


def fstab_entry_pattern(mount_point: str) -> str:
    r"""Match fstab entries of the mount point, commented ones excluded.

    >>> print(fstab_entry_pattern('/nfs'))
    ^[^#[:space:]][^[:space:]]*[[:space:]]\+/nfs[[:space:]]
    >>> print(fstab_entry_pattern('/mnt/share.1'))
    ^[^#[:space:]][^[:space:]]*[[:space:]]\+/mnt/share\.1[[:space:]]
    """
    return f'^[^#[:space:]][^[:space:]]*[[:space:]]\\+{sed_escape_pattern(mount_point)}[[:space:]]'


class MountNfs(CompositeCommand):
    """Persist NFS mount in fstab and mount it.

    The mount point has a single fstab entry however many times it is run.
    An entry with another server address is replaced.
    A mounted mount point is not mounted again.
    """

    def __init__(self, server_ip: str, export_path: str, mount_point: str, fstab: str = '/etc/fstab'):
        m = shlex.quote(mount_point)
        super().__init__([
            Run(f'sudo mkdir -p {m}'),
            ReplaceLine(
                fstab,
                fstab_entry_pattern(mount_point),
                fstab_line(server_ip, export_path, mount_point),
                ),
            # Regenerate mount units from fstab.
            SystemCtl('daemon-reload'),
            Run(f'mountpoint -q {m} || sudo mount {m}'),
            ])
        self._repr = f'{MountNfs.__name__}({server_ip!r}, {export_path!r}, {mount_point!r})'

    def __repr__(self):
        return self._repr


class MountFilestore(CompositeCommand):
    """Mount the share root on /nfs and its home subdirectory on /home.

    Subdirectories are created on the share between the two mounts.
    """

    def __init__(self, server_ip: str, share_name: str):
        share = '/' + share_name.strip('/')
        super().__init__([
            MountNfs(server_ip, share, '/nfs'),
            Run('sudo mkdir -p /nfs/home /nfs/data'),
            MountNfs(server_ip, share + '/home', '/home'),
            ])
        self._repr = f'{MountFilestore.__name__}({server_ip!r}, {share_name!r})'

    def __repr__(self):
        return self._repr
