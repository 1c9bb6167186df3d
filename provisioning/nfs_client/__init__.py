# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
from typing import Callable
from typing import Sequence

from gcp_api import AdCredentials
from provisioning._core import Command
from provisioning.nfs_client._access import EnforcePermissions
from provisioning.nfs_client._access import GrantSudo
from provisioning.nfs_client._mount import MountFilestore
from provisioning.nfs_client._mount import MountNfs
from provisioning.nfs_client._mount import fstab_line
from provisioning.nfs_client._packages import InstallClientPackages
from provisioning.nfs_client._realm import JoinDomain
from provisioning.nfs_client._samba import ConfigureSamba
from provisioning.nfs_client._sssd import ConfigureSssd
from provisioning.nfs_client._sssd import EnablePasswordAuthentication


def client_commands(
        server_ip: str,
        share_name: str,
        domain_fqdn: str,
        realm: str,
        workgroup: str,
        get_credentials: Callable[[], AdCredentials],
        admins_group: str,
        users_group: str,
        initial_users: Sequence[str],
        helper_repo_url: str = '',
        ) -> Sequence[Command]:
    """Commands making a machine an NFS-backed AD member, in order."""
    return [
        InstallClientPackages(),
        MountFilestore(server_ip, share_name),
        JoinDomain(domain_fqdn, get_credentials),
        EnablePasswordAuthentication(),
        ConfigureSssd(),
        ConfigureSamba(workgroup, realm),
        GrantSudo(admins_group),
        EnforcePermissions(users_group, initial_users, helper_repo_url),
        ]


__all__ = [
    'ConfigureSamba',
    'ConfigureSssd',
    'EnablePasswordAuthentication',
    'EnforcePermissions',
    'GrantSudo',
    'InstallClientPackages',
    'JoinDomain',
    'MountFilestore',
    'MountNfs',
    'client_commands',
    'fstab_line',
    ]
