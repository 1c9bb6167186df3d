# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
import logging

from provisioning._core import Command
from provisioning._core import CompositeCommand
from provisioning._core import InstallFile
from provisioning._ssh import ssh
from provisioning._systemd import SystemCtl

# NetBIOS names are limited to 15 characters.
# See: https://learn.microsoft.com/en-us/troubleshoot/windows-server/identity/naming-conventions-for-computer-domain-site-ou
_NETBIOS_NAME_LENGTH = 15

_SMB_CONF_TEMPLATE = '''\
[global]
workgroup = {workgroup}
security = ads
strict sync = no
sync always = no
aio read size = 1
aio write size = 1
use sendfile = yes
passdb backend = tdbsam
printing = cups
printcap name = cups
load printers = yes
cups options = raw
comment = Samba file server
kerberos method = secrets and keytab
netbios name = {netbios_name}
realm = {realm}
log level = 1
idmap config * : backend = tdb
idmap config * : range = 3000-7999
idmap config {workgroup} : backend = sss
idmap config {workgroup} : range = 10000-1999999999
template shell = /bin/bash
template homedir = /home/%U
winbind use default domain = yes
winbind enum users = yes
winbind enum groups = yes
winbind nss info = rfc2307
winbind offline logon = yes
client signing = yes
server signing = yes
map acl inherit = yes
vfs objects = acl_xattr
inherit acls = yes
inherit permissions = yes
max protocol = SMB3

[homes]
comment = Home Directories
browseable = No
read only = No
inherit acls = Yes

[nfs]
comment = Mounted NFS area
path = /nfs
read only = no
guest ok = no
'''

# Directory users and groups are resolved by SSSD first, then by Winbind.
NSSWITCH_CONF = '''\
passwd:     files sss winbind
group:      files sss winbind
automount:  files sss winbind
shadow:     files sss winbind
hosts:      files dns myhostname
bootparams: nisplus [NOTFOUND=return] files
ethers:     files
netmasks:   files
networks:   files
protocols:  files
rpc:        files
services:   files sss
netgroup:   files sss
publickey:  nisplus
aliases:    files nisplus
'''


def netbios_name(hostname: str) -> str:
    """Derive NetBIOS name from the host name.

    >>> netbios_name('nfs-gateway-instance-1\\n')
    'NFS-GATEWAY-INS'
    >>> netbios_name('client-2.internal')
    'CLIENT-2.INTERN'
    >>> netbios_name('  ')
    Traceback (most recent call last):
    ...
    ValueError: Empty host name
    """
    name = hostname.strip()
    if not name:
        raise ValueError("Empty host name")
    return name[:_NETBIOS_NAME_LENGTH].upper()


def render_smb_conf(workgroup: str, realm: str, netbios: str) -> str:
    """Render smb.conf of an AD member file server.

    >>> conf = render_smb_conf('MCLOUD', 'MCLOUD.MIKECLOUD.COM', 'NFS-GATEWAY')
    >>> [line for line in conf.splitlines() if line.startswith(('workgroup', 'netbios', 'realm'))]
    ['workgroup = MCLOUD', 'netbios name = NFS-GATEWAY', 'realm = MCLOUD.MIKECLOUD.COM']
    """
    return _SMB_CONF_TEMPLATE.format(
        workgroup=workgroup,
        realm=realm.upper(),
        netbios_name=netbios,
        )


class InstallSmbConf(Command):
    """Install smb.conf with the NetBIOS name of the target machine."""

    def __init__(self, workgroup: str, realm: str):
        self._workgroup = workgroup
        self._realm = realm

    def __repr__(self):
        return f'{InstallSmbConf.__name__}({self._workgroup!r}, {self._realm!r})'

    def run(self, host):
        r = ssh(host, 'cat /etc/hostname')
        netbios = netbios_name(r.stdout.decode())
        _logger.info("%s: NetBIOS name %s", host, netbios)
        conf = render_smb_conf(self._workgroup, self._realm, netbios)
        InstallFile(conf, '/etc/samba/smb.conf').run(host)


class ConfigureSamba(CompositeCommand):

    def __init__(self, workgroup: str, realm: str):
        super().__init__([
            SystemCtl('stop', 'sssd'),
            InstallSmbConf(workgroup, realm),
            InstallFile(NSSWITCH_CONF, '/etc/nsswitch.conf'),
            SystemCtl('restart', 'winbind', 'smbd', 'nmbd', 'sssd'),
            ])
        self._repr = f'{ConfigureSamba.__name__}({workgroup!r}, {realm!r})'

    def __repr__(self):
        return self._repr


_logger = logging.getLogger(__name__)
