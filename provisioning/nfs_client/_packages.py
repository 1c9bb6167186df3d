# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
from provisioning._core import CompositeCommand
from provisioning._packages import AptInstall
from provisioning._packages import AptUpdate

CLIENT_PACKAGES = (
    # Editors and utilities.
    'less',
    'unzip',
    'nano',
    'vim',
    # AD discovery and join, identity and authentication via SSSD.
    'realmd',
    'sssd-ad',
    'sssd-tools',
    'libnss-sss',
    'libpam-sss',
    'adcli',
    'krb5-user',
    # Home directory creation on first login.
    'oddjob',
    'oddjob-mkhomedir',
    'packagekit',
    # Samba file server and Winbind.
    'samba',
    'samba-common-bin',
    'samba-libs',
    'winbind',
    'libpam-winbind',
    'libnss-winbind',
    'nfs-common',
    'stunnel4',
    )


class InstallClientPackages(CompositeCommand):

    def __init__(self):
        super().__init__([
            AptUpdate(),
            AptInstall(*CLIENT_PACKAGES),
            ])

    def __repr__(self):
        return f'{InstallClientPackages.__name__}()'
