# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
import shlex

from provisioning._core import Run


class AptUpdate(Run):

    def __init__(self):
        super().__init__('sudo DEBIAN_FRONTEND=noninteractive apt-get update -y')

    def __repr__(self):
        return f'{AptUpdate.__name__}()'


class AptInstall(Run):
    """Install packages without prompts. Installed packages are skipped by apt.

    >>> print(AptInstall('nfs-common', 'krb5-user')._command)
    sudo DEBIAN_FRONTEND=noninteractive apt-get install -y nfs-common krb5-user
    """

    def __init__(self, *packages: str):
        if not packages:
            raise ValueError("No packages to install")
        self._packages = packages
        super().__init__(f'sudo DEBIAN_FRONTEND=noninteractive apt-get install -y {shlex.join(packages)}')

    def __repr__(self):
        return f'{AptInstall.__name__}(<{len(self._packages)} packages>)'
