# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
import shlex

from provisioning._core import Run


class SystemCtl(Run):
    """Manage system units.

    >>> SystemCtl('restart', 'winbind', 'smbd', 'nmbd', 'sssd')
    SystemCtl('restart', 'winbind', 'smbd', 'nmbd', 'sssd')
    >>> print(SystemCtl('daemon-reload')._command)
    sudo systemctl daemon-reload
    """

    def __init__(self, *command: str):
        super().__init__(f'sudo systemctl {shlex.join(command)}')
        self._repr = f'{SystemCtl.__name__}{command!r}'

    def __repr__(self):
        return self._repr
