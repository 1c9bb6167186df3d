# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
import logging
import shlex
import subprocess

from provisioning._core import Command
from provisioning._ssh import ssh_still


class LogInOnce(Command):
    """Open and close a login session to make PAM create the home dir.

    Directory users may be absent when the machine is provisioned
    before the directory is populated. It is not an error.
    """

    def __init__(self, username: str):
        self._username = username

    def __repr__(self):
        return f'{LogInOnce.__name__}({self._username!r})'

    def run(self, host):
        u = shlex.quote(self._username)
        r = ssh_still(host, f'sudo su -c exit {u}')
        if r.returncode == 0:
            _logger.info("%s: %s: logged in", host, self._username)
        elif b'does not exist' in r.stderr.lower() or b'unknown' in r.stderr.lower():
            _logger.warning("%s: %s: no such user, home dir is not created", host, self._username)
        else:
            _logger.error("%s: %s: failure: %s", host, self._username, r.stderr)
            raise subprocess.CalledProcessError(r.returncode, r.args, r.stdout, r.stderr)


_logger = logging.getLogger(__name__)
