# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
import logging
import shlex
from typing import Callable

from gcp_api import AdCredentials
from provisioning._core import Command
from provisioning._core import RunWithInput
from provisioning._ssh import ssh_still


class JoinDomain(Command):
    """Join AD domain with Samba as membership software.

    Nothing is done if the machine is already a member of the domain.
    Credentials are requested only when they are needed.
    """

    def __init__(self, domain_fqdn: str, get_credentials: Callable[[], AdCredentials]):
        self._domain = domain_fqdn
        self._get_credentials = get_credentials

    def __repr__(self):
        return f'{JoinDomain.__name__}({self._domain!r})'

    def run(self, host):
        if self._is_joined(host):
            _logger.info("%s: already joined %s", host, self._domain)
            return
        credentials = self._get_credentials()
        command = join_command(self._domain, credentials.username)
        # realm reads the password from stdin if it is not a terminal.
        password = credentials.password.encode('utf8') + b'\n'
        RunWithInput(command, lambda: password, 'password').run(host)
        _logger.info("%s: joined %s as %s", host, self._domain, credentials.username)

    def _is_joined(self, host) -> bool:
        r = ssh_still(host, 'realm list --name-only')
        if r.returncode != 0:
            _logger.debug("%s: realm list failed: %s", host, r.stderr)
            return False
        joined = r.stdout.decode().split()
        return self._domain.lower() in (name.lower() for name in joined)


def join_command(domain_fqdn: str, username: str) -> str:
    """Build realm join command line. Password is passed via stdin.

    >>> print(join_command('mcloud.mikecloud.com', 'admin'))
    sudo realm join --membership-software=samba -U admin mcloud.mikecloud.com --verbose
    """
    return shlex.join([
        'sudo', 'realm', 'join',
        '--membership-software=samba',
        '-U', username,
        domain_fqdn,
        '--verbose',
        ])


_logger = logging.getLogger(__name__)
