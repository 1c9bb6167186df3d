# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
import logging
import os
import shlex
from abc import ABCMeta
from abc import abstractmethod
from pathlib import PurePosixPath
from typing import Callable
from typing import Sequence

from provisioning._ssh import ssh
from provisioning._ssh import ssh_input


class Command(metaclass=ABCMeta):

    @abstractmethod
    def run(self, host: str):
        pass


class Run(Command):

    def __init__(self, command):
        self._command = command

    def __repr__(self):
        return f'{Run.__name__}({self._command!r})'

    def run(self, host):
        ssh(host, self._command)


class RunWithInput(Command):
    """Pass data to the command via stdin.

    Data is obtained right before running, so that secrets are not kept
    in command objects and do not appear in the output.
    """

    def __init__(self, command: str, get_data: Callable[[], bytes], description: str):
        self._command = command
        self._get_data = get_data
        self._description = description

    def __repr__(self):
        return f'{RunWithInput.__name__}({self._command!r}, <{self._description}>)'

    def run(self, host):
        ssh_input(host, self._command, self._get_data(), log_input=False)


class InstallFile(Command):
    """Upload file content. Set owner and permissions. Make dirs.

    >>> print(InstallFile('x = 1\\n', '/etc/samba/smb.conf')._command)
    sudo install -D -m 0644 -o root -g root /dev/stdin /etc/samba/smb.conf
    >>> print(InstallFile('', '/etc/sudoers.d/10-linux admins', mode='0440')._command)
    sudo install -D -m 0440 -o root -g root /dev/stdin '/etc/sudoers.d/10-linux admins'
    >>> InstallFile('', 'etc/fstab') # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
    ...
    RuntimeError: Target must be an absolute path, got 'etc/fstab'
    """

    def __init__(self, content: str, target: str, mode: str = '0644', owner: str = 'root'):
        if not PurePosixPath(target).is_absolute():
            raise RuntimeError(f"Target must be an absolute path, got {target!r}")
        self._content = content
        self._target = target
        params = shlex.join(['-D', '-m', mode, '-o', owner, '-g', owner])
        self._command = f'sudo install {params} /dev/stdin {shlex.quote(target)}'

    def __repr__(self):
        return f'{InstallFile.__name__}(<{len(self._content)} chars>, {self._target!r})'

    def run(self, host):
        ssh_input(host, self._command, self._content.encode('utf8'))


class CompositeCommand(Command):

    def __init__(self, commands: Sequence[Command]):
        self._commands: Sequence[Command] = commands

    def __repr__(self):
        return f'<{self.__class__.__name__} with {len(self._commands)} commands>'

    def commands(self) -> Sequence[Command]:
        return self._commands

    def run(self, host):
        for command in self._commands:
            _logger.debug("%s: %r", host, command)
            command.run(host)


class Fleet:

    def __init__(self, hosts: Sequence[str]):
        self._hosts = hosts

    def __repr__(self):
        return f'{Fleet.__name__}({self._hosts!r})'

    def run(self, commands: Sequence[Command]):
        if os.getenv('PROVISIONING_ASK_FOR_CONFIRMATION', ''):
            confirmation = Confirmation(input)
        else:
            confirmation = None
        for host in self._hosts:
            for command in commands:
                _logger.info("%s: %r", host, command)
                if confirmation is None or confirmation.user_agrees(host, command):
                    command.run(host)
                else:
                    _logger.info("%s: %r: skipped by user", host, command)


class Confirmation:
    """Ask before every command: y - run, n - skip, a - run all the rest."""

    def __init__(self, ask: Callable[[str], str]):
        self._ask = ask
        self._agrees_with_all = False

    def user_agrees(self, host: str, command: Command) -> bool:
        if self._agrees_with_all:
            return True
        while True:
            answer = self._ask(f"Run {command!r} on {host} [y,n,a]? ")[:1].lower()
            if answer == 'y':
                return True
            elif answer == 'n':
                return False
            elif answer == 'a':
                self._agrees_with_all = True
                return True


_logger = logging.getLogger(__name__)
