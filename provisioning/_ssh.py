# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
import logging
import os
import shlex
import subprocess

# The machine being provisioned itself, e.g. from a VM startup script.
LOCAL_HOST = 'localhost'


def ssh(host: str, command: str):
    r = subprocess.run(
        _build(host, command),
        stdout=subprocess.PIPE,
        # It may hang waiting for input when no input is actually needed.
        # See: https://github.com/PowerShell/Win32-OpenSSH/issues/1334
        stdin=subprocess.DEVNULL,
        timeout=600,
        )
    _check(host, r)
    return r


def ssh_still(host: str, command: str):
    r = subprocess.run(
        _build(host, command),
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        # It may hang waiting for input when no input is actually needed.
        # See: https://github.com/PowerShell/Win32-OpenSSH/issues/1334
        stdin=subprocess.DEVNULL,
        timeout=600,
        )
    if host != LOCAL_HOST and r.returncode == 255:
        raise SSHCannotConnect(r.stderr.decode())
    return r


def ssh_input(host: str, command: str, stdin: bytes, *, log_input=True):
    if log_input:
        _logger.debug("Input: %d bytes", len(stdin))
    # Package installation and domain join are slow.
    r = subprocess.run(_build(host, command), input=stdin, stdout=subprocess.PIPE, timeout=600)
    _check(host, r)
    return r


def _check(host, r: subprocess.CompletedProcess):
    if host != LOCAL_HOST and r.returncode == 255:
        raise SSHCannotConnect()
    r.check_returncode()


def _build(host, command):
    """Build the command line, via SSH or locally.

    >>> _build('client-1', 'sudo mount /nfs')
    ['ssh', '-oBatchMode=yes', 'client-1', 'sudo mount /nfs']
    >>> _build('localhost', 'sudo mount /nfs')
    ['sh', '-c', 'sudo mount /nfs']
    """
    if host == LOCAL_HOST:
        full_command = ['sh', '-c', command]
    else:
        # In BatchMode, execution fails if interactive input is required.
        full_command = ['ssh', '-oBatchMode=yes', host, command]
    _log(full_command)
    return full_command


def _log(command):
    if os.name == 'nt':
        _logger.info("Run: %s", subprocess.list2cmdline(command))
    else:
        # shlex.join() only works with Iterable[str] and fails with PathLike
        command = [str(arg) if isinstance(arg, os.PathLike) else arg for arg in command]
        _logger.info("Run: %s", shlex.join(command))


class SSHCannotConnect(Exception):
    pass


_logger = logging.getLogger(__name__)
