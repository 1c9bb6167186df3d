# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
"""File server and its clients configuration, and tools for that.

The goal is to keep configuration in code under version control.
It serves as documentation for what is installed and configured.
Nothing may be changed on the machines without a provisioning script.

Provisioning is the process of creating and setting up IT infrastructure.
See: https://www.redhat.com/en/topics/automation/what-is-provisioning

Cloud resources are described declaratively and submitted to the provider,
which does the actual work. Client machines are configured by scripts,
each of them is a set of commands run on a fleet.

Every action is formulated in terms of a command.
In most cases, it is a Run object
or an instance of a subclass of CompositeCommand.
It is desirable that commands be written in the most raw form,
so that it is clear what is being run and it is easy to copy.

Commands must be idempotent.
The second run must not "accumulate" changes.
Running it multiple times must be safe.

Commands should not be executed directly. Only via a fleet.
This allows for reordering, logging, interaction with the user
and forces simpler commands that do not use results of each other,
which makes it easier to run them manually.

A fleet may consist of the "localhost" host only. Then commands are run
on the machine itself, which is how a VM provisions itself on first boot.

If a command fails, the run stops. Nothing is rolled back.
The human who runs the script must investigate the problem. Since commands
are idempotent, the script can be rerun from the start after a fix.

Configuration must be as non-invasive as possible.
Alter the defaults as little as possible.
The default configuration is usually the most tested and secure.
"""
from provisioning._config_files import ReplaceLine
from provisioning._config_files import Substitute
from provisioning._config_files import SubstituteRegex
from provisioning._core import Command
from provisioning._core import CompositeCommand
from provisioning._core import Fleet
from provisioning._core import InstallFile
from provisioning._core import Run
from provisioning._core import RunWithInput
from provisioning._packages import AptInstall
from provisioning._packages import AptUpdate
from provisioning._systemd import SystemCtl
from provisioning._users import LogInOnce

__all__ = [
    'AptInstall',
    'AptUpdate',
    'Command',
    'CompositeCommand',
    'Fleet',
    'InstallFile',
    'LogInOnce',
    'ReplaceLine',
    'Run',
    'RunWithInput',
    'Substitute',
    'SubstituteRegex',
    'SystemCtl',
    ]
