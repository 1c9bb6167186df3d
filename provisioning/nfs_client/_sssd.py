# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
from provisioning._config_files import Substitute
from provisioning._core import CompositeCommand
from provisioning._core import Run
from provisioning._systemd import SystemCtl

SSSD_CONF = '/etc/sssd/sssd.conf'

# Pairs of (default written by realm join, desired value).
SSSD_SUBSTITUTIONS = (
    # Log in as "jsmith" instead of "jsmith@mcloud.mikecloud.com".
    ('use_fully_qualified_names = True', 'use_fully_qualified_names = False'),
    # UID and GID come from AD attributes, the same on every machine.
    ('ldap_id_mapping = True', 'ldap_id_mapping = False'),
    # Any domain user may log in.
    ('access_provider = ad', 'access_provider = simple'),
    ('fallback_homedir = /home/%u@%d', 'fallback_homedir = /home/%u'),
    )


class EnablePasswordAuthentication(Substitute):
    """Allow SSH password login, disabled in cloud images."""

    def __init__(self):
        super().__init__(
            '/etc/ssh/sshd_config.d/60-cloudimg-settings.conf',
            'PasswordAuthentication no',
            'PasswordAuthentication yes',
            )

    def __repr__(self):
        return f'{EnablePasswordAuthentication.__name__}()'


class ConfigureSssd(CompositeCommand):

    def __init__(self):
        super().__init__([
            *[Substitute(SSSD_CONF, old, new) for old, new in SSSD_SUBSTITUTIONS],
            # Suppress "file .Xauthority does not exist" on first login.
            Run('sudo touch /etc/skel/.Xauthority'),
            Run('sudo chmod 600 /etc/skel/.Xauthority'),
            Run('sudo pam-auth-update --enable mkhomedir'),
            SystemCtl('restart', 'sssd'),
            SystemCtl('restart', 'ssh'),
            ])

    def __repr__(self):
        return f'{ConfigureSssd.__name__}()'
