# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
import logging
import stat
import subprocess
import tempfile
import unittest
from pathlib import Path

from gcp_api import AdCredentials
from provisioning._ssh import LOCAL_HOST
from provisioning._users import LogInOnce
from provisioning.nfs_client import ConfigureSamba
from provisioning.nfs_client import EnforcePermissions
from provisioning.nfs_client import GrantSudo
from provisioning.nfs_client import JoinDomain
from provisioning.nfs_client import MountFilestore
from provisioning.nfs_client import MountNfs
from provisioning.nfs_client import client_commands
from provisioning.nfs_client import fstab_line
from provisioning.nfs_client._access import CloneRepo
from provisioning.nfs_client._access import MakeHomesPrivate
from provisioning.nfs_client._samba import NSSWITCH_CONF
from provisioning.nfs_client._samba import netbios_name
from provisioning.nfs_client._samba import render_smb_conf
from provisioning.tests._fake_bin import FakeBin

_FAKE_REALM = '''\
#!/bin/sh
state={state}
case "$1" in
list)
    cat "$state/joined" 2>/dev/null
    ;;
join)
    shift
    echo "$@" > "$state/join_args"
    cat > "$state/join_stdin"
    for arg; do
        case "$arg" in
        -*) ;;
        *) domain="$arg" ;;
        esac
    done
    echo "$domain" > "$state/joined"
    ;;
*)
    exit 2
    ;;
esac
'''


class TestJoinDomain(unittest.TestCase):

    def setUp(self):
        self._fake_bin = FakeBin().__enter__()
        self._dir = tempfile.TemporaryDirectory()
        self.state = Path(self._dir.name)
        self._fake_bin.add('realm', _FAKE_REALM.format(state=self.state))
        self.credential_requests = 0

    def tearDown(self):
        self._dir.cleanup()
        self._fake_bin.__exit__(None, None, None)

    def _get_credentials(self):
        self.credential_requests += 1
        return AdCredentials('admin', 'Secret-123')

    def test_join(self):
        JoinDomain('mcloud.mikecloud.com', self._get_credentials).run(LOCAL_HOST)
        self.assertEqual(self.credential_requests, 1)
        args = (self.state / 'join_args').read_text()
        self.assertEqual(args, '--membership-software=samba -U admin mcloud.mikecloud.com --verbose\n')
        self.assertEqual((self.state / 'join_stdin').read_text(), 'Secret-123\n')

    def test_already_joined(self):
        (self.state / 'joined').write_text('MCLOUD.MIKECLOUD.COM\n')
        JoinDomain('mcloud.mikecloud.com', self._get_credentials).run(LOCAL_HOST)
        self.assertEqual(self.credential_requests, 0)
        self.assertFalse((self.state / 'join_args').exists())

    def test_join_twice(self):
        command = JoinDomain('mcloud.mikecloud.com', self._get_credentials)
        command.run(LOCAL_HOST)
        command.run(LOCAL_HOST)
        self.assertEqual(self.credential_requests, 1)

    def test_credentials_not_in_repr(self):
        command = JoinDomain('mcloud.mikecloud.com', self._get_credentials)
        self.assertEqual(repr(command), "JoinDomain('mcloud.mikecloud.com')")
        self.assertEqual(self.credential_requests, 0)


class TestCloneRepo(unittest.TestCase):

    def setUp(self):
        self._fake_bin = FakeBin().__enter__()
        self._dir = tempfile.TemporaryDirectory()
        self.root = Path(self._dir.name)
        self.origin = self.root / 'origin' / 'helper.git'
        subprocess.run(['git', 'init', '-q', '--bare', str(self.origin)], check=True)
        self.nfs = self.root / 'nfs'
        self.nfs.mkdir()

    def tearDown(self):
        self._dir.cleanup()
        self._fake_bin.__exit__(None, None, None)

    def test_clone_once(self):
        command = CloneRepo(str(self.origin), str(self.nfs))
        self.assertEqual(command.target, f'{self.nfs}/helper')
        command.run(LOCAL_HOST)
        self.assertTrue((self.nfs / 'helper' / '.git').is_dir())
        marker = self.nfs / 'helper' / 'local-change'
        marker.write_text('kept')
        command.run(LOCAL_HOST)
        self.assertEqual(marker.read_text(), 'kept')


_FAKE_SU = '''\
#!/bin/sh
# Called as: su -c exit <user>
case "$3" in
rpatel)
    exit 0
    ;;
locked)
    echo "su: Authentication failure" >&2
    exit 1
    ;;
*)
    echo "su: user $3 does not exist or the user entry does not contain all the required fields" >&2
    exit 1
    ;;
esac
'''

_FAKE_VISUDO = '''\
#!/bin/sh
# Called as: visudo -cf <file>
grep -qx '%[a-zA-Z0-9_.-]* ALL=(ALL) NOPASSWD:ALL' "$2"
'''


class TestLogInOnce(unittest.TestCase):

    def setUp(self):
        self._fake_bin = FakeBin().__enter__()
        self._fake_bin.add('su', _FAKE_SU)

    def tearDown(self):
        self._fake_bin.__exit__(None, None, None)

    def test_existing_user(self):
        with self.assertLogs('provisioning._users', logging.INFO) as logs:
            LogInOnce('rpatel').run(LOCAL_HOST)
        self.assertIn('rpatel: logged in', '\n'.join(logs.output))

    def test_absent_user(self):
        with self.assertLogs('provisioning._users', logging.WARNING) as logs:
            LogInOnce('akumar').run(LOCAL_HOST)
        self.assertIn('akumar: no such user', '\n'.join(logs.output))

    def test_failure(self):
        with self.assertRaises(subprocess.CalledProcessError):
            LogInOnce('locked').run(LOCAL_HOST)


class TestMountNfs(unittest.TestCase):

    def setUp(self):
        self._fake_bin = FakeBin().__enter__()
        self._fake_bin.add_recorder('systemctl')
        self._fake_bin.add_recorder('mount')
        self._dir = tempfile.TemporaryDirectory()
        self.root = Path(self._dir.name)
        self.fstab = self.root / 'fstab'
        self.fstab.write_text('LABEL=cloudimg-rootfs / ext4 discard,errors=remount-ro 0 1\n')
        self.mount_point = self.root / 'nfs'

    def tearDown(self):
        self._dir.cleanup()
        self._fake_bin.__exit__(None, None, None)

    def _mount(self, server_ip):
        command = MountNfs(server_ip, '/filestore', str(self.mount_point), fstab=str(self.fstab))
        command.run(LOCAL_HOST)

    def test_mount(self):
        self._fake_bin.add_recorder('mountpoint', exit_code=1)
        self._mount('10.20.0.2')
        self.assertTrue(self.mount_point.is_dir())
        self.assertEqual(self._fake_bin.calls(), [
            'systemctl daemon-reload',
            f'mountpoint -q {self.mount_point}',
            f'mount {self.mount_point}',
            ])
        entries = [line for line in self.fstab.read_text().splitlines() if ' nfs ' in line]
        self.assertEqual(entries, [fstab_line('10.20.0.2', '/filestore', str(self.mount_point))])

    def test_already_mounted(self):
        self._fake_bin.add_recorder('mountpoint', exit_code=0)
        self._mount('10.20.0.2')
        self.assertNotIn(f'mount {self.mount_point}', self._fake_bin.calls())

    def test_server_changed(self):
        self._fake_bin.add_recorder('mountpoint', exit_code=1)
        self._mount('10.20.0.2')
        self._mount('10.20.0.9')
        self._mount('10.20.0.9')
        entries = [line for line in self.fstab.read_text().splitlines() if ' nfs ' in line]
        self.assertEqual(entries, [fstab_line('10.20.0.9', '/filestore', str(self.mount_point))])


class TestGrantSudo(unittest.TestCase):

    def setUp(self):
        self._fake_bin = FakeBin().__enter__()
        self._dir = tempfile.TemporaryDirectory()
        self.sudoers_dir = Path(self._dir.name)

    def tearDown(self):
        self._dir.cleanup()
        self._fake_bin.__exit__(None, None, None)

    def test_grant(self):
        self._fake_bin.add('visudo', _FAKE_VISUDO)
        command = GrantSudo('linux-admins', sudoers_dir=str(self.sudoers_dir))
        command.run(LOCAL_HOST)
        command.run(LOCAL_HOST)
        self.assertEqual([p.name for p in self.sudoers_dir.iterdir()], ['10-linux-admins'])
        rule = self.sudoers_dir / '10-linux-admins'
        self.assertEqual(rule.read_text(), '%linux-admins ALL=(ALL) NOPASSWD:ALL\n')
        self.assertEqual(stat.S_IMODE(rule.stat().st_mode), 0o440)

    def test_invalid_rule_not_applied(self):
        self._fake_bin.add_recorder('visudo', exit_code=1)
        with self.assertRaises(subprocess.CalledProcessError):
            GrantSudo('linux-admins', sudoers_dir=str(self.sudoers_dir)).run(LOCAL_HOST)
        self.assertFalse((self.sudoers_dir / '10-linux-admins').exists())


class TestMakeHomesPrivate(unittest.TestCase):

    def setUp(self):
        self._fake_bin = FakeBin().__enter__()
        self._dir = tempfile.TemporaryDirectory()
        self.home = Path(self._dir.name)

    def tearDown(self):
        self._dir.cleanup()
        self._fake_bin.__exit__(None, None, None)

    def test_no_homes_yet(self):
        MakeHomesPrivate(str(self.home)).run(LOCAL_HOST)
        self.assertEqual(list(self.home.iterdir()), [])

    def test_homes(self):
        for user in ('rpatel', 'jsmith'):
            (self.home / user).mkdir(mode=0o755)
        readme = self.home / 'README'
        readme.write_text('Home directories of domain users\n')
        readme.chmod(0o644)
        MakeHomesPrivate(str(self.home)).run(LOCAL_HOST)
        self.assertEqual(stat.S_IMODE((self.home / 'rpatel').stat().st_mode), 0o700)
        self.assertEqual(stat.S_IMODE((self.home / 'jsmith').stat().st_mode), 0o700)
        self.assertEqual(stat.S_IMODE(readme.stat().st_mode), 0o644)


class TestClientCommands(unittest.TestCase):

    def test_order(self):
        commands = client_commands(
            server_ip='10.20.0.2',
            share_name='filestore',
            domain_fqdn='mcloud.mikecloud.com',
            realm='MCLOUD.MIKECLOUD.COM',
            workgroup='MCLOUD',
            get_credentials=lambda: AdCredentials('admin', 'Secret-123'),
            admins_group='linux-admins',
            users_group='mcloud-users',
            initial_users=['rpatel', 'jsmith'],
            )
        self.assertEqual([type(c).__name__ for c in commands], [
            'InstallClientPackages',
            'MountFilestore',
            'JoinDomain',
            'EnablePasswordAuthentication',
            'ConfigureSssd',
            'ConfigureSamba',
            'GrantSudo',
            'EnforcePermissions',
            ])

    def test_mounts(self):
        [root, make_dirs, home] = MountFilestore('10.20.0.2', 'filestore').commands()
        self.assertEqual(repr(root), "MountNfs('10.20.0.2', '/filestore', '/nfs')")
        self.assertEqual(repr(make_dirs), "Run('sudo mkdir -p /nfs/home /nfs/data')")
        self.assertEqual(repr(home), "MountNfs('10.20.0.2', '/filestore/home', '/home')")

    def test_sudoers_staged_and_validated(self):
        [install, check, move] = [repr(c) for c in GrantSudo('linux-admins').commands()]
        self.assertIn("'/etc/sudoers.d/10-linux-admins.new'", install)
        self.assertEqual(check, "Run('sudo visudo -cf /etc/sudoers.d/10-linux-admins.new')")
        self.assertEqual(
            move,
            "Run('sudo mv -f /etc/sudoers.d/10-linux-admins.new /etc/sudoers.d/10-linux-admins')")

    def test_permissions(self):
        without_repo = [repr(c) for c in EnforcePermissions('mcloud-users', ['rpatel', 'jsmith']).commands()]
        self.assertIn("LogInOnce('rpatel')", without_repo)
        self.assertIn("LogInOnce('jsmith')", without_repo)
        self.assertIn("Run('sudo chgrp mcloud-users /nfs /nfs/data')", without_repo)
        self.assertIn("Run('sudo chmod 770 /nfs /nfs/data')", without_repo)
        self.assertIn("Run('sudo find /home -mindepth 1 -maxdepth 1 -type d -exec chmod 700 {} +')", without_repo)
        self.assertFalse(any('git' in c for c in without_repo))
        with_repo = EnforcePermissions(
            'mcloud-users', [], 'https://github.com/mamonaco1973/gcp-filestore.git').commands()
        self.assertEqual([repr(c) for c in with_repo[-2:]], [
            "Run('sudo chmod -R 775 /nfs/gcp-filestore')",
            "Run('sudo chgrp -R mcloud-users /nfs/gcp-filestore')",
            ])


class TestSambaConfig(unittest.TestCase):

    def test_netbios_name(self):
        self.assertEqual(netbios_name('nfs-gateway\n'), 'NFS-GATEWAY')
        self.assertEqual(len(netbios_name('a-very-long-client-host-name')), 15)

    def test_smb_conf(self):
        conf = render_smb_conf('MCLOUD', 'mcloud.mikecloud.com', 'NFS-GATEWAY')
        lines = conf.splitlines()
        self.assertIn('security = ads', lines)
        self.assertIn('realm = MCLOUD.MIKECLOUD.COM', lines)
        self.assertIn('idmap config MCLOUD : backend = sss', lines)
        self.assertEqual(lines.count('[homes]'), 1)
        self.assertIn('path = /nfs', lines)

    def test_samba_services_restarted(self):
        [stop_sssd, *_, restart] = [repr(c) for c in ConfigureSamba('MCLOUD', 'MCLOUD.MIKECLOUD.COM').commands()]
        self.assertEqual(stop_sssd, "SystemCtl('stop', 'sssd')")
        # Unit names of Debian and Ubuntu packages.
        self.assertEqual(restart, "SystemCtl('restart', 'winbind', 'smbd', 'nmbd', 'sssd')")

    def test_nsswitch(self):
        entries = dict(line.split(':', 1) for line in NSSWITCH_CONF.splitlines())
        for database in ('passwd', 'group', 'shadow', 'automount'):
            self.assertEqual(entries[database].split(), ['files', 'sss', 'winbind'])


if __name__ == '__main__':
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(asctime)s %(levelname)7s %(name)s %(message).5000s",
        )
    unittest.main()
