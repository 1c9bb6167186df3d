# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
import logging
import tempfile
import unittest
from pathlib import Path

from provisioning import ReplaceLine
from provisioning import Substitute
from provisioning import SubstituteRegex
from provisioning._ssh import LOCAL_HOST
from provisioning.nfs_client._mount import fstab_entry_pattern
from provisioning.nfs_client._mount import fstab_line
from provisioning.nfs_client._sssd import SSSD_SUBSTITUTIONS
from provisioning.tests._fake_bin import FakeBin

_ROOT_FS = 'LABEL=cloudimg-rootfs / ext4 discard,errors=remount-ro 0 1'

# As written by "realm join --membership-software=samba".
_SSSD_CONF = '''\
[sssd]
domains = mcloud.mikecloud.com
config_file_version = 2
services = nss, pam

[domain/mcloud.mikecloud.com]
default_shell = /bin/bash
krb5_store_password_if_offline = True
cache_credentials = True
krb5_realm = MCLOUD.MIKECLOUD.COM
realmd_tags = manages-system joined-with-samba
id_provider = ad
fallback_homedir = /home/%u@%d
ad_domain = mcloud.mikecloud.com
use_fully_qualified_names = True
ldap_id_mapping = True
access_provider = ad
'''


class TestConfigFiles(unittest.TestCase):

    def setUp(self):
        self._fake_bin = FakeBin().__enter__()
        self._dir = tempfile.TemporaryDirectory()
        self.root = Path(self._dir.name)

    def tearDown(self):
        self._dir.cleanup()
        self._fake_bin.__exit__(None, None, None)

    def test_sssd_substitutions(self):
        conf = self.root / 'sssd.conf'
        conf.write_text(_SSSD_CONF)
        for old, new in SSSD_SUBSTITUTIONS:
            Substitute(str(conf), old, new).run(LOCAL_HOST)
        text = conf.read_text()
        self.assertIn('use_fully_qualified_names = False\n', text)
        self.assertIn('ldap_id_mapping = False\n', text)
        self.assertIn('access_provider = simple\n', text)
        self.assertIn('fallback_homedir = /home/%u\n', text)
        self.assertIn('id_provider = ad\n', text)
        self.assertEqual(len(text.splitlines()), len(_SSSD_CONF.splitlines()))

    def test_substitute_twice(self):
        conf = self.root / 'sssd.conf'
        conf.write_text(_SSSD_CONF)
        command = Substitute(str(conf), 'fallback_homedir = /home/%u@%d', 'fallback_homedir = /home/%u')
        command.run(LOCAL_HOST)
        once = conf.read_text()
        command.run(LOCAL_HOST)
        self.assertEqual(conf.read_text(), once)

    def test_substitute_literally(self):
        file = self.root / 'file'
        file.write_text('a.b*c [x] ab-c\n')
        Substitute(str(file), 'a.b*c [x]', 'p&q|r\\s').run(LOCAL_HOST)
        self.assertEqual(file.read_text(), 'p&q|r\\s ab-c\n')

    def test_home_mode(self):
        login_defs = self.root / 'login.defs'
        login_defs.write_text(
            '#HOME_MODE\t0755\n'
            'UMASK\t\t022\n'
            'HOME_MODE\t0750\n'
            )
        SubstituteRegex(str(login_defs), r's/^\(\s*HOME_MODE\s*\)[0-9]\+/\10700/').run(LOCAL_HOST)
        self.assertEqual(login_defs.read_text(), (
            '#HOME_MODE\t0755\n'
            'UMASK\t\t022\n'
            'HOME_MODE\t0700\n'
            ))

    def test_fstab_entry_added_once(self):
        fstab = self.root / 'fstab'
        fstab.write_text(_ROOT_FS + '\n')
        line = fstab_line('10.20.0.2', '/filestore', '/nfs')
        for _ in range(3):
            ReplaceLine(str(fstab), fstab_entry_pattern('/nfs'), line).run(LOCAL_HOST)
        self.assertEqual(fstab.read_text().splitlines(), [_ROOT_FS, line])
        self.assertIn('vers=3,rw,hard,noatime,rsize=65536,wsize=65536,timeo=600,_netdev', line)

    def test_unchanged_file_is_not_rewritten(self):
        fstab = self.root / 'fstab'
        line = fstab_line('10.20.0.2', '/filestore', '/nfs')
        fstab.write_text(line + '\n')
        before = fstab.stat().st_ino
        ReplaceLine(str(fstab), fstab_entry_pattern('/nfs'), line).run(LOCAL_HOST)
        # sed -i creates a new file.
        self.assertEqual(fstab.stat().st_ino, before)

    def test_entry_of_other_server_replaced(self):
        fstab = self.root / 'fstab'
        fstab.write_text(_ROOT_FS + '\n')
        home = fstab_line('10.20.0.2', '/filestore/home', '/home')
        ReplaceLine(str(fstab), fstab_entry_pattern('/home'), home).run(LOCAL_HOST)
        old = fstab_line('10.20.0.2', '/filestore', '/nfs')
        ReplaceLine(str(fstab), fstab_entry_pattern('/nfs'), old).run(LOCAL_HOST)
        new = fstab_line('10.20.0.9', '/filestore', '/nfs')
        ReplaceLine(str(fstab), fstab_entry_pattern('/nfs'), new).run(LOCAL_HOST)
        self.assertEqual(fstab.read_text().splitlines(), [_ROOT_FS, home, new])

    def test_stale_duplicate_removed(self):
        fstab = self.root / 'fstab'
        line = fstab_line('10.20.0.9', '/filestore', '/nfs')
        stale = fstab_line('10.20.0.2', '/filestore', '/nfs')
        fstab.write_text(f'{line}\n{stale}\n')
        ReplaceLine(str(fstab), fstab_entry_pattern('/nfs'), line).run(LOCAL_HOST)
        self.assertEqual(fstab.read_text().splitlines(), [line])

    def test_other_mount_points_kept(self):
        fstab = self.root / 'fstab'
        data = '10.20.0.2:/filestore/data /nfs/data nfs rw 0 0'
        commented = '#10.20.0.1:/filestore /nfs nfs rw 0 0'
        fstab.write_text(f'{commented}\n{data}\n')
        line = fstab_line('10.20.0.2', '/filestore', '/nfs')
        ReplaceLine(str(fstab), fstab_entry_pattern('/nfs'), line).run(LOCAL_HOST)
        self.assertEqual(fstab.read_text().splitlines(), [commented, data, line])

    def test_multiline_rejected(self):
        with self.assertRaises(ValueError):
            ReplaceLine('/etc/fstab', fstab_entry_pattern('/nfs'), 'a\nb')


if __name__ == '__main__':
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(asctime)s %(levelname)7s %(name)s %(message).5000s",
        )
    unittest.main()
