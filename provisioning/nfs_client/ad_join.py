# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
"""Mount the file server and join the AD domain.

Run from the repo root on a workstation to provision the client fleet:

    python -m provisioning.nfs_client.ad_join

or on a fresh VM, from its startup script, to provision the VM itself:

    python3 -m provisioning.nfs_client.ad_join --host localhost
"""
import logging
from argparse import ArgumentParser

from config import global_config
from config import split_list
from gcp_api import AdCredentials
from gcp_api import FilestoreApi
from gcp_api import SecretManagerApi
from gcp_api import auth_provider_from_config
from provisioning._core import Fleet
from provisioning.fleet import nfs_clients
from provisioning.nfs_client import client_commands


def main(args=None):
    parser = ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        '--nfs-server-ip',
        help="address of the file server, looked up via Filestore API if omitted",
        )
    parser.add_argument(
        '--host',
        action='append',
        dest='hosts',
        help="machine to provision, may be repeated, default: client_hosts from config",
        )
    parsed_args = parser.parse_args(args)
    auth = auth_provider_from_config(global_config['gcp_credentials_file'])
    project = global_config['gcp_project']
    server_ip = parsed_args.nfs_server_ip
    if server_ip is None:
        filestore = FilestoreApi(auth, project)
        server_ip = filestore.get_ip_address(global_config['gcp_zone'], global_config['filestore_name'])
    _logger.info("NFS server: %s", server_ip)
    secret_manager = SecretManagerApi(auth, project)

    def get_credentials():
        return AdCredentials.parse(secret_manager.access_latest(global_config['admin_secret_name']))

    fleet = Fleet(parsed_args.hosts) if parsed_args.hosts else nfs_clients
    fleet.run(client_commands(
        server_ip=server_ip,
        share_name=global_config['filestore_share_name'],
        domain_fqdn=global_config['domain_fqdn'],
        realm=global_config['domain_realm'],
        workgroup=global_config['domain_workgroup'],
        get_credentials=get_credentials,
        admins_group=global_config['linux_admins_group'],
        users_group=global_config['users_group'],
        initial_users=split_list(global_config['initial_users']),
        helper_repo_url=global_config.get('helper_repo_url', ''),
        ))
    _logger.info("Provisioned: %r", fleet)


_logger = logging.getLogger(__name__)

if __name__ == '__main__':
    logging.basicConfig(level=logging.DEBUG)
    main()
