# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
"""Create the file server and the firewall rule for its clients.

Prints the server IP address, which is passed to client provisioning.
"""
import logging
from collections.abc import Mapping

from config import global_config
from gcp_api import ComputeApi
from gcp_api import FilestoreApi
from gcp_api import auth_provider_from_config
from gcp_api import instance_ip_address
from provisioning.filestore._resources import filestore_instance
from provisioning.filestore._resources import nfs_firewall_rule


def main():
    auth = auth_provider_from_config(global_config['gcp_credentials_file'])
    project = global_config['gcp_project']
    ip_address = deploy(global_config, FilestoreApi(auth, project), ComputeApi(auth, project))
    print(ip_address)


def deploy(config: Mapping[str, str], filestore: FilestoreApi, compute: ComputeApi) -> str:
    compute.ensure_firewall(nfs_firewall_rule(config))
    instance = filestore.ensure_instance(filestore_instance(config))
    ip_address = instance_ip_address(instance)
    _logger.info("File server %s: %s", instance.get('name'), ip_address)
    return ip_address


_logger = logging.getLogger(__name__)

if __name__ == '__main__':
    logging.basicConfig(level=logging.DEBUG)
    main()
