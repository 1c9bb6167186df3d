# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
"""Delete the file server and the firewall rule. All data on the share is lost."""
import logging
from argparse import ArgumentParser
from collections.abc import Mapping

from config import global_config
from gcp_api import ComputeApi
from gcp_api import FilestoreApi
from gcp_api import auth_provider_from_config


def main(args=None):
    parser = ArgumentParser(description=__doc__)
    parser.add_argument(
        '--yes',
        action='store_true',
        help="confirm that the share and all its data are to be deleted",
        )
    parsed_args = parser.parse_args(args)
    if not parsed_args.yes:
        parser.error(f"Deletion of {global_config['filestore_name']} must be confirmed with --yes")
    auth = auth_provider_from_config(global_config['gcp_credentials_file'])
    project = global_config['gcp_project']
    destroy(global_config, FilestoreApi(auth, project), ComputeApi(auth, project))


def destroy(config: Mapping[str, str], filestore: FilestoreApi, compute: ComputeApi):
    name = config['filestore_name']
    filestore.delete_instance(config['gcp_zone'], name)
    compute.delete_firewall(config['nfs_firewall_name'])
    _logger.info("File server %s and its firewall rule are deleted", name)


_logger = logging.getLogger(__name__)

if __name__ == '__main__':
    logging.basicConfig(level=logging.DEBUG)
    main()
