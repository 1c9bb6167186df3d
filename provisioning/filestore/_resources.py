# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
from collections.abc import Mapping

from config import split_list
from gcp_api import FilestoreInstance
from gcp_api import FirewallRule
from gcp_api import NfsExportOptions

NFS_PORT = '2049'


def filestore_instance(config: Mapping[str, str]) -> FilestoreInstance:
    """Describe the file server.

    >>> instance = filestore_instance({
    ...     'filestore_name': 'nfs-server',
    ...     'gcp_zone': 'us-central1-b',
    ...     'filestore_tier': 'BASIC_HDD',
    ...     'filestore_capacity_gb': '1024',
    ...     'filestore_share_name': 'filestore',
    ...     'gcp_network': 'ad-vpc',
    ...     'filestore_export_ip_ranges': '10.0.0.0/8',
    ...     })
    >>> instance.capacity_gb, instance.export_options
    (1024, NfsExportOptions(ip_ranges=['10.0.0.0/8'], access_mode='READ_WRITE', squash_mode='NO_ROOT_SQUASH'))
    """
    return FilestoreInstance(
        name=config['filestore_name'],
        zone=config['gcp_zone'],
        tier=config['filestore_tier'],
        capacity_gb=int(config['filestore_capacity_gb']),
        share_name=config['filestore_share_name'],
        network=config['gcp_network'],
        export_options=NfsExportOptions(
            ip_ranges=split_list(config['filestore_export_ip_ranges']),
            access_mode=config.get('filestore_access_mode', 'READ_WRITE'),
            # Clients create files as root and then chown them.
            squash_mode=config.get('filestore_squash_mode', 'NO_ROOT_SQUASH'),
            ),
        )


def nfs_firewall_rule(config: Mapping[str, str]) -> FirewallRule:
    """Describe the rule letting clients reach NFS.

    >>> rule = nfs_firewall_rule({
    ...     'nfs_firewall_name': 'allow-nfs',
    ...     'gcp_network': 'ad-vpc',
    ...     'nfs_firewall_source_ranges': '10.0.0.0/8',
    ...     })
    >>> rule.ports, rule.protocols, rule.target_tags
    (['2049'], ['tcp', 'udp'], [])
    """
    return FirewallRule(
        name=config['nfs_firewall_name'],
        network=config['gcp_network'],
        ports=[NFS_PORT],
        protocols=['tcp', 'udp'],
        source_ranges=split_list(config['nfs_firewall_source_ranges']),
        target_tags=split_list(config.get('nfs_firewall_target_tags', '')),
        )
