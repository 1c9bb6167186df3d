# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
"""Cloud resources of the file server.

Resources are described declaratively. The provider reconciles them.
"""
from provisioning.filestore._resources import filestore_instance
from provisioning.filestore._resources import nfs_firewall_rule

__all__ = [
    'filestore_instance',
    'nfs_firewall_rule',
    ]
