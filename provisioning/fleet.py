# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
from config import global_config
from config import split_list
from provisioning._core import Fleet

nfs_clients = Fleet(split_list(global_config['client_hosts']))
