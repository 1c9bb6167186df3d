# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
import fnmatch
import logging
import os
import socket
from configparser import ConfigParser
from pathlib import Path
from typing import Mapping
from typing import Sequence

_logger = logging.getLogger(__name__)


def _read_config(deployment: str, *paths: Path) -> Mapping[str, str]:
    """Read and resolve overrides according to versions.

    Sections are masks matched against the deployment name,
    e.g. "[prod-*]" or "[lab;v2]".
    Optionally add ";v123" to sections like "[prod-*;v45]".
    If not specified, "v0" is assumed.
    Higher versions override lower versions.

    A per-user file can override values from the repo file.
    """
    config_parts = []
    for path_i, path in enumerate(paths):
        config_parser = ConfigParser(interpolation=None)
        config_parser.read(path)
        sections = config_parser.sections()
        for section_i, section in enumerate(sections):
            mask, version = _parse_section_header(section)
            if fnmatch.fnmatch(deployment, mask):
                _logger.info("Config %s: section %s: read", path, section)
                items = config_parser.items(section)
                config_parts.append((version, path_i, section_i, items))
            else:
                _logger.debug("Config %s: section %s: skip", path, section)
    config_parts.sort()
    config = {}
    for _version, _path_i, _section_i, items in config_parts:
        config.update(items)
    return config


def _parse_section_header(section):
    """Split section name into mask and version.

    >>> _parse_section_header('defaults')
    ('*', 0)
    >>> _parse_section_header('prod-*')
    ('prod-*', 0)
    >>> _parse_section_header('prod-*;v3')
    ('prod-*', 3)
    >>> _parse_section_header('prod-*;x3')
    Traceback (most recent call last):
    ...
    ValueError: Unknown x3 in prod-*;x3
    """
    if section == 'defaults':
        return '*', 0
    else:
        mask, semicolon, extra = section.partition(';')
        if not extra:
            return mask, 0
        elif extra.startswith('v'):
            try:
                return mask, int(extra[1:])
            except ValueError:
                raise ValueError(f"Cannot parse {extra} in {section}")
        else:
            raise ValueError(f"Unknown {extra} in {section}")


def split_list(value: str) -> Sequence[str]:
    """Split comma- or whitespace-separated config value.

    >>> split_list('rpatel, jsmith  akumar,')
    ['rpatel', 'jsmith', 'akumar']
    >>> split_list('')
    []
    """
    return value.replace(',', ' ').split()


deployment_name = os.environ.get('FILESTORE_DEPLOYMENT') or socket.gethostname()

global_config = _read_config(
    deployment_name,
    Path(__file__).with_name('config.ini'),
    Path('~/.config/filestore_ad.ini').expanduser(),
    )

if __name__ == '__main__':
    for k, v in global_config.items():
        print(k + '=' + v)
