# Copyright 2018-present Network Optix, Inc. Licensed under MPL 2.0: www.mozilla.org/MPL/2.0/
import re
import shlex

from provisioning._core import Run


class Substitute(Run):
    """Replace literal text in every line of a file, in place.

    Lines without the text are left intact, so the command can be rerun.

    >>> print(Substitute('/etc/sssd/sssd.conf', 'access_provider = ad', 'access_provider = simple')._command)
    sudo sed -i -e 's|access_provider = ad|access_provider = simple|g' /etc/sssd/sssd.conf
    >>> print(Substitute('/etc/f', '/home/%u@%d', '/home/%u').expression())
    s|/home/%u@%d|/home/%u|g
    """

    def __init__(self, path: str, old: str, new: str):
        self._path = path
        self._expression = f's|{sed_escape_pattern(old)}|{sed_escape_replacement(new)}|g'
        super().__init__(shlex.join(['sudo', 'sed', '-i', '-e', self._expression, path]))
        self._repr = f'{Substitute.__name__}({path!r}, {old!r}, {new!r})'

    def __repr__(self):
        return self._repr

    def expression(self) -> str:
        return self._expression


class SubstituteRegex(Run):
    r"""Apply a raw sed expression to a file, in place.

    >>> print(SubstituteRegex('/etc/login.defs', r's/^\(\s*HOME_MODE\s*\)[0-9]\+/\10700/')._command)
    sudo sed -i -e 's/^\(\s*HOME_MODE\s*\)[0-9]\+/\10700/' /etc/login.defs
    """

    def __init__(self, path: str, expression: str):
        self._expression = expression
        super().__init__(shlex.join(['sudo', 'sed', '-i', '-e', expression, path]))

    def expression(self) -> str:
        return self._expression


class ReplaceLine(Run):
    r"""Make the line the only one in the file matching the pattern.

    The pattern is a basic regular expression the line itself matches.
    If the line is there and nothing else matches, the file is left intact.
    Otherwise, matching lines are deleted and the line is appended.

    >>> print(ReplaceLine('/etc/fstab', r'^\S\+\s\+/nfs\s', '10.0.0.2:/filestore /nfs nfs rw 0 0')._command)
    sudo grep -qxF -- '10.0.0.2:/filestore /nfs nfs rw 0 0' /etc/fstab && [ "$(sudo grep -c -e '^\S\+\s\+/nfs\s' /etc/fstab)" = 1 ] || { sudo sed -i -e '\|^\S\+\s\+/nfs\s|d' /etc/fstab && printf '%s\n' '10.0.0.2:/filestore /nfs nfs rw 0 0' | sudo tee -a /etc/fstab > /dev/null; }
    """

    def __init__(self, path: str, pattern: str, line: str):
        if '\n' in line:
            raise ValueError(f"Must be a single line: {line!r}")
        p = shlex.quote(path)
        q = shlex.quote(line)
        r = shlex.quote(pattern)
        d = shlex.quote(f'\\|{pattern}|d')
        super().__init__(
            f'sudo grep -qxF -- {q} {p} && [ "$(sudo grep -c -e {r} {p})" = 1 ] || '
            f"{{ sudo sed -i -e {d} {p} && printf '%s\\n' {q} | sudo tee -a {p} > /dev/null; }}")
        self._repr = f'{ReplaceLine.__name__}({path!r}, {pattern!r}, {line!r})'

    def __repr__(self):
        return self._repr


def sed_escape_pattern(text: str) -> str:
    r"""Escape text to match literally in a basic regular expression.

    >>> print(sed_escape_pattern('fallback_homedir = /home/%u@%d'))
    fallback_homedir = /home/%u@%d
    >>> print(sed_escape_pattern('a.b*c[d]^$|e\\f'))
    a\.b\*c\[d\]\^\$\|e\\f
    """
    return re.sub(r'([\\.*\[\]^$|])', r'\\\1', text)


def sed_escape_replacement(text: str) -> str:
    r"""Escape text to be inserted literally by the s command.

    >>> print(sed_escape_replacement(r'a&b|c\d'))
    a\&b\|c\\d
    """
    return re.sub(r'([\\&|])', r'\\\1', text)
