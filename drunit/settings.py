"""
Configuration stuff.

Settings are read from `drunit.conf` inside the user's XDG configuration
directory. Each known key has a default and a converter, so a loaded
configuration holds ready-to-use values (e.g. booleans for the scan
switches). Unknown keys and bad values are reported with their line number.
"""
# Stdlib
import os
# 3rd party
from xdg.BaseDirectory import xdg_config_home
# drunit package
from . import logger
from .index import POLICIES, PREFER_DESKTOP

CONFIG_FILENAME = 'drunit.conf'

class ConfigError(ValueError):
    """
    Used to indicate a config file, which cannot be understood.
    """
    pass

def parse_flag(value):
    """
    Return the boolean for "yes"/"no", "true"/"false", "on"/"off" or "1"/"0"
    (case does not matter). Raise `ValueError` for anything else.
    """
    flags = {'yes': True, 'true': True, 'on': True, '1': True,
             'no': False, 'false': False, 'off': False, '0': False}
    try:
        return flags[value.lower()]
    except KeyError:
        raise ValueError('expected yes or no, got {0!r}'.format(value))

def parse_policy(value):
    if value not in POLICIES:
        msg = 'expected one of {0}, got {1!r}'
        raise ValueError(msg.format(', '.join(POLICIES), value))
    return value

# Known keys: default value and converter for the text found in the file
OPTIONS = {
    'selector': ('dmenu -i', str),
    'history-file': ('', str),
    'desktop-launcher': ('gtk-launch', str),
    'desktop-folder': ('~/Desktop', str),
    'cache-file': ('', str),
    'desktop-scan': (True, parse_flag),
    'path-scan': (True, parse_flag),
    'collision-policy': (PREFER_DESKTOP, parse_policy),
    'concurrent-scan': (True, parse_flag),
}

def get_defaults():
    return dict((key, default) for key, (default, _) in OPTIONS.items())

def get_config_path():
    return os.path.join(xdg_config_home, CONFIG_FILENAME)

def load_config(path=None):
    """
    Return a new configuration dictionary: the defaults, updated with the
    entries of the config file at `path` (by default the one returned by
    `get_config_path()`). A missing file just leaves the defaults.

    Raise `ConfigError` if the file contains a malformed line, an unknown
    key or an invalid value.
    """
    if path is None:
        path = get_config_path()
    config = get_defaults()
    if not os.path.exists(path):
        return config
    logger.info('Found config file {0!r}'.format(path))
    with open(path) as config_file:
        config.update(parse_config(config_file))
    return config

def parse_config(lines):
    """
    Iterate over the given configuration lines and yield a `(key, value)`-pair
    for each entry, where `value` is already converted for `key`.

    Each entry uses the scheme `key: value`. Only the first `:` separates,
    so values may contain colons (e.g. paths). Anything after a `#` is a
    comment and surrounding whitespace is ignored, as are empty lines.
    """
    for number, line in enumerate(lines, 1):
        code = line.split('#')[0].strip()
        if not code:
            continue
        key, separator, value = code.partition(':')
        key = key.strip()
        if not separator:
            raise ConfigError('Line {0}: expected "key: value"'.format(number))
        if key not in OPTIONS:
            raise ConfigError('Line {0}: unknown key {1!r}'.format(number, key))
        convert = OPTIONS[key][1]
        try:
            yield (key, convert(value.strip()))
        except ValueError as error:
            raise ConfigError('Line {0}: {1}: {2}'.format(number, key, error))
