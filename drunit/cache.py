"""
Persist the title index between invocations.

The cache file is a JSON document tagged with a schema version. Besides the
index it stores the locale chain the titles were resolved with, the
collision policy they were merged with and the modification time of every
directory that contributed to the index. A cached index is only used when
none of these have changed, otherwise the whole index is rebuilt.
"""
from collections import namedtuple
import json
import os
import tempfile

# 3rd party
from xdg.BaseDirectory import xdg_cache_home

# drunit package
from . import logger
from .core import KINDS, LaunchSpec

SCHEMA_VERSION = 2

CACHE_DIRNAME = 'drunit'
CACHE_FILENAME = 'index.json'

# `directories` maps each contributing directory to its modification time in
# nanoseconds at build time, or to `None` if it did not exist. `policy` is the
# collision policy the index was merged with.
CacheRecord = namedtuple('CacheRecord',
                         ['index', 'locale_chain', 'directories', 'policy'])

class CacheCorrupt(Exception):
    """
    Used to indicate that the cache file could not be read or understood.
    """
    pass

def default_cache_path():
    return os.path.join(xdg_cache_home, CACHE_DIRNAME, CACHE_FILENAME)

def get_mtime(dirname):
    """
    Return the modification time of `dirname` in nanoseconds or `None` if it
    cannot be determined.
    """
    try:
        return os.stat(dirname).st_mtime_ns
    except OSError:
        return None

def snapshot_directories(dirs):
    return dict((dirname, get_mtime(dirname)) for dirname in dirs)

class CacheStore(object):
    """
    Load, validate and save `CacheRecord`s using the file at `path`.
    """
    def __init__(self, path=None):
        self.path = path or default_cache_path()

    def load(self):
        """
        Return the `CacheRecord` stored in the cache file or `None` when there
        is no usable one. A broken file is reported but never fatal.
        """
        try:
            with open(self.path, encoding='utf-8') as cache_file:
                data = cache_file.read()
        except FileNotFoundError:
            logger.debug('No cache file at {0!r}'.format(self.path))
            return None
        except OSError as error:
            logger.warning('Cannot read cache: {0}'.format(error))
            return None
        try:
            return decode(data)
        except CacheCorrupt as error:
            logger.warning('Ignoring corrupt cache {0!r}: {1}'.format(self.path, error))
            return None

    def is_valid(self, record, current_dirs, current_chain, current_policy):
        """
        Return True if `record` may be used in place of a fresh scan of
        `current_dirs` for `current_chain`, otherwise False.

        This requires the same locale chain, collision policy and set of
        directories. Furthermore, no directory may have been modified since
        the record was built, nor may it have appeared or vanished.
        """
        if tuple(record.locale_chain) != tuple(current_chain):
            logger.debug('Cache was built for another locale')
            return False
        if record.policy != current_policy:
            logger.debug('Cache was built with another collision policy')
            return False
        if set(record.directories) != set(current_dirs):
            logger.debug('Cache was built for other directories')
            return False
        for dirname, recorded in record.directories.items():
            current = get_mtime(dirname)
            if recorded is None or current is None:
                if recorded != current:
                    logger.debug('Directory appeared or vanished: {0!r}'.format(dirname))
                    return False
            elif current > recorded:
                logger.debug('Directory was modified: {0!r}'.format(dirname))
                return False
        return True

    def save(self, record):
        """
        Write `record` to the cache file. The file is replaced atomically, so
        readers see either the old or the new contents. Failures are logged,
        since they only cost speed on the next run.
        """
        dirname = os.path.dirname(self.path)
        try:
            os.makedirs(dirname, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(prefix='.' + CACHE_FILENAME,
                                             suffix='.tmp', dir=dirname)
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as temp_file:
                    temp_file.write(encode(record))
                os.replace(temp_path, self.path)
            except BaseException:
                os.unlink(temp_path)
                raise
        except (OSError, UnicodeError) as error:
            logger.warning('Cannot write cache: {0}'.format(error))
            return False
        logger.debug('Saved {0} titles to {1!r}'.format(len(record.index), self.path))
        return True

def encode(record):
    """
    Return the JSON representation of `record`. The order of the index is
    kept by storing it as a list.
    """
    data = {
        'version': SCHEMA_VERSION,
        'locale_chain': list(record.locale_chain),
        'policy': record.policy,
        'directories': [[dirname, mtime] for dirname, mtime
                        in record.directories.items()],
        'index': [[title, target.kind, target.path] for title, target
                  in record.index.items()],
    }
    return json.dumps(data, ensure_ascii=False)

def decode(data):
    """
    Return the `CacheRecord` represented by the JSON string `data`. Raise
    `CacheCorrupt` if `data` is not a cache document of the current version.
    """
    try:
        document = json.loads(data)
    except ValueError as error:
        raise CacheCorrupt('invalid JSON: {0}'.format(error))
    if not isinstance(document, dict):
        raise CacheCorrupt('unexpected document type')
    version = document.get('version')
    if version != SCHEMA_VERSION:
        raise CacheCorrupt('unsupported version {0!r}'.format(version))
    try:
        locale_chain = tuple(_check_str(key) for key in document['locale_chain'])
        policy = _check_str(document['policy'])
        directories = {}
        for dirname, mtime in document['directories']:
            if mtime is not None and not isinstance(mtime, int):
                raise CacheCorrupt('invalid modification time')
            directories[_check_str(dirname)] = mtime
        index = {}
        for title, kind, path in document['index']:
            if kind not in KINDS:
                raise CacheCorrupt('unknown target kind {0!r}'.format(kind))
            index[_check_str(title)] = LaunchSpec(kind, _check_str(path))
    except (KeyError, TypeError, ValueError) as error:
        raise CacheCorrupt('malformed document: {0}'.format(error))
    return CacheRecord(index, locale_chain, directories, policy)

def _check_str(value):
    if not isinstance(value, str):
        raise CacheCorrupt('expected a string, got {0!r}'.format(value))
    return value
