"""
Build the title index, which maps each title shown to the user to the
target that is started when choosing it.
"""
from concurrent.futures import ThreadPoolExecutor

from . import desktop, executables, logger
from .cache import CacheRecord, snapshot_directories
from .core import desktop_launch, path_launch

# What to do when a desktop entry and an executable share the same title
PREFER_DESKTOP = 'desktop'
PREFER_PATH = 'path'
POLICIES = (PREFER_DESKTOP, PREFER_PATH)

class NoSourcesError(Exception):
    """
    Used to indicate that there is nothing to build an index from.
    """
    pass

def merge(entries, commands, chain, policy=PREFER_DESKTOP):
    """
    Return the title index for the given desktop `entries` and `commands`
    (as `(name, path)`-pairs) as a dictionary, whose insertion order puts
    desktop entries before commands.

    A desktop entry's title is its name for the best matching locale in
    `chain`. Entries that are not launchable or not meant to be displayed
    are left out. If two entries share a title, the first one is kept. For
    a command having the title of a desktop entry, `policy` decides: with
    `PREFER_DESKTOP` the command is dropped, with `PREFER_PATH` it replaces
    the desktop entry.
    """
    if policy not in POLICIES:
        raise ValueError('Unknown collision policy: {0!r}'.format(policy))
    index = {}
    for entry in entries:
        if not (desktop.is_launchable(entry) and desktop.is_visible(entry)):
            continue
        title = desktop.get_display_name(entry, chain)
        if title in index:
            logger.debug('Duplicate title {0!r} from {1!r}'.format(title, entry.path))
            continue
        index[title] = desktop_launch(entry.path)
    desktop_titles = set(index)
    for name, path in commands:
        if name in desktop_titles:
            if policy == PREFER_DESKTOP:
                continue
            # Re-insert to move the title among the commands
            del index[name]
        index[name] = path_launch(path)
    return index

def get_contributing_dirs(desktop_dirs, path_dirs):
    """
    Return the list of all directories, whose contents make up the index.
    """
    dirnames = []
    for dirname in list(desktop_dirs) + list(path_dirs):
        if dirname not in dirnames:
            dirnames.append(dirname)
    return dirnames

def scan_sources(desktop_dirs, path_dirs, concurrent=True):
    """
    Scan desktop entries and commands and return both results as a tuple.
    With `concurrent` set, the two scans run in parallel threads.
    """
    if not concurrent:
        return desktop.scan(desktop_dirs), executables.scan(path_dirs)
    with ThreadPoolExecutor(max_workers=2) as executor:
        entries = executor.submit(desktop.scan, desktop_dirs)
        commands = executor.submit(executables.scan, path_dirs)
        return entries.result(), commands.result()

def build_index(desktop_dirs, path_dirs, chain, store, policy=PREFER_DESKTOP,
                use_cache=True, concurrent=True):
    """
    Return a tuple `(index, rebuilt)`. The index is taken from the cache
    `store` if that holds a valid record for the given directories, locale
    `chain` and `policy`. Otherwise the directories are scanned, the index
    is merged from the results and saved to `store`. `rebuilt` tells which
    of both happened.

    Raise `NoSourcesError` if none of the directories exists.
    """
    dirnames = get_contributing_dirs(desktop_dirs, path_dirs)
    if use_cache:
        record = store.load()
        if record is not None and store.is_valid(record, dirnames, chain, policy):
            logger.debug('Using cached index ({0} titles)'.format(len(record.index)))
            return record.index, False
    # Taken before scanning, so changes made during the scan invalidate the
    # record on the next run
    mtimes = snapshot_directories(dirnames)
    if all(mtime is None for mtime in mtimes.values()):
        raise NoSourcesError('None of the directories to scan exists')
    entries, commands = scan_sources(desktop_dirs, path_dirs, concurrent)
    index = merge(entries, commands, chain, policy)
    logger.info('Built index with {0} titles'.format(len(index)))
    store.save(CacheRecord(index, tuple(chain), mtimes, policy))
    return index, True
