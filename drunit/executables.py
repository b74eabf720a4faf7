"""
Enumerate the commands available through the PATH environment variable.
"""
import os

from . import logger

def splitenv(varname, environ=None):
    """
    Get the environment variable `varname`s contents and split them at their
    platform-dependent path separator (`:` on POSIX). Return the result as a
    list, which may be empty if there is no content.
    """
    if environ is None:
        environ = os.environ
    value = environ.get(varname, '')
    return value.split(os.pathsep) if value else []

def get_path_dirs(environ=None):
    """
    Return the directories named in PATH in their original order. Empty
    components and repetitions are left out.
    """
    dirnames = []
    for dirname in splitenv('PATH', environ):
        if dirname and dirname not in dirnames:
            dirnames.append(dirname)
    return dirnames

def scan(path_dirs):
    """
    Return a list of `(name, path)`-pairs for every executable file found
    inside `path_dirs`, where `path` is absolute. As with a shell's command
    lookup, a name found in an earlier directory hides the same name in later
    directories. Missing or unreadable directories are skipped.
    """
    seen = set()
    executables = []
    for dirname in path_dirs:
        for name, path in iter_executables(dirname):
            if name not in seen:
                seen.add(name)
                executables.append((name, path))
    return executables

def iter_executables(dirname):
    """
    Yield a `(name, path)`-pair for each regular, executable file inside
    `dirname`. Symbolic links are followed.
    """
    dirname = os.path.abspath(dirname)
    try:
        with os.scandir(dirname) as dir_entries:
            for dir_entry in sorted(dir_entries, key=lambda e: e.name):
                if not is_executable_file(dir_entry):
                    continue
                if not is_displayable(dir_entry.name):
                    logger.warning('Skipping {0!r}: name is not valid UTF-8'.format(
                        dir_entry.path))
                    continue
                yield (dir_entry.name, dir_entry.path)
    except FileNotFoundError:
        return
    except OSError as error:
        logger.warning('Cannot read directory {0!r}: {1}'.format(dirname, error))

def is_displayable(name):
    """
    Return True if `name` was decoded from the file system without escapes,
    i.e. it can be shown in the menu and stored in the cache.
    """
    try:
        name.encode('utf-8')
    except UnicodeEncodeError:
        return False
    return True

def is_executable_file(dir_entry):
    """
    Return True if given `os.DirEntry` refers to a regular file, which the
    current user may execute, otherwise False.
    """
    try:
        if not dir_entry.is_file():
            return False
    except OSError:
        return False
    return os.access(dir_entry.path, os.X_OK)
