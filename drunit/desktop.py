"""
Parse desktop entry files (the `*.desktop` starters of installed
applications) into `DesktopEntry`-records.

Only the subset of the Desktop Entry Specification needed to list and launch
applications is understood: the first `[Desktop Entry]` group is read and
any other group is ignored.
"""
from collections import namedtuple
import os
import re
import shutil

# 3rd party
from xdg.BaseDirectory import xdg_data_dirs

# drunit package
from . import localechain, logger
from .executables import is_displayable

class ParseError(Exception):
    """
    Used to indicate that a file could not be read as a desktop entry at all.
    """
    pass

DesktopEntry = namedtuple('DesktopEntry', [
    'names', 'exec_', 'icon', 'try_exec', 'no_display', 'hidden',
    'terminal', 'type', 'path', 'mtime',
])

GROUP_NAME = 'Desktop Entry'
FILE_SUFFIX = '.desktop'

_KEY_RE = re.compile(r'^(?P<key>[A-Za-z0-9-]+)(?:\[(?P<locale>[^\]]+)\])?$')
_CONTROL_RE = re.compile(r'[\x00-\x1f\x7f]+')
_ESCAPES = {'s': ' ', 'n': '\n', 't': '\t', 'r': '\r', '\\': '\\'}

### High-level functions

def get_application_dirs(desktop_folder=None):
    """
    Return the `applications`-subdirectories of all XDG data directories in
    order of precedence, beginning with `$XDG_DATA_HOME`. If `desktop_folder`
    is given (e.g. "~/Desktop"), it is appended as the directory with the
    lowest precedence.
    """
    dirnames = [os.path.join(dirname, 'applications') for dirname in xdg_data_dirs]
    if desktop_folder:
        dirnames.append(os.path.expanduser(desktop_folder))
    return dirnames

def scan(dirs):
    """
    Parse the desktop entry files inside the given directories and return a
    list of `DesktopEntry`-records.

    Directories are not searched recursively. An entry is identified by its
    file name, so when two directories contain a file with the same name,
    only the one found in the earlier directory is kept. Unreadable
    directories and files, which fail to parse, are logged and skipped. A
    skipped file does not hide a file of the same name in a later directory.
    """
    seen = set()
    entries = []
    for dirname in dirs:
        for desktop_id, path in iter_desktop_files(dirname):
            if desktop_id in seen:
                logger.debug('Shadowed desktop file {0!r}'.format(path))
                continue
            try:
                entry = parse_file(path)
            except ParseError as error:
                logger.warning('Skipping {0!r}: {1}'.format(path, error))
                continue
            seen.add(desktop_id)
            entries.append(entry)
    return entries

def is_launchable(entry):
    """
    Return True if `entry` describes an application, which has a command to
    run and whose `TryExec`-program (if given) is installed. Otherwise
    return False.
    """
    if entry.type != 'Application' or not entry.exec_:
        return False
    if entry.try_exec:
        return _find_program(entry.try_exec) is not None
    return True

def is_visible(entry):
    """
    Return True unless `entry` is marked as hidden (i.e. "deleted") or as
    not to be displayed in menus.
    """
    return not (entry.hidden or entry.no_display)

def get_display_name(entry, chain):
    """
    Return the name for `entry` that fits best to the given locale `chain`.
    When no name is given at all, the stem of the entry's file name is used
    instead. Control characters are replaced by spaces, as a title must fit
    on a single line of the menu.
    """
    for key in list(chain) + [localechain.DEFAULT]:
        name = clean_title(entry.names.get(key, ''))
        if name:
            return name
    return clean_title(get_desktop_id(entry.path)[:-len(FILE_SUFFIX)])

def clean_title(name):
    return _CONTROL_RE.sub(' ', name).strip()

### Low-level functions

def iter_desktop_files(dirname):
    """
    Yield a `(desktop_id, path)`-pair for each desktop entry file inside
    `dirname`. Nothing is yielded when `dirname` cannot be read.
    """
    try:
        names = sorted(os.listdir(dirname))
    except FileNotFoundError:
        return
    except OSError as error:
        logger.warning('Cannot read directory {0!r}: {1}'.format(dirname, error))
        return
    for name in names:
        path = os.path.join(dirname, name)
        if not (name.endswith(FILE_SUFFIX) and os.path.isfile(path)):
            continue
        if not is_displayable(path):
            logger.warning('Skipping {0!r}: path is not valid UTF-8'.format(path))
            continue
        yield (name, path)

def get_desktop_id(path):
    """
    Return the identity of a desktop entry file, which is its name relative
    to the search directory.
    """
    return os.path.basename(path)

def parse_file(path):
    """
    Read the desktop entry file at `path` and return a `DesktopEntry`.
    Raise `ParseError` if the file cannot be read or decoded or if it does
    not contain a `[Desktop Entry]`-group.
    """
    try:
        with open(path, encoding='utf-8') as entry_file:
            mtime = os.fstat(entry_file.fileno()).st_mtime
            lines = entry_file.read().splitlines()
    except UnicodeDecodeError:
        raise ParseError('not encoded as UTF-8')
    except OSError as error:
        raise ParseError(str(error))
    builder = EntryBuilder()
    for index, reason in parse_lines(lines, builder):
        logger.debug('{0}:{1}: {2}'.format(path, index + 1, reason))
    return builder.build(path, mtime)

def parse_lines(lines, builder):
    """
    Feed the key/value pairs of the first `[Desktop Entry]`-group found in
    `lines` into `builder`. Yield an `(index, reason)`-pair for every line
    that was skipped because it could not be understood.
    """
    in_group = False
    for index, line in enumerate(lines):
        line = line.strip()
        if not line or line.startswith('#'):
            continue
        if line.startswith('['):
            if in_group:
                # Anything after the main group is of no interest
                break
            if line == '[{0}]'.format(GROUP_NAME):
                in_group = True
                builder.found_group = True
            continue
        if not in_group:
            continue
        if '=' not in line:
            yield (index, 'expected a "=" separator')
            continue
        key, value = line.split('=', 1)
        reason = builder.add(key.strip(), value.strip())
        if reason is not None:
            yield (index, reason)

def unescape(value):
    """
    Replace the escape sequences allowed in desktop entry strings by the
    characters they stand for. Unknown sequences are kept unchanged.
    """
    return re.sub(r'\\(.)', lambda m: _ESCAPES.get(m.group(1), m.group(0)),
                  value)

def parse_boolean(value):
    """
    Return the boolean for "true" or "false". Return `None` for any other
    value.
    """
    return {'true': True, 'false': False}.get(value)

def _find_program(name):
    if os.path.isabs(name):
        return name if os.access(name, os.X_OK) else None
    return shutil.which(name)

class EntryBuilder(object):
    """
    Collect the interesting keys of a desktop entry and create the
    `DesktopEntry` when done. Unknown keys are ignored.
    """
    _STRING_KEYS = {'Exec': 'exec_', 'Icon': 'icon', 'TryExec': 'try_exec',
                    'Type': 'type'}
    _BOOLEAN_KEYS = {'NoDisplay': 'no_display', 'Hidden': 'hidden',
                     'Terminal': 'terminal'}

    def __init__(self):
        self.found_group = False
        self.names = {}
        self.fields = {}

    def add(self, key, value):
        """
        Take a `key` (possibly carrying a locale like `Name[de_DE]`) and its
        raw `value`. Return a string describing why the pair was rejected or
        `None` if it was accepted or ignored.
        """
        match = _KEY_RE.match(key)
        if match is None:
            return 'invalid key {0!r}'.format(key)
        key, locale = match.group('key', 'locale')
        if key == 'Name':
            return self._add_name(locale, value)
        if locale is not None:
            return None
        if key in self._STRING_KEYS:
            return self._set(self._STRING_KEYS[key], unescape(value))
        if key in self._BOOLEAN_KEYS:
            flag = parse_boolean(value)
            if flag is None:
                return 'invalid boolean {0!r} for {1}'.format(value, key)
            return self._set(self._BOOLEAN_KEYS[key], flag)
        return None

    def _add_name(self, locale, value):
        if locale is None:
            locale = localechain.DEFAULT
        else:
            locale = localechain.normalize_key(locale)
            if locale is None:
                return 'invalid locale in Name key'
        if locale in self.names:
            return 'duplicate Name for locale {0!r}'.format(locale)
        self.names[locale] = unescape(value)
        return None

    def _set(self, field, value):
        if field in self.fields:
            return 'duplicate key for {0}'.format(field)
        self.fields[field] = value
        return None

    def build(self, path, mtime):
        """
        Return the `DesktopEntry` for the collected values. Raise
        `ParseError` if no `[Desktop Entry]`-group was seen.
        """
        if not self.found_group:
            raise ParseError('missing [{0}] group'.format(GROUP_NAME))
        get = self.fields.get
        return DesktopEntry(
            names=self.names,
            exec_=get('exec_'),
            icon=get('icon'),
            try_exec=get('try_exec'),
            no_display=get('no_display', False),
            hidden=get('hidden', False),
            terminal=get('terminal', False),
            type=get('type'),
            path=path,
            mtime=mtime,
        )
