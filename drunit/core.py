"""
Basic functionality to launch the targets of the title index.
"""
from collections import namedtuple
import os
import shlex
import subprocess

from . import logger

class LaunchError(Exception):
    """
    Used to indicate that a given title could not be launched.
    """
    pass

class LaunchTargetMissing(LaunchError):
    """
    The selected title is not (or no longer) part of the index.
    """
    pass

class HelperSpawnFailure(LaunchError):
    """
    The program used to start desktop entries could not be run.
    """
    pass

# A launch target. `kind` tells how `path` is to be started: a desktop entry
# file is handed to the desktop launcher, an executable is run directly.
LaunchSpec = namedtuple('LaunchSpec', ['kind', 'path'])

DESKTOP = 'desktop'
EXECUTABLE = 'executable'
KINDS = (DESKTOP, EXECUTABLE)

def desktop_launch(path):
    return LaunchSpec(DESKTOP, path)

def path_launch(path):
    return LaunchSpec(EXECUTABLE, os.path.abspath(path))

def parse_commandline(cmdline):
    """
    Split given `cmdline` into a list of arguments matching Unix-like shell
    behavior. A list or tuple of arguments is returned as a new list.
    """
    if isinstance(cmdline, str):
        return shlex.split(cmdline)
    return list(cmdline)

HELPER_HINT = ('Install it, set "desktop-launcher" in the config file or '
               'disable desktop entries with -d')

def spawn_detached(args):
    """
    Start `args` as a new process in its own session and return at once.
    The child's standard streams are connected to the null device, so it
    keeps running when the launcher exits. The child is never waited for.
    """
    subprocess.Popen(args,
                     stdin=subprocess.DEVNULL,
                     stdout=subprocess.DEVNULL,
                     stderr=subprocess.DEVNULL,
                     close_fds=True,
                     start_new_session=True)

def launch(title, index, helper, spawner=spawn_detached):
    """
    Look up `title` in `index` and start its target. Return the target that
    was launched.

    A desktop entry is handed to the command-line given as `helper` (a string
    or a list of arguments), which receives the desktop file's path as its last
    argument and is expected to deal with field codes and terminal
    applications. An executable is run directly, without arguments.
    `spawner` is called with the final argument list and must not wait for
    the process.

    Raise `LaunchTargetMissing` if `title` is unknown, `HelperSpawnFailure`
    if the helper could not be started and `LaunchError` if an executable
    could not be started.
    """
    try:
        target = index[title]
    except KeyError:
        raise LaunchTargetMissing('No such entry: {0!r}'.format(title))
    if target.kind == DESKTOP:
        args = parse_commandline(helper)
        if not args:
            raise HelperSpawnFailure('No desktop launcher configured. ' + HELPER_HINT)
        args.append(target.path)
        try:
            spawner(args)
        except OSError as error:
            msg = 'Unable to run {0!r}: {1}. {2}'
            raise HelperSpawnFailure(msg.format(args[0], error, HELPER_HINT))
    elif target.kind == EXECUTABLE:
        try:
            spawner([target.path])
        except OSError as error:
            msg = 'Unable to launch {0!r}: {1}'
            raise LaunchError(msg.format(target.path, error))
    else:
        raise TypeError('Unknown launch target: {0!r}'.format(target))
    logger.info('Launched {0!r} ({1})'.format(title, target.path))
    return target
