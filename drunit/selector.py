"""
Let the user pick a title by means of an external menu program like dmenu.
"""
import os
import subprocess

from . import logger
from .core import parse_commandline

class SelectorUnavailable(Exception):
    """
    Used to indicate that the menu program could not be run.
    """
    pass

def sort_titles(titles):
    """
    Return `titles` sorted case-insensitively. Titles comparing equal keep
    their original order.
    """
    return sorted(titles, key=str.lower)

def get_selector_args(command, history_file=None):
    """
    Return the argument list for the menu program given by `command` (a
    command-line string or an argument list). When `history_file` is set, it
    is passed with `-H`, which is understood by dmenu builds carrying the
    history patch.
    """
    args = parse_commandline(command)
    if args and history_file:
        args += ['-H', os.path.expanduser(history_file)]
    return args

def present(titles, command, encoding='utf-8'):
    """
    Run the menu program given by `command` (a command-line string or an
    argument list), write the sorted `titles` to its standard input (one per
    line) and return the line it printed. Return `None` if the user made no
    choice, which is the case when the program exits with an error status or
    prints nothing.

    There is no timeout, as it is up to the user when to make a choice.
    Raise `SelectorUnavailable` if the program cannot be started.
    """
    args = parse_commandline(command)
    if not args:
        raise SelectorUnavailable('No selector configured')
    menu = '\n'.join(sort_titles(titles)) + '\n'
    try:
        process = subprocess.Popen(args, stdin=subprocess.PIPE,
                                   stdout=subprocess.PIPE)
    except OSError as error:
        raise SelectorUnavailable('Unable to run {0!r}: {1}'.format(args[0], error))
    output, _ = process.communicate(menu.encode(encoding, 'surrogateescape'))
    if process.returncode != 0:
        logger.debug('Selector exited with status {0}'.format(process.returncode))
        return None
    lines = output.decode(encoding, 'surrogateescape').splitlines()
    return lines[0] if lines and lines[0] else None
