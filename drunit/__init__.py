"""
Launch applications and commands through a dmenu-like menu.

Some features:

- List desktop entries with their names in the user's language
- List the commands found in the directories of PATH
- Keep the resulting index in a cache, which is rebuilt only when one of
  the scanned directories has changed
- Start desktop entries through a helper and commands directly, detached
  from the launcher
"""
__author__ = 'Sebastian Linke'
__license__ = 'MIT'
__version__ = '0.1-dev'

from . import cache, core, desktop, executables, index, localechain, selector, settings
