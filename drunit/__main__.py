"""
Command-line entry point: show applications and commands in a menu and
launch the chosen one.
"""
import argparse
import sys

# drunit package
from . import core, desktop, executables, index, localechain, logger, selector, settings
from .cache import CacheStore

EXIT_SUCCESS = 0
EXIT_FAILURE = 1

def make_parser():
    parser = argparse.ArgumentParser(
        prog='drunit',
        description='Pick an application or command from a menu and run it.')
    parser.add_argument('-d', '--no-desktop', action='store_true',
                        help='hide desktop entries')
    parser.add_argument('-p', '--no-path', action='store_true',
                        help='hide commands found in $PATH')
    parser.add_argument('--locale',
                        help='language of the titles (not implemented yet)')
    parser.add_argument('--rebuild', action='store_true',
                        help='ignore the cached index')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='show debug messages')
    return parser

def run(config, use_cache=True, spawner=core.spawn_detached, environ=None):
    """
    Build the title index, let the user choose a title and launch it. All
    settings are taken from the `config`-dictionary (as returned by
    `settings.load_config()`). Return the exit code for the program.
    """
    chain = localechain.resolve(localechain.get_raw_locale(environ))
    logger.debug('Locale chain: {0!r}'.format(chain))
    desktop_dirs = []
    if config['desktop-scan']:
        desktop_dirs = desktop.get_application_dirs(config['desktop-folder'])
    path_dirs = executables.get_path_dirs(environ) if config['path-scan'] else []
    store = CacheStore(config['cache-file'] or None)
    try:
        titles, _ = index.build_index(
            desktop_dirs, path_dirs, chain, store,
            policy=config['collision-policy'],
            use_cache=use_cache,
            concurrent=config['concurrent-scan'])
        command = selector.get_selector_args(config['selector'],
                                             config['history-file'])
        title = selector.present(list(titles), command)
        if title is None:
            logger.info('Nothing selected')
            return EXIT_SUCCESS
        core.launch(title, titles, config['desktop-launcher'], spawner)
    except (index.NoSourcesError, selector.SelectorUnavailable,
            core.LaunchError) as error:
        logger.error(str(error))
        return EXIT_FAILURE
    return EXIT_SUCCESS

def main(argv=None):
    """
    This function is intended to be used as an entry point, when drunit was
    invoked from the commandline. It exits the interpreter with the exit code
    returned by `run()`.
    """
    args = make_parser().parse_args(argv)
    logger.enable(verbose=args.verbose)
    try:
        config = settings.load_config()
    except (OSError, settings.ConfigError) as error:
        logger.error('Bad configuration: {0}'.format(error))
        sys.exit(EXIT_FAILURE)
    if args.no_desktop:
        config['desktop-scan'] = False
    if args.no_path:
        config['path-scan'] = False
    if args.locale is not None:
        logger.warning('--locale is not supported yet, using the environment')
    sys.exit(run(config, use_cache=not args.rebuild))

if __name__ == '__main__':
    main()
