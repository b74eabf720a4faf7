"""
Turn POSIX locale names into the fallback chain used to pick localized
strings from desktop entries.
"""
import os
import re

# Key of an unlocalized value (e.g. `Name=` as opposed to `Name[de]=`)
DEFAULT = ''

# Environment variables consulted for the message locale, highest priority first
LOCALE_VARIABLES = ('LC_ALL', 'LC_MESSAGES', 'LANG')

_LOCALE_RE = re.compile(r"""
    ^(?P<lang>[A-Za-z]+)
    (?:_(?P<country>[A-Za-z0-9]+))?
    (?:\.(?P<encoding>[A-Za-z0-9_-]+))?
    (?:@(?P<modifier>[A-Za-z0-9_-]+))?$
""", re.VERBOSE)

def resolve(raw):
    """
    Parse `raw` in the form `lang[_COUNTRY][.ENCODING][@MODIFIER]` and return
    a tuple of locale keys in matching order:

        lang_COUNTRY@MODIFIER, lang_COUNTRY, lang@MODIFIER, lang, DEFAULT

    Keys which would need a missing part are left out and the encoding never
    takes part in matching. Empty input, the "C" and "POSIX" locales and
    anything not following the scheme result in `(DEFAULT,)`.
    """
    parts = split_locale(raw)
    if parts is None:
        return (DEFAULT,)
    lang, country, modifier = parts
    chain = []
    if country and modifier:
        chain.append('{0}_{1}@{2}'.format(lang, country, modifier))
    if country:
        chain.append('{0}_{1}'.format(lang, country))
    if modifier:
        chain.append('{0}@{1}'.format(lang, modifier))
    chain.append(lang)
    chain.append(DEFAULT)
    return tuple(chain)

def split_locale(raw):
    """
    Return a `(lang, country, modifier)`-tuple for the given locale string,
    where missing parts are `None`. Return `None` if `raw` is not a usable
    locale name.
    """
    if not raw:
        return None
    raw = raw.strip()
    if raw in ('C', 'POSIX') or raw.startswith('C.'):
        return None
    match = _LOCALE_RE.match(raw)
    if match is None:
        return None
    return match.group('lang', 'country', 'modifier')

def normalize_key(key):
    """
    Drop the encoding part of a locale key as found inside a desktop entry
    (`sr_YU.UTF-8@Latn` => `sr_YU@Latn`). Return `None` for an invalid key.
    """
    parts = split_locale(key)
    if parts is None:
        return None
    lang, country, modifier = parts
    if country:
        lang = '{0}_{1}'.format(lang, country)
    if modifier:
        lang = '{0}@{1}'.format(lang, modifier)
    return lang

def get_raw_locale(environ=None):
    """
    Return the locale name that applies to messages, i.e. the first non-empty
    value of `LC_ALL`, `LC_MESSAGES` and `LANG`. An empty string is returned
    when none of them is set.
    """
    if environ is None:
        environ = os.environ
    for name in LOCALE_VARIABLES:
        value = environ.get(name)
        if value:
            return value
    return ''
