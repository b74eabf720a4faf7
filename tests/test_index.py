"""Tests for merging and building the title index"""

import os

import pytest

from drunit import index
from drunit.cache import CacheStore
from drunit.core import DESKTOP, EXECUTABLE, desktop_launch, path_launch
from drunit.desktop import DesktopEntry
from drunit.localechain import DEFAULT

CHAIN = ('de_DE', 'de', DEFAULT)


def make_entry(name, path, **fields):
    values = dict(names={DEFAULT: name}, exec_=name, icon=None,
                  try_exec=None, no_display=False, hidden=False,
                  terminal=False, type='Application', path=path, mtime=0.0)
    values.update(fields)
    return DesktopEntry(**values)


class TestMerge:
    """Test combining desktop entries and commands"""

    def test_desktop_entry_wins_collision(self):
        entries = [make_entry('htop', '/apps/htop.desktop')]
        commands = [('htop', '/usr/bin/htop')]

        result = index.merge(entries, commands, CHAIN)

        assert result == {'htop': desktop_launch('/apps/htop.desktop')}

    def test_path_policy(self):
        entries = [make_entry('htop', '/apps/htop.desktop'),
                   make_entry('Files', '/apps/files.desktop')]
        commands = [('htop', '/usr/bin/htop'), ('ls', '/bin/ls')]

        result = index.merge(entries, commands, CHAIN, policy=index.PREFER_PATH)

        assert result['htop'] == path_launch('/usr/bin/htop')
        assert list(result) == ['Files', 'htop', 'ls']

    def test_unknown_policy(self):
        with pytest.raises(ValueError):
            index.merge([], [], CHAIN, policy='random')

    def test_desktop_titles_come_first(self):
        entries = [make_entry('Zed', '/apps/zed.desktop')]
        commands = [('awk', '/usr/bin/awk')]

        result = index.merge(entries, commands, CHAIN)

        assert list(result) == ['Zed', 'awk']
        assert [target.kind for target in result.values()] == [DESKTOP, EXECUTABLE]

    def test_hidden_and_no_display_are_left_out(self):
        entries = [make_entry('Ghost', '/apps/ghost.desktop', hidden=True),
                   make_entry('Helper', '/apps/helper.desktop', no_display=True),
                   make_entry('Shown', '/apps/shown.desktop')]

        assert list(index.merge(entries, [], CHAIN)) == ['Shown']

    def test_unlaunchable_entries_are_left_out(self):
        entries = [make_entry('Link', '/apps/link.desktop', type='Link'),
                   make_entry('NoExec', '/apps/noexec.desktop', exec_=None)]

        assert index.merge(entries, [], CHAIN) == {}

    def test_localized_title(self):
        entries = [make_entry('Foo', '/apps/foo.desktop',
                              names={DEFAULT: 'Foo', 'de_DE': 'Bar'})]

        assert list(index.merge(entries, [], CHAIN)) == ['Bar']
        assert list(index.merge(entries, [], ('fr_FR', 'fr', DEFAULT))) == ['Foo']

    def test_first_entry_wins_duplicate_title(self):
        entries = [make_entry('Editor', '/apps/a.desktop'),
                   make_entry('Editor', '/apps/b.desktop')]

        assert index.merge(entries, [], CHAIN) == {
            'Editor': desktop_launch('/apps/a.desktop')}


def write_desktop_file(dirname, name, text):
    (dirname / name).write_text(text, encoding='utf-8')


def make_executable(dirname, name):
    path = dirname / name
    path.write_text('#!/bin/sh\n')
    path.chmod(0o755)


@pytest.fixture
def sources(tmp_path):
    apps, bin_ = tmp_path / 'applications', tmp_path / 'bin'
    apps.mkdir()
    bin_.mkdir()
    write_desktop_file(apps, 'htop.desktop',
                       "[Desktop Entry]\nType=Application\nName=htop\nExec=htop\n")
    write_desktop_file(apps, 'hidden.desktop',
                       "[Desktop Entry]\nType=Application\nName=Hidden\n"
                       "Exec=hidden\nHidden=true\n")
    make_executable(bin_, 'htop')
    make_executable(bin_, 'vim')
    return [str(apps)], [str(bin_)]


class TestBuildIndex:
    """Test the cache-aware index construction"""

    def test_rebuild_then_cached(self, tmp_path, sources):
        desktop_dirs, path_dirs = sources
        store = CacheStore(str(tmp_path / 'cache.json'))

        first, rebuilt = index.build_index(desktop_dirs, path_dirs, CHAIN, store)
        assert rebuilt
        assert first == {
            'htop': desktop_launch(os.path.join(desktop_dirs[0], 'htop.desktop')),
            'vim': path_launch(os.path.join(path_dirs[0], 'vim')),
        }

        second, rebuilt = index.build_index(desktop_dirs, path_dirs, CHAIN, store)
        assert not rebuilt
        assert second == first

    def test_valid_cache_skips_scanners(self, tmp_path, sources, monkeypatch):
        desktop_dirs, path_dirs = sources
        store = CacheStore(str(tmp_path / 'cache.json'))
        index.build_index(desktop_dirs, path_dirs, CHAIN, store)

        def fail(*args):
            raise AssertionError('scanners must not run')
        monkeypatch.setattr(index, 'scan_sources', fail)

        result, rebuilt = index.build_index(desktop_dirs, path_dirs, CHAIN, store)
        assert not rebuilt
        assert 'vim' in result

    def test_modified_directory_forces_rebuild(self, tmp_path, sources):
        desktop_dirs, path_dirs = sources
        store = CacheStore(str(tmp_path / 'cache.json'))
        index.build_index(desktop_dirs, path_dirs, CHAIN, store)

        make_executable(tmp_path / 'bin', 'nano')
        mtime = os.stat(path_dirs[0]).st_mtime_ns + 5 * 10**9
        os.utime(path_dirs[0], ns=(mtime, mtime))

        result, rebuilt = index.build_index(desktop_dirs, path_dirs, CHAIN, store)
        assert rebuilt
        assert 'nano' in result

    def test_other_locale_forces_rebuild(self, tmp_path, sources):
        desktop_dirs, path_dirs = sources
        store = CacheStore(str(tmp_path / 'cache.json'))
        index.build_index(desktop_dirs, path_dirs, CHAIN, store)

        _, rebuilt = index.build_index(desktop_dirs, path_dirs, (DEFAULT,), store)
        assert rebuilt

    def test_other_policy_forces_rebuild(self, tmp_path, sources):
        desktop_dirs, path_dirs = sources
        store = CacheStore(str(tmp_path / 'cache.json'))
        index.build_index(desktop_dirs, path_dirs, CHAIN, store)

        result, rebuilt = index.build_index(desktop_dirs, path_dirs, CHAIN, store,
                                            policy=index.PREFER_PATH)
        assert rebuilt
        assert result['htop'] == path_launch(os.path.join(path_dirs[0], 'htop'))

        _, rebuilt = index.build_index(desktop_dirs, path_dirs, CHAIN, store,
                                       policy=index.PREFER_PATH)
        assert not rebuilt

    def test_undecodable_command_name(self, tmp_path, sources):
        desktop_dirs, path_dirs = sources
        make_executable(tmp_path / 'bin', os.fsdecode(b'tool\xff'))
        store = CacheStore(str(tmp_path / 'cache.json'))

        result, rebuilt = index.build_index(desktop_dirs, path_dirs, CHAIN, store)
        assert rebuilt
        assert list(result) == ['htop', 'vim']

        _, rebuilt = index.build_index(desktop_dirs, path_dirs, CHAIN, store)
        assert not rebuilt

    def test_cache_can_be_bypassed(self, tmp_path, sources):
        desktop_dirs, path_dirs = sources
        store = CacheStore(str(tmp_path / 'cache.json'))
        index.build_index(desktop_dirs, path_dirs, CHAIN, store)

        _, rebuilt = index.build_index(desktop_dirs, path_dirs, CHAIN, store,
                                       use_cache=False)
        assert rebuilt

    def test_sequential_scan(self, tmp_path, sources):
        desktop_dirs, path_dirs = sources
        store = CacheStore(str(tmp_path / 'cache.json'))

        result, _ = index.build_index(desktop_dirs, path_dirs, CHAIN, store,
                                      concurrent=False)
        assert list(result) == ['htop', 'vim']

    def test_corrupt_cache_is_rebuilt(self, tmp_path, sources):
        desktop_dirs, path_dirs = sources
        cache_path = tmp_path / 'cache.json'
        cache_path.write_text('not json at all')

        result, rebuilt = index.build_index(desktop_dirs, path_dirs, CHAIN,
                                            CacheStore(str(cache_path)))
        assert rebuilt
        assert list(result) == ['htop', 'vim']

    def test_no_sources(self, tmp_path):
        store = CacheStore(str(tmp_path / 'cache.json'))
        with pytest.raises(index.NoSourcesError):
            index.build_index([str(tmp_path / 'nope')], [], CHAIN, store)
        with pytest.raises(index.NoSourcesError):
            index.build_index([], [], CHAIN, store)
