from __future__ import annotations

import pytest

from telefile.errors import InvalidPath
from telefile.services.paths import join_logical, validate_path


@pytest.mark.parametrize('logical', ['', '/', '//', '.', '/./'])
def test_root_aliases_resolve_to_data_root(resolver, logical):
    assert resolver.resolve(logical) == resolver.root


def test_none_resolves_to_data_root(resolver):
    assert resolver.resolve(None) == resolver.root


def test_trailing_separator_is_insignificant(resolver):
    assert resolver.resolve('photos/2024/') == resolver.resolve('photos/2024')
    assert resolver.resolve('/photos//2024') == resolver.root / 'photos' / '2024'


def test_dot_dot_inside_root_is_allowed(resolver):
    assert resolver.resolve('a/b/../c') == resolver.root / 'a' / 'c'


@pytest.mark.parametrize('logical', ['..', '../etc/passwd', '/../../etc/passwd', 'a/../../x', 'a/b/../../../..'])
def test_traversal_is_rejected(resolver, logical):
    with pytest.raises(InvalidPath):
        resolver.resolve(logical)


def test_absolute_path_is_rooted_at_data_root(resolver):
    assert resolver.resolve('/etc/passwd') == resolver.root / 'etc' / 'passwd'


def test_sibling_directory_with_shared_prefix_is_rejected(tmp_path, resolver):
    evil = tmp_path / 'dataEvil'
    evil.mkdir()
    (evil / 'loot.txt').write_text('x')

    assert str(evil.resolve()).startswith(str(resolver.root))
    with pytest.raises(InvalidPath):
        resolver.resolve('../dataEvil/loot.txt')


@pytest.mark.parametrize('logical', ['a\\..\\..\\x', '..\\secret', 'bad\x00name'])
def test_separator_tricks_are_rejected(resolver, logical):
    with pytest.raises(InvalidPath):
        resolver.resolve(logical)


def test_symlink_escaping_root_is_rejected(tmp_path, resolver):
    outside = tmp_path / 'outside'
    outside.mkdir()
    (outside / 'secret.txt').write_text('s')
    (resolver.root / 'link').symlink_to(outside, target_is_directory=True)

    with pytest.raises(InvalidPath):
        resolver.resolve('link/secret.txt')


def test_validate_path_blocks_traversal(tmp_path):
    with pytest.raises(InvalidPath):
        validate_path('../../etc/passwd', str(tmp_path))


def test_public_url_uses_forward_slashes(resolver):
    target = resolver.root / 'uploads' / 'a b.png'
    assert resolver.public_url(target) == '/data/uploads/a b.png'


def test_breadcrumb_lists_normalized_segments(resolver):
    assert resolver.breadcrumb('/a/./b/') == ['a', 'b']
    assert resolver.breadcrumb('/') == []


def test_join_logical_keeps_later_fragments_relative():
    assert join_logical('/', 'x') == '/x'
    assert join_logical('/a/', '/b') == '/a/b'
    assert join_logical(None, 'x', '') == '/x'


def test_resolve_entry_keeps_final_symlink(resolver):
    (resolver.root / 'real.txt').write_text('x')
    (resolver.root / 'alias.txt').symlink_to(resolver.root / 'real.txt')

    assert resolver.resolve_entry('/alias.txt') == resolver.root / 'alias.txt'
    assert resolver.resolve('/alias.txt') == resolver.root / 'real.txt'


def test_resolve_entry_checks_the_parent(resolver):
    assert resolver.resolve_entry('/') == resolver.root
    with pytest.raises(InvalidPath):
        resolver.resolve_entry('../sibling.txt')
    with pytest.raises(InvalidPath):
        resolver.resolve_entry('dir/bad\\name')


def test_breadcrumb_keeps_symlinked_folder_name(resolver):
    (resolver.root / 'albums' / '2024').mkdir(parents=True)
    (resolver.root / 'latest').symlink_to(resolver.root / 'albums' / '2024', target_is_directory=True)

    assert resolver.breadcrumb('/latest/') == ['latest']
    assert resolver.breadcrumb('/albums/../latest') == ['latest']


def test_breadcrumb_rejects_escape(resolver):
    with pytest.raises(InvalidPath):
        resolver.breadcrumb('../..')
