"""Tests for storage key and MIME type helpers."""

import pytest

from server.apps.files.exceptions import ScopeViolationError
from server.apps.files.infrastructure.metadata import (
    build_storage_key,
    build_stored_name,
    current_timestamp_ms,
    detect_mime_type,
    extract_filename,
    validate_storage_path,
)


@pytest.mark.parametrize(('filename', 'expected'), [
    ('photo.jpg', 'image/jpeg'),
    ('image.png', 'image/png'),
    ('document.pdf', 'application/pdf'),
    ('notes.txt', 'text/plain'),
    ('unknown', 'application/octet-stream'),
])
def test_detect_mime_type(filename, expected):
    """Test MIME type guessing from the extension."""
    assert detect_mime_type(filename) == expected


@pytest.mark.parametrize(('path', 'expected'), [
    ('notes.txt', 'notes.txt'),
    ('12/1700000000000-notes.txt', '1700000000000-notes.txt'),
    ('../../etc/passwd', 'passwd'),
    ('C:\\Users\\me\\notes.txt', 'notes.txt'),
])
def test_extract_filename(path, expected):
    """Test directory components are dropped."""
    assert extract_filename(path) == expected


def test_current_timestamp_ms():
    """Test timestamp is in milliseconds."""
    assert len(str(current_timestamp_ms())) == 13


def test_build_stored_name():
    """Test stored name carries the timestamp prefix."""
    assert build_stored_name('notes.txt', 1700000000000) == (
        '1700000000000-notes.txt'
    )


def test_build_stored_name_drops_directories():
    """Test client paths never reach the stored name."""
    assert build_stored_name('a/b/notes.txt', 1) == '1-notes.txt'


def test_build_stored_name_within_limit():
    """Test short names are left alone when a limit is given."""
    assert build_stored_name('notes.txt', 1, max_length=255) == '1-notes.txt'


def test_build_stored_name_truncates_stem():
    """Test long names lose stem characters but keep the extension."""
    stored_name = build_stored_name(
        'a' * 250 + '.txt',
        1700000000000,
        max_length=255,
    )

    assert len(stored_name) == 255
    assert stored_name == '1700000000000-' + 'a' * 237 + '.txt'


def test_build_stored_name_long_extension():
    """Test an extension that cannot fit is cut like the rest."""
    stored_name = build_stored_name('a.' + 'x' * 30, 1, max_length=10)

    assert stored_name == '1-a.xxxxxx'


def test_build_storage_key():
    """Test key is prefixed with the owner id."""
    assert build_storage_key(42, '1-notes.txt') == '42/1-notes.txt'


class TestValidateStoragePath:
    """Tests for user prefix enforcement."""

    def test_valid_path(self):
        """Test a key under the owner's prefix passes."""
        validate_storage_path(1, '1/1700000000000-notes.txt')

    @pytest.mark.parametrize('path', [
        '',
        '2/1700000000000-notes.txt',
        'abc/notes.txt',
        'notes.txt',
        '1/nested/notes.txt',
        '1/../2/notes.txt',
        '1/..',
    ])
    def test_invalid_paths(self, path):
        """Test keys outside the owner's prefix are refused."""
        with pytest.raises(ScopeViolationError):
            validate_storage_path(1, path)
