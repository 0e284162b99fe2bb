# Copyright (c) 2025 Efstratios Goudelis
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.

"""
Tests for cfti/codec.py escaping and unescaping.
"""

import pytest

from cfti.codec import escape, unescape


class TestEscape:
    """Test cases for escape function."""

    def test_escape_plain_text_unchanged(self):
        """Test that text without special characters is returned as-is."""
        assert escape("hello world 123") == "hello world 123"

    def test_escape_each_special_character(self):
        """Test that each of the four special characters is escaped."""
        assert escape("\\") == "\\\\"
        assert escape("\t") == "\\t"
        assert escape("\n") == "\\n"
        assert escape("\r") == "\\r"

    def test_escape_mixed_text(self):
        """Test escaping a message with several special characters."""
        assert escape("a\tb\r\nc\\d") == "a\\tb\\r\\nc\\\\d"

    def test_escape_output_has_no_line_breaks(self):
        """Test that escaped text can always travel on a single line."""
        escaped = escape("line one\nline two\r\n")

        assert "\n" not in escaped
        assert "\r" not in escaped

    def test_escape_empty_string(self):
        """Test escaping an empty string."""
        assert escape("") == ""


class TestUnescape:
    """Test cases for unescape function."""

    def test_unescape_known_sequences(self):
        """Test that the four known sequences are resolved."""
        assert unescape("\\\\") == "\\"
        assert unescape("\\t") == "\t"
        assert unescape("\\n") == "\n"
        assert unescape("\\r") == "\r"

    def test_unescape_unknown_sequence_passes_through(self):
        """Test that an unknown sequence keeps both the backslash and the character."""
        assert unescape("a\\qb") == "a\\qb"

    def test_unescape_trailing_backslash_kept(self):
        """Test that a lone trailing backslash is not dropped."""
        assert unescape("abc\\") == "abc\\"

    def test_unescape_escaped_backslash_before_letter(self):
        """Test that an escaped backslash followed by 'n' is not a newline."""
        assert unescape("\\\\n") == "\\n"

    def test_unescape_plain_text_unchanged(self):
        """Test that text without backslashes is returned as-is."""
        assert unescape("nothing to see") == "nothing to see"


class TestRoundTrip:
    """Test that escape and unescape are inverses."""

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "plain",
            "tab\there",
            "multi\nline\r\ntext",
            "back\\slash",
            "\\n literally",
            "\\\\\t\n\r",
            "ends with backslash\\",
        ],
    )
    def test_round_trip(self, text):
        """Test unescape(escape(text)) == text."""
        assert unescape(escape(text)) == text
