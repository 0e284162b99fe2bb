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
Backslash escaping for CFTI protocol fields.

Four characters are escaped: backslash, tab, newline and carriage return.
A backslash followed by any other character is passed through untouched,
backslash included, so an unknown sequence never loses data. A trailing
lone backslash is likewise kept as-is.
"""

_ESCAPE_TABLE = {
    ord("\\"): "\\\\",
    ord("\t"): "\\t",
    ord("\n"): "\\n",
    ord("\r"): "\\r",
}

_UNESCAPE_MAP = {
    "\\": "\\",
    "t": "\t",
    "n": "\n",
    "r": "\r",
}


def escape(text: str) -> str:
    """Convert application text into protocol-safe text."""
    return text.translate(_ESCAPE_TABLE)


def unescape(protocol_text: str) -> str:
    """
    Convert protocol text back into application text.

    :param protocol_text: Text as received on the wire.
    :type protocol_text: str
    :return: Text with the four known escape sequences resolved.
    :rtype: str
    """
    if "\\" not in protocol_text:
        return protocol_text

    out = []
    i = 0
    length = len(protocol_text)
    while i < length:
        char = protocol_text[i]
        if char == "\\" and i + 1 < length:
            replacement = _UNESCAPE_MAP.get(protocol_text[i + 1])
            if replacement is not None:
                out.append(replacement)
                i += 2
                continue
        out.append(char)
        i += 1

    return "".join(out)
