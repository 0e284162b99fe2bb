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

"""CFTI protocol engine: codec, state store, line interpreter and command encoder."""

from .bridge import CftiBridge
from .interpreter import LineInterpreter
from .outgoing import CommandSender
from .state import StateStore

__all__ = [
    "CftiBridge",
    "CommandSender",
    "LineInterpreter",
    "StateStore",
]
