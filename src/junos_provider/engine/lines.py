"""Building blocks for Junos configuration lines.

Rendering produces full ``set <path> <args>`` statements. Reading issues a
scoped ``show configuration <path> | display set relative`` so each output
line is ``set <args>`` relative to the object, which the parsers walk with
the helpers below.
"""
from typing import Callable, Iterator, Optional, TypeVar

from .errors import LineParseError

CMD_SHOW_CONFIG = "show configuration "
PIPE_DISPLAY_SET = " | display set"
PIPE_DISPLAY_SET_RELATIVE = " | display set relative"

SET_LS = "set "
DELETE_LS = "delete "

XML_START_TAG_CONFIG_OUT = "<configuration-output>"
XML_END_TAG_CONFIG_OUT = "</configuration-output>"

ID_SEPARATOR = "_-_"

T = TypeVar("T")


def relative_lines(output: str) -> Iterator[str]:
    """Yield each configuration statement of a show output without ``set ``.

    Lines holding the opening envelope tag are skipped, the closing tag ends
    the walk, blank lines are dropped.
    """
    for line in output.splitlines():
        if XML_START_TAG_CONFIG_OUT in line:
            continue
        if XML_END_TAG_CONFIG_OUT in line:
            break
        item = line.strip()
        if not item:
            continue
        yield item.removeprefix(SET_LS)


def parse_int(value: str) -> int:
    """Convert a token from device output to an integer.

    Raises:
        LineParseError: With the offending token and the conversion error
    """
    try:
        return int(value)
    except ValueError as e:
        raise LineParseError(
            f"failed to convert value from '{value}' to integer: {e}"
        ) from e


def quote(value: str) -> str:
    return f'"{value}"'


def unquote(value: str) -> str:
    return value.strip('"')


def first_field(item: str) -> tuple[str, str]:
    """Split ``item`` on its first space: ``(first word, rest)``.

    A quoted first word is kept whole even when it contains spaces.
    """
    if item.startswith('"'):
        end = item.find('"', 1)
        if end != -1:
            return item[:end + 1], item[end + 1:].lstrip(" ")
    head, _, rest = item.partition(" ")
    return head, rest


def take_named(blocks: list[T], name: str, key: Callable[[T], str]) -> Optional[T]:
    """Remove and return the block called ``name`` from an ordered list.

    Callers update the returned block (or a fresh one when ``None``) and
    append it again, so a named block spread over several output lines is
    built up incrementally.
    """
    for index, block in enumerate(blocks):
        if key(block) == name:
            return blocks.pop(index)
    return None


def join_id(*parts: str) -> str:
    return ID_SEPARATOR.join(parts)


def split_id(resource_id: str) -> list[str]:
    return resource_id.split(ID_SEPARATOR)
