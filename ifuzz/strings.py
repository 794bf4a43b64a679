"""String operations used by the parsers and the code generator."""
import json

NAME_CHARS = frozenset(
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_-"
)


def split_lines(text: str) -> list[str]:
    """Split a string into lines. Inverse of "\\n".join."""
    return text.split("\n")


def match_prefix(text: str, prefix: str) -> tuple[str, bool]:
    """Check for a prefix and, if present, return what follows it with
    leading whitespace trimmed. Without the prefix, the input is
    returned unchanged."""
    if text.startswith(prefix):
        return text[len(prefix):].lstrip(), True
    return text, False


def take_while_in(text: str, allowed) -> tuple[str, str]:
    """Split off the longest prefix made only of allowed characters."""
    for i, ch in enumerate(text):
        if ch not in allowed:
            return text[:i], text[i:]
    return text, ""


def parse_name(text: str) -> tuple[str, str]:
    """Parse a name: [a-zA-Z0-9_-]*. The rest is left-trimmed.

    An empty name means there was none.
    """
    name, rest = take_while_in(text, NAME_CHARS)
    return name, rest.lstrip()


def letters_only(text: str) -> str:
    """Drop every character that is not a letter."""
    return "".join(ch for ch in text if ch.isalpha())


def indent_lines(text: str, indent: str) -> str:
    """Indent every non-blank line."""
    return "\n".join(indent + line if line.strip() else "" for line in split_lines(text))


def go_string(text: str) -> str:
    """Render text as a double-quoted Go string literal.

    JSON string escapes are a subset of Go's interpreted string escapes.
    """
    return json.dumps(text, ensure_ascii=False)
