"""Shell-like tokenizer for pasted curl commands.

Handles single/double quotes and backslash escapes. It never raises:
an unterminated quote simply keeps the rest of the line in the current
token. Pipes, subshells and variable expansion are not interpreted.
"""

WHITESPACE = frozenset(" \t\r\n")
QUOTES = frozenset("'\"")


def tokenize(line: str) -> list[str]:
    """Split a command line into tokens."""
    tokens: list[str] = []
    current: list[str] = []
    quote = ""  # active quote character, "" when outside quotes
    escaped = False

    for char in line:
        if escaped:
            escaped = False
            if char != "\n" or quote:
                current.append(char)
            continue

        if quote:
            if char == quote:
                quote = ""
            elif char == "\\" and quote == '"':
                escaped = True
            else:
                current.append(char)
            continue

        if char == "\\":
            escaped = True
        elif char in QUOTES and not current:
            # quotes only open at the start of a token
            quote = char
        elif char in WHITESPACE:
            if current:
                tokens.append("".join(current))
            current = []
        else:
            current.append(char)

    if current:
        tokens.append("".join(current))
    return tokens
