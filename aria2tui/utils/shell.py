"""
Splitting of the free-form extra arguments string into argument tokens, and
quoting of arguments for display.
"""

import shlex


def split_shell_words(text: str) -> list[str]:
    """
    Splits `text` into words the way a POSIX shell would for simple input.

    Single and double quotes group characters (the quotes themselves are
    dropped). A backslash outside single quotes escapes the next character;
    inside single quotes it is literal. Unquoted whitespace separates words and
    empty words are dropped.
    """
    words: list[str] = []
    current = ""
    in_single = False
    in_double = False
    i = 0
    length = len(text)
    while i < length:
        ch = text[i]
        if ch == "'" and not in_double:
            in_single = not in_single
            i += 1
            continue
        if ch == '"' and not in_single:
            in_double = not in_double
            i += 1
            continue
        if not in_single and not in_double and ch.isspace():
            if current:
                words.append(current)
            current = ""
            while i < length and text[i].isspace():
                i += 1
            continue
        if ch == "\\" and not in_single and i + 1 < length:
            current += text[i + 1]
            i += 2
            continue
        current += ch
        i += 1
    if current:
        words.append(current)
    return words


def format_command(executable: str, args: list[str]) -> str:
    """Renders a command line that could be pasted into a shell."""
    return shlex.join([executable, *args])
