"""Word splitting for command lines.

Whitespace separates words. A word that starts with a double quote runs to
the next double quote and may contain whitespace; the quotes are dropped.
There is no escape character. An unterminated quote is accepted and the
partial word runs to the end of the line.
"""

QUOTE = '"'


def split(line: str) -> list[str]:
    """Split a line into argument words.

    Example:
        >>> split('foo "bar baz" qux')
        ['foo', 'bar baz', 'qux']
    """
    words: list[str] = []
    pos = 0
    length = len(line)

    while pos < length:
        if line[pos].isspace():
            pos += 1
            continue

        if line[pos] == QUOTE:
            end = line.find(QUOTE, pos + 1)
            if end == -1:
                words.append(line[pos + 1 :])
                break
            words.append(line[pos + 1 : end])
            pos = end + 1
            continue

        start = pos
        while pos < length and not line[pos].isspace():
            pos += 1
        words.append(line[start:pos])

    return words
