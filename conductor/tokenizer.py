r"""
Conductor tokenizer: split one raw line into string tokens.

Grammar
- Unquoted whitespace separates tokens; runs of whitespace collapse.
- "..." groups characters (whitespace included) into the current token; the
  quotes themselves are dropped and do not nest.
- A backslash escapes the next character: \\ \" \n \r \t \b. Anything else
  after a backslash is malformed input.

Examples
    >>> tokenize('git commit "fix: bug in \\"parser\\"" --message=test')
    ['git', 'commit', 'fix: bug in "parser"', '--message=test']
    >>> tokenize("   ")
    []
"""
from .faults import TokenizationError

ESCAPES = {
    "\\": "\\",
    '"': '"',
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "b": "\b",
}


def tokenize(text, /):
    """
    Tokenize a raw command line.

    Single left-to-right pass; `quoted` and `escaped` are the only state
    besides the token being built.

    Raises
    - TokenizationError: "unknown escape", "unterminated quotes" or
      "trailing escape", with the 0-based position of the offending character.
    """
    if not isinstance(text, str):
        raise TypeError("tokenize() argument must be a string")

    tokens = []
    buffer = []
    quoted = escaped = False
    opening = 0

    for position, char in enumerate(text):
        if escaped:
            try:
                buffer.append(ESCAPES[char])
            except KeyError:
                raise TokenizationError("unknown escape", position) from None
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == '"':
            quoted = not quoted
            opening = position
        elif char.isspace() and not quoted:
            if buffer:
                tokens.append("".join(buffer))
                buffer.clear()
        else:
            buffer.append(char)

    if quoted:
        raise TokenizationError("unterminated quotes", opening)
    if escaped:
        raise TokenizationError("trailing escape", len(text) - 1)

    if buffer:
        tokens.append("".join(buffer))

    return tokens


__all__ = (
    "tokenize",
)
