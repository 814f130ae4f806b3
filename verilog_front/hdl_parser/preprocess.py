"""
Text pre-pass run before lexing: removes ``//`` line comments.
"""

import re


LINE_COMMENT = re.compile(r"//.*", re.MULTILINE)


def strip_comments(source: str, keep_offsets: bool = False) -> str:
    """Remove ``//`` comments up to (not including) the end of each line.

    With ``keep_offsets`` each comment is replaced by spaces of the same
    length, so offsets into the result are valid offsets into ``source``.
    """
    if keep_offsets:
        return LINE_COMMENT.sub(lambda m: " " * len(m.group()), source)
    return LINE_COMMENT.sub("", source)
