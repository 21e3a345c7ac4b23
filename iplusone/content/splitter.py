"""
Sentence splitting for text without whitespace word boundaries.

Terminators inside quotes or parentheses do not end a sentence, so quoted
speech such as 「はい。そうです」と言った。 stays a single sentence.
"""

from __future__ import annotations

TERMINATORS = frozenset("。！？\n")
OPEN_BRACKETS = frozenset("「『（")
CLOSE_BRACKETS = frozenset("」』）")


def split_sentences(
    text: str,
    terminators: frozenset[str] = TERMINATORS,
    openers: frozenset[str] = OPEN_BRACKETS,
    closers: frozenset[str] = CLOSE_BRACKETS,
) -> list[str]:
    """
    Split ``text`` into stripped, non-empty sentences.

    Args:
        text: Raw text
        terminators: Characters ending a sentence at nesting depth 0
        openers: Characters that increase nesting depth
        closers: Characters that decrease nesting depth

    Returns:
        Sentences in order, each including its terminator. A trailing
        fragment without a terminator is not returned.
    """
    sentences: list[str] = []
    current: list[str] = []
    depth = 0

    for char in text:
        current.append(char)

        if char in openers:
            depth += 1
        elif char in closers:
            # Floor at 0: an unmatched closer must not disable splitting
            depth = max(0, depth - 1)
        elif depth == 0 and char in terminators:
            sentence = "".join(current).strip()
            if sentence:
                sentences.append(sentence)
            current.clear()

    return sentences
