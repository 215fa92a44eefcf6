"""workflow_gate/patterns.py

Branch-filter glob containment.

GitHub branch filters use two wildcards:

* ``*``  - any run of characters inside one ``/``-delimited segment
* ``**`` - any run of characters, ``/`` included (zero or more segments)

:func:`pattern_is_superset` answers "does every ref matched by pattern B also
match pattern A?". It is *not* a string match: wildcards in B are symbolic and
must be absorbed by a wildcard in A that is at least as permissive.
"""

from __future__ import annotations

import re
from typing import List, Tuple

STAR = "*"
GLOBSTAR = "**"
SEPARATOR = "/"

_WILDCARD_RE = re.compile(r"(\*\*?)")


def tokenize(pattern: str) -> Tuple[str, ...]:
    """Split a pattern into single literal characters and wildcard tokens.

    ``"main-**"`` -> ``("m", "a", "i", "n", "-", "**")``.
    A literal ``*`` cannot occur, so the tokens are unambiguous.
    """
    tokens: List[str] = []
    for part in _WILDCARD_RE.split(pattern):
        if part in (STAR, GLOBSTAR):
            tokens.append(part)
        else:
            tokens.extend(part)
    return tuple(tokens)


def pattern_is_superset(super_pattern: str, sub_pattern: str) -> bool:
    """Return True if ``super_pattern`` matches everything ``sub_pattern`` does.

    Examples::

        pattern_is_superset("*", "main-*")          -> True
        pattern_is_superset("main-*", "*")          -> False
        pattern_is_superset("*", "**")              -> False
        pattern_is_superset("a/**/c", "a/main-**/c") -> True

    ``covers[i][j]`` is True when ``sup[i:]`` covers ``sub[j:]``. The table is
    filled from the end so that long runs of ``**`` stay O(n*m).
    """
    sup = tokenize(super_pattern)
    sub = tokenize(sub_pattern)
    n, m = len(sup), len(sub)

    covers = [[False] * (m + 1) for _ in range(n + 1)]
    covers[n][m] = True

    for i in range(n - 1, -1, -1):
        tok = sup[i]
        row, nxt = covers[i], covers[i + 1]
        for j in range(m, -1, -1):
            if tok == GLOBSTAR:
                row[j] = nxt[j] or (j < m and row[j + 1])
            elif tok == STAR:
                # '*' never crosses a segment boundary, so it cannot absorb
                # a '/' or a '**' from the other side.
                row[j] = nxt[j] or (
                    j < m and sub[j] not in (SEPARATOR, GLOBSTAR) and row[j + 1]
                )
            else:
                row[j] = j < m and sub[j] == tok and nxt[j + 1]

    return covers[0][0]
