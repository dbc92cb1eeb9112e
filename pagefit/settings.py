"""Library-wide defaults for pagefit.

Values here are read at import time and never mutated.  Per-call tuning goes
through the options models in :mod:`pagefit.items`.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Pruning filter
# ---------------------------------------------------------------------------
PRUNING_THRESHOLD = 0.48

# Dynamic mode: page threshold = mean block score x this factor
DYNAMIC_THRESHOLD_FACTOR = 0.9

PRUNING_MIN_WORDS = 0

# ---------------------------------------------------------------------------
# BM25 filter
# ---------------------------------------------------------------------------
BM25_THRESHOLD = 1.0
BM25_K1 = 1.2
BM25_B = 0.75

# Blocks kept when nothing clears the threshold (only positive scores count)
BM25_FALLBACK_TOP_N = 3

# Shortest token kept by the tokenizer
BM25_MIN_TOKEN_LENGTH = 2

# Page-derived query: first paragraph must exceed this many characters and
# is truncated to the second limit
QUERY_PARAGRAPH_MIN_CHARS = 50
QUERY_PARAGRAPH_MAX_CHARS = 200

# ---------------------------------------------------------------------------
# Markdown output
# ---------------------------------------------------------------------------
MARKDOWN_BULLETS = "-"
MARKDOWN_LIST_INDENT = "  "
REFERENCES_HEADING = "## References"

# ---------------------------------------------------------------------------
# Logging (pagefit never installs handlers; host apps may reuse the format)
# ---------------------------------------------------------------------------
LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"
