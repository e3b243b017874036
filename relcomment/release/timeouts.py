from __future__ import annotations

# gh reads and mutations (search, graphql, comment, close, edit)
GH_TIMEOUT_SECONDS = 60.0

# Local git operations (tag -l, log)
GIT_TIMEOUT_SECONDS = 30.0
