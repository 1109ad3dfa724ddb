from __future__ import annotations

# GitLab API requests
GITLAB_HTTP_TIMEOUT_SECONDS = 30.0

# Deployment polling
POLL_INTERVAL_SECONDS = 1.0
PIPELINE_LOOKUP_ATTEMPTS = 60

# git-flow release start/finish (may run hooks)
GITFLOW_TIMEOUT_SECONDS = 5 * 60.0

# git flow version / config checks
GIT_FLOW_CHECK_TIMEOUT_SECONDS = 30.0
