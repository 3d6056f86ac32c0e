"""
Black-box tests for a running Todo service.

The suite needs a live service: set ``TODO_BASE_URL`` and ``TODO_WS_URL``,
run one on the default local ports, or provide ``docker-compose.test.yml``.
Without any of these the suite is skipped.
"""
