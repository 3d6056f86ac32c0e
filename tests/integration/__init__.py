"""
Integration tests for the Todo test tooling.

These tests run the API client, the race harness and the load runner
against the in-process Flask stub in ``tests/stub_server``, so they
need no external service.  They demonstrate:
- CRUD round trips through the real HTTP stack
- Input validation and error status checks
- Race detection against an atomic and a deliberately racy backend
"""
