"""
Test suite for the Todo service tooling and the service itself.

This package contains:
- unit/: tooling tests with no network
- integration/: client and harness tests against the in-process stub
- contracts/: OpenAPI contract checks
- api/: black-box tests against a live Todo service
- performance/: Locust scenarios for sustained load
"""
