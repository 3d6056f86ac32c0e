"""Unit tests for the test-support tooling."""
