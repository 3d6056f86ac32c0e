"""Helpers shared by the test suites: live-service discovery and assertions."""
