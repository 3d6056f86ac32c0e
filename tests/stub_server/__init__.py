"""
In-process stand-in for the Todo service.

A small Flask app implementing the REST contract of the real service so
the client, race harness and load runner can be exercised over real HTTP
without a deployed backend.  It has no push channel.
"""

from tests.stub_server.app import TodoStore, create_app, serve

__all__ = ["TodoStore", "create_app", "serve"]
