"""Endpoint paths, header names and the status codes the suite asserts on."""

# API endpoints
TODOS_ENDPOINT = "/todos"
TODO_BY_ID_ENDPOINT = "/todos/{id}"

# Headers
CONTENT_TYPE = "Content-Type"
AUTHORIZATION = "Authorization"
APPLICATION_JSON = "application/json"

# Query parameters
LIMIT = "limit"
OFFSET = "offset"

# HTTP status codes
STATUS_OK = 200
STATUS_CREATED = 201
STATUS_NO_CONTENT = 204
STATUS_BAD_REQUEST = 400
STATUS_UNAUTHORIZED = 401
STATUS_NOT_FOUND = 404

# Push channel
NEW_TODO_EVENT = "new_todo"
