"""
Locust scenario user classes.

- :mod:`.todo_crud` - full create / read / update / delete cycle

The reusable CRUD primitives live in :mod:`.base`.
"""
