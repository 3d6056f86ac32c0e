"""
Performance testing package (Locust-based).

Contains the Locust user class and payload helpers used to put
sustained, ramped load on a running Todo service.  For quick threaded
baselines inside pytest see ``tests/api/test_todo_performance.py``.

Key Concepts Demonstrated:
- Weighted task distribution to model realistic read/write ratios
- Client-chosen ids kept in a per-user pool
- ``catch_response`` checks so wrong statuses count as failures
"""
