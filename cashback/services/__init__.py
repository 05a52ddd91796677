"""
High-level use cases for the cashback tracker.

Each service module orchestrates repositories to implement business rules
(best card for a category, expiring categories, storage switching).

Routers and scripts should call these services instead of touching a
storage backend directly.
"""
