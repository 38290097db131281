"""Academic services behind the student and admin dashboards.

Each service works against a `DataAccess` handle bound to the signed-in
browsing context; row-level policies in the backend remain the authority on
who may read or write what.
"""
