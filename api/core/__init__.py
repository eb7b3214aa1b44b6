"""
Building blocks every endpoint package leans on.

- `config`: environment settings, read lazily
- `db` / `store`: the asyncpg pool and the query objects compiled against it
- `errors`: the four outward error categories and their HTTP handlers
- `logging`: process-wide log format

Collection names, columns and response shapes stay in the feature packages.
"""
