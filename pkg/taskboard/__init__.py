# Task board: CRUD API, HTTP client, and client-side board state
#
# Components:
#   schema.py  - Data model (Task, TaskStatus, TaskUpdate, Envelope) and errors
#   store.py   - Store protocol with SQLite and in-memory backends
#   api.py     - Repository API: validation + envelope/status mapping
#   client.py  - Async HTTP client that unwraps envelopes
#   board.py   - Board controller (optimistic move with compensation)
#   view.py    - Text rendering of columns and intent dispatch
#   config.py  - YAML/env configuration
