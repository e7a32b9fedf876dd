# mdkanban: a kanban board kept in a markdown checklist file
#
# Components:
#   schema.py      - Data model (Task, Board, PayloadError)
#   transcoder.py  - Markdown <-> Board parse/serialize, task ids
#   store.py       - Pure board mutators and the BoardStore snapshot owner
#   source.py      - Atomic read/write of the markdown file
#   watcher.py     - Reload on hand edits (watchdog)
#   config.py      - YAML/env configuration
#   client.py      - HTTP client for the server API
