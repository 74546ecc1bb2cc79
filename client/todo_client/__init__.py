"""
Todo Client
===========

Terminal client for the Todo API. It keeps an in-memory mirror of the
signed-in user's lists and patches it from each server response.

Layers:
    ┌──────────────┐
    │  cli.py      │  argparse entry point + interactive shell
    ├──────────────┤
    │  render.py   │  text page for a derived view
    │  view.py     │  search / incomplete-only / sort / expansion
    ├──────────────┤
    │  session.py  │  one user action = one API call + one store action
    │  store.py    │  single-writer state container (reducers)
    ├──────────────┤
    │  api.py      │  httpx client for /api/*
    └──────────────┘
"""

__version__ = "1.0.0"
