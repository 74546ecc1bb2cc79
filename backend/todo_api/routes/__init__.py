"""
Todo API - Routes Package
=========================

Route Inventory:
    - users.py:   POST /api/sync-user
    - lists.py:   POST/GET /api/lists, PUT/DELETE /api/lists/{id},
                  POST /api/lists/{id}/tasks
    - tasks.py:   PUT/DELETE /api/tasks/{id}
    - health.py:  GET /health

Routes stay thin: resolve the caller through dependencies, call a service,
shape the response. Ownership rules live in the services.
"""
