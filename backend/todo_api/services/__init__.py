"""
Todo API - Services Layer
=========================

What:  Business logic between routes (HTTP) and the database (persistence).
How:   Stateless service singletons receive the request's AsyncSession and
       the caller's User on every call and flush, never commit.

Service Inventory:
    - IdentityProvider (abstract): bearer token → CallerIdentity
    - JWTIdentityService: local JWT verification with python-jose
    - UserService: identity sync (upsert) and caller resolution
    - ListService: list CRUD with ownership checks
    - TaskService: task CRUD with ownership inherited from the list
"""
