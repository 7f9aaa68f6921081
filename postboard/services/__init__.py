# Services package init
"""
Postboard Backend — Services Layer
====================================

What:  Business logic between the API surfaces (REST, GraphQL) and the database.
How:   Services take a session plus plain values, enforce the rules and raise
       domain errors from postboard.exceptions. Each module exposes a
       singleton instance (credential_service, user_service, ...).

Service Inventory:
    - CredentialService: password hashing (bcrypt) and bearer tokens (PyJWT)
    - UserService:       account creation, lookup and login
    - PostService:       paginated reads and owner-checked post writes
    - FileService:       image upload validation, storage and cleanup

The REST routes and GraphQL resolvers share these services, so both surfaces
enforce the same validation, ownership and error semantics.
"""
