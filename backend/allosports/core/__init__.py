"""
Core application modules.
Contains essential infrastructure components:
- bootstrap: Default admin creation and demo content seeding
- db: Tortoise ORM configuration and connection management
- errors: Error responses and exception handlers
- security: Password hashing, token issuing/verification and the auth cookie
- slug: Title -> URL slug conversion
"""
