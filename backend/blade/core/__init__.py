# blade/core/__init__.py
"""
Core application modules.
Contains the authorization layer and its infrastructure:
- access: Read-access resolution for the content API (session or token)
- bootstrap: Seed data and default content types for new spaces
- db: Database configuration and connection management
- errors: Domain errors mapped to HTTP responses
- policy: Space read/edit/owner checks
- security: Session token and identity assertion signing
- session: External identity -> internal user resolution
- spaces: Default-space resolution and identifier normalization
- store: Injected credential store over one database connection
- tokens: Access token generation and validation
"""
