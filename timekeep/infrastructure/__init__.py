"""
Infrastructure layer for the timekeep time tracking service.

This layer contains the implementation details for external systems integration:
- Database (SQLAlchemy async with the Supabase Postgres database)
- Authentication (Supabase Auth)
- Language model (chat completions over httpx)
- Rate limiting, input validation and security monitoring

The infrastructure layer implements interfaces defined in the domain layer,
following the Dependency Inversion Principle of Clean Architecture.
"""
