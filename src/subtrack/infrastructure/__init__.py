"""
Infrastructure Layer - Adapters for persistence, security and observability

Concrete implementations of the application interfaces: SQLAlchemy
repositories and unit of work, bcrypt password hashing, RS256 JWT tokens,
login rate limiting and structured logging. ``container`` wires them together.
"""
