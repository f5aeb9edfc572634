"""
Domain Layer - Pure Business Logic

This layer contains:
- Entities: Users, sessions, subscriptions and budgets
- Services: Password policy and legacy subscription validation
- Exceptions: The error taxonomy every caller observes

No external dependencies allowed in this layer.
"""
