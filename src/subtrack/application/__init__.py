"""
Application Layer - Use Cases and Orchestration

This layer contains:
- Services: authentication and data migration use cases
- Interfaces: repository and unit of work contracts
- Configuration: typed settings and their loader

Depends on the domain layer. Defines the interfaces the infrastructure layer
must implement.
"""
