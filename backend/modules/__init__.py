"""
Feature modules for the Baaba backend.

Each module is self-contained with its own:
- interfaces.py: Protocol definitions for the module's collaborators
- models.py: Pydantic models for domain data
- service.py: Business logic implementation
- exceptions.py: Module-specific exceptions

Modules communicate through interfaces, not concrete implementations.
"""
