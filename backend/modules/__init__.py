"""
Feature modules for the Courses backend.

Each module is self-contained with its own:
- models.py: Pydantic models for data transfer
- service.py: Business logic implementation
- routes.py: FastAPI route handlers
- exceptions.py: Module-specific exceptions
- interfaces.py: Protocol definitions, where other modules depend on it

Every data access goes through modules.access with the acting principal
passed explicitly.
"""
