"""
Services Layer

Business logic that:
- Accepts domain inputs (IDs, sessions, payload models)
- Returns domain outputs (models, dataclasses, dicts)
- Does NOT depend on HTTP request/response objects
- Raises ServiceError subclasses carrying the HTTP status routes should use
"""
