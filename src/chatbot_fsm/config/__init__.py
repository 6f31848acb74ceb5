"""Machine document system for loading, validating, and building machines.

This package provides:
- **loader**: Decode YAML machine documents into declaration lists
- **schema**: Pydantic schemas for documents and build options
- **builder**: Build immutable machine definitions from documents
- **validator**: Validate documents and collect error messages
"""
