"""Signing, encoding, encryption and validation primitives plus the API services."""
