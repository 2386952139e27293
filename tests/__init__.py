"""Test suite for the pizza order form engine.

This package contains tests for:
- Schema definition and loading
- Validation engine (per-field and whole-record passes)
- Form state store (edits, toppings, eligibility, validation modes)
- Submit state machine and workflow
- Event system and configuration
- End-to-end form scenarios
"""
