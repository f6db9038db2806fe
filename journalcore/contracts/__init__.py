"""
Contracts Module

Immutable value types consumed by the aggregators. Parsing raw journal
records into these types is the host's job; the core only ever sees
strongly-typed values.

DESIGN PRINCIPLES:
==================
1. All contract types are immutable (frozen dataclasses)
2. Malformed values are rejected at construction with ContractViolation
3. Absent optional fields are None, never a zero/empty sentinel
4. All timestamps use UTC and are never mutated
"""
