"""Rate limiting adapters.

A small abstraction layer so the process-local cooldown can later move to a
shared store without changing the service layer.
"""
