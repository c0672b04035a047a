"""
Pipeline functions.

Stateless orchestration over the services.
"""
