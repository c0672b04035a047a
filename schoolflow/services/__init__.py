"""
SchoolFlow Services.

Service classes organized by feature.
"""
