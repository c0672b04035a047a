"""
SchoolFlow session authentication and role-based route protection.
"""
