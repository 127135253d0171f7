"""
Bearer-token protection for internal endpoints.
"""
