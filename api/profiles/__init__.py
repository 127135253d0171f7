"""
Profile endpoints: one descriptive profile per user.
"""
