"""Campus event attendance tracker.

Organized by feature modules (events, sessions, attendance, reports, users,
students), each with a thin Flask controller over service and repository layers.
"""
