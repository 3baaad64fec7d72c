"""Attendance Engine package.

Feature modules (attendance, sessions, locations, biometrics) expose a thin
Flask controller layer over service and repository layers. The services are
plain objects wired with injected collaborators so they can be driven without
Flask or a database.
"""
