"""Teacher attendance package.

Organized by feature modules (attendance, requests, reports, ...) with a thin
Flask JSON controller layer over service and repository layers.
"""
