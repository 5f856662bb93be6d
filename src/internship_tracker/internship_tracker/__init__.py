"""Internship hours tracker package.

Organized by feature modules (time_logs, sessions, edit_requests,
completion) with a thin Flask controller layer over service and
repository layers.
"""
