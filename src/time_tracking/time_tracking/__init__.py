"""Time Tracking package.

Organized by feature modules (employees, time_entries) with a thin Flask
controller layer on top of service/repository layers.
"""
