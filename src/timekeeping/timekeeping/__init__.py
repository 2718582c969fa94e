"""Timekeeping package.

Attendance tracking and the regularization (correction request) workflow,
organized by feature modules with a thin Flask controller layer on top of
service/repository layers.
"""
