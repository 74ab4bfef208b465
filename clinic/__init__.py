"""
Clinic Scheduling System

A FastAPI-based backend where patients book appointments with doctors,
doctors record visit vitals, and admins manage accounts.
"""

__version__ = "1.0.0"
