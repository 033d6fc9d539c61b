"""
Test helpers package for formlayout

Provides reusable factories for layouts and instances (factories.py).
"""
