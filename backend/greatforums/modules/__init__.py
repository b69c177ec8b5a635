"""
Feature modules.
"""
