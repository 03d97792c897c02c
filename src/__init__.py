"""Application Layer.

Adapters that connect the territory domain to storage and other outside
collaborators.
"""
