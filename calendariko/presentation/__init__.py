"""
Presentation Layer - Interfaces exposees aux operateurs.
"""
