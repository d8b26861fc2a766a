"""
AusflugFinder backend package
"""
