"""Mission Manager - Services"""
