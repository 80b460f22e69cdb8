"""
Destination Kolkata listing directory service.

Public catalog API for hotels, restaurants, attractions, events and
sports venues in Kolkata.
"""
