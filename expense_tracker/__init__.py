"""
Expense Tracker - Source Package

A single-page expense list: add named items with a price, delete them,
and see the running total. Items live in a hosted document database;
the page only mirrors the snapshots the database pushes.
"""

__version__ = "1.0.0"
__author__ = "Expense Tracker Team"
