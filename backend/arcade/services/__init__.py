"""Arcade domain services: accounts, wagers and rewards, admin, leaderboard.

This package holds the ledger rules. HTTP routes and socket handlers call
into it with an explicit caller ``Account``, keeping transport concerns
separated from balance and permission logic.
"""
