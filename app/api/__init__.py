"""
API Blueprints Package

All HTTP route handlers for the application, organized by domain.
Each module defines a Flask Blueprint registered in app/__init__.py.

BLUEPRINT REFERENCE:
====================

Accounts:
- auth_routes.py : Registration, login/logout, current user

Marketplace:
- contractors.py : Contractor directory, search, reviews
- projects.py    : Owner-scoped project CRUD
- quotes.py      : Quote fan-out requests and status updates
- reviews.py     : Contractor reviews (recomputes ratings)

AI Tools:
- estimates.py   : Renovation / construction cost estimates
- design.py      : Design inspiration generation

Real-time:
- chat.py        : Socket.IO chat assistant handlers (registered by app_init)
"""

# All blueprints are imported and registered in app/__init__.py
# This file serves as documentation only

__all__ = []
