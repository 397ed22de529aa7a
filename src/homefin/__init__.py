# HomeFin - Personal & Family Finance Dashboard client
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
HomeFin
-------

A Python client for a personal / family finance tracking backend. The
backend owns persistence and business rules (wallet balances, CRUD
validation, deletion safeguards); HomeFin talks to its REST API and
provides everything a dashboard needs on the client side.

Main capabilities:
- an async API client with bearer tokens and a single token refresh on 401,
- an explicit session context and auth state (login, logout, profile),
- CRUD services for wallets, cash-flow items (categories), receipts,
  expenditures, transfers, budgets, auto-payments and projects,
- a category hierarchy builder that turns flat or pre-nested listings
  into a strict parent/children forest,
- budget execution, income/expense, category and wallet balance reports,
- client-side filtering, sorting and required-field validation,
- a command-line interface rendering lists, trees and reports as tables.

HomeFin separates transport (api), domain mapping (models, wire),
computation (hierarchy, budget, reports) and presentation (views, CLI),
so the computations can be used and tested without any network access.


Version: 0.2.0

Usage:
    python -m homefin.cli --help
"""

__all__ = ["api", "budget", "hierarchy", "models", "reports", "services"]

__version__ = "0.2.0"
