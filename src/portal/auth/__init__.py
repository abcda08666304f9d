# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Authentication helpers.

This package provides:
- Credential lookups against the SQLite users table
- Encrypted session cookies (ChaCha20-Poly1305)
"""
