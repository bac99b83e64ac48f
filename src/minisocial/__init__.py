# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""minisocial: a small server-rendered social-profile app (FastAPI + MongoDB)."""

__version__ = "0.1.0"
