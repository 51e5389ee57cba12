"""ASGI config for ledgerboard.

This exposes the ASGI callable as a module-level variable named `application`.
The dashboard generation endpoint streams, so ASGI is the preferred entrypoint.
"""

from __future__ import annotations

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "ledgerboard.settings")

application = get_asgi_application()
