"""
formlayout models

Pydantic contracts:
    from formlayout.models import Instance, PageComponent
    from formlayout.models.contracts.instances import Instance  # Granular access
"""

from formlayout.models.contracts import *  # noqa: F401,F403
from formlayout.models.contracts import __all__  # noqa: F401
