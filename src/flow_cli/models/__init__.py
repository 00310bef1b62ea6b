"""Flow CLI domain models.

Pydantic configuration models live here; the interactive session controller
and its value types live in the ``focus`` subpackage.
"""

from .config_models import AppConfig

__all__ = ["AppConfig"]
