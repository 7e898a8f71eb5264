"""
Shared module for common utilities across the florist core and its CLI.

STRUCTURE:
- shared.config: Configuration
  - settings.py: Environment config (pydantic-settings)
  - logging.py: Structured logging
  - constants.py: Categories, default markups, limits

- shared.infrastructure: Database
  - db.py: Engine/session factories, safe_commit()

- shared.utils: Utilities
  - exceptions.py: Exceptions with auto-logging
  - validators.py: Input validation

IMPORT EXAMPLES:
    from shared.config.settings import settings
    from shared.config.constants import PRODUCT_CATEGORIES, DEFAULT_MARKUPS
    from shared.infrastructure.db import create_store_engine, safe_commit
    from shared.utils.exceptions import NotFoundError, StoreError
    from shared.utils.validators import validate_url
"""
