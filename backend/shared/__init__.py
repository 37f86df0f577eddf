"""
Shared module for common utilities of the POS API.

STRUCTURE:
- shared.infrastructure: Database and messaging
  - db.py: SQLAlchemy sessions, transaction()
  - events/: Redis pub/sub for staff notifications
  - correlation.py: Request correlation IDs

- shared.config: Configuration
  - settings.py: Environment config (Pydantic)
  - logging.py: Structured logging
  - constants.py: Notification actions, order types, move messages

- shared.utils: Utilities
  - exceptions.py: HTTP exceptions with auto-logging
  - order_schemas.py: Typed views of order, ticket and ledger JSON
  - schemas.py: Request/response schemas of the move operations

IMPORT EXAMPLES:
    from shared.infrastructure.db import get_db, transaction
    from shared.config.settings import settings
    from shared.config.constants import MoveMessages, NotificationAction
    from shared.utils.exceptions import NotFoundError, ValidationError
"""
