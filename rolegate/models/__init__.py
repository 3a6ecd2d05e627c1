"""
Model package.

SQLModel.metadata is populated only when the table models are imported;
init_db() imports this module before create_all(), so every `table=True`
model must be imported here.
"""

from rolegate.roles.models import AdminUser  # noqa: F401
from rolegate.user.models import UserProfile  # noqa: F401
