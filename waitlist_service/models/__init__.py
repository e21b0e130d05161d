# Import every model here so Alembic autogenerate can discover them
# and so Base.metadata.create_all() works in tests.
# users must come first: waitlist_entries.processed_by FK-references it.

from waitlist_service.models.user import User                    # noqa: F401
from waitlist_service.models.waitlist import WaitlistEntry       # noqa: F401
