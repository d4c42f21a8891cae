"""Error taxonomy for the scheduler.

Callers translate these into user-facing responses; the scheduler itself
never retries and never swallows a StoreError.
"""


class SchedulerError(Exception):
    pass


class ValidationError(SchedulerError):
    """Malformed or missing user id, item id, track or quality signal"""


class NotFoundError(SchedulerError):
    """The operation requires a schedule record that does not exist"""

    def __init__(self, user_id, item_id, track):
        self.user_id = user_id
        self.item_id = item_id
        self.track = track
        super().__init__(f"No {track} schedule record for user {user_id}, item {item_id}")


class AlreadyTrackedError(SchedulerError):
    """Explicit seeding of a (user, item) pair that already has a record"""

    def __init__(self, user_id, item_id, track):
        self.user_id = user_id
        self.item_id = item_id
        self.track = track
        super().__init__(f"Item {item_id} is already in the {track} track for user {user_id}")


class ItemNotFoundError(SchedulerError):
    """Referenced vocabulary item does not exist in the catalog"""

    def __init__(self, item_id):
        self.item_id = item_id
        super().__init__(f"Vocabulary item {item_id} not found")


class StoreError(SchedulerError):
    """Opaque failure from the persistence layer"""


class ConcurrentUpdateError(StoreError):
    """A conditional update lost against another write to the same record"""
