from sqlalchemy.ext.asyncio import AsyncSession

from src.utils.logger import get_logger


class BaseService:
    """Service working against the session of a single request.

    Services never open or close sessions; the dependency that builds them
    owns the session for the lifetime of the request.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        # Named after the concrete service, e.g. "UserDirectoryService"
        self.logger = get_logger(type(self).__name__)
