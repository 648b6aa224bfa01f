import logging
from motor.motor_asyncio import AsyncIOMotorClient
from approval_flow.config import settings
from approval_flow.repositories.expense import ExpenseRepository
from approval_flow.repositories.user import UserRepository
from approval_flow.repositories.config import ConfigRepository
from approval_flow.models.expense import Expense
from approval_flow.models.user import User
from approval_flow.models.config import CompanyConfig

logger = logging.getLogger(__name__)

class Database:
    client: AsyncIOMotorClient = None

    # Repositories
    expenses: ExpenseRepository = None
    users: UserRepository = None
    config: ConfigRepository = None

    def connect(self):
        """Initialize database connection and repositories."""
        self.client = AsyncIOMotorClient(settings.MONGODB_URL)
        db = self.client[settings.DB_NAME]

        self.expenses = ExpenseRepository(db.expenses, Expense)
        self.users = UserRepository(db.users, User)
        self.config = ConfigRepository(db.company_config, CompanyConfig)

        logger.info(f"Connected to MongoDB ({settings.DB_NAME})")

    def close(self):
        """Close database connection."""
        if self.client:
            self.client.close()
            logger.info("Disconnected from MongoDB")

db = Database()

async def get_db() -> Database:
    """Dependency for FastAPI."""
    return db
