from sqlalchemy.exc import SQLAlchemyError


class CommitMixin:
    """Commit helpers shared by repos that stage writes on ``self.db``."""

    async def db_commit(self):
        try:
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise
