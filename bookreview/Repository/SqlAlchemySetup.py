from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool
from bookreview.Helper.Settings import CFG

class SqlAlchemySetup:
    #region SQLAlchemy setup
    Base = declarative_base()
    async_engine: AsyncEngine | None = None
    async_session_maker: async_sessionmaker | None = None

    @classmethod
    def configure(cls, database_url: str = CFG.database_url):
        if database_url.startswith("sqlite"):
            # aiosqlite connections must not outlive the event loop that opened them
            engine = create_async_engine(database_url, poolclass=NullPool)
        else:
            engine = create_async_engine(database_url, connect_args={"command_timeout": CFG.command_timeout})
        cls.async_engine = engine
        cls.async_session_maker = async_sessionmaker(autoflush=False, bind=engine, expire_on_commit=False)
        return engine

    @classmethod
    def session(cls):
        if cls.async_session_maker is None:
            cls.configure()
        return cls.async_session_maker()

    @classmethod
    async def create_async_tables(cls):
        # table classes register themselves on Base when imported
        from bookreview.BusinessObjects import dbModels  # noqa: F401

        if cls.async_engine is None:
            cls.configure()
        async with cls.async_engine.begin() as conn:
            await conn.run_sync(cls.Base.metadata.create_all)

    @classmethod
    async def dispose(cls):
        if cls.async_engine is not None:
            await cls.async_engine.dispose()
    #endregion SQLAlchemy setup
