# food_delivery_api/app/db/initial_data.py
import asyncio
import logging
from datetime import time

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

from app.db.base import Base
from app.db.session import get_async_engine, dispose_engine
# Every model must be imported so Base.metadata knows about it
from app.models.user import User  # noqa F401
from app.models.product import Category, Supplier, Product


def demo_catalog() -> list:
    pizza = Category(name="Pizza", description="Wood oven pizzas")
    drinks = Category(name="Drinks", description="Cold drinks")
    trattoria = Supplier(
        name="Trattoria Roma", type="restaurant", address="12 Main St",
        open_time=time(11, 0), close_time=time(23, 0),
    )
    corner = Supplier(
        name="Corner Shop", type="shop", address="3 Side St",
        open_time=time(7, 0), close_time=time(21, 0),
    )
    return [
        pizza, drinks, trattoria, corner,
        Product(name="Margherita", category=pizza, supplier=trattoria, price=900,
                description="Tomato, mozzarella, basil"),
        Product(name="Diavola", category=pizza, supplier=trattoria, price=1100,
                description="Spicy salami"),
        Product(name="Lemonade", category=drinks, supplier=corner, price=250,
                description="Fresh lemonade"),
    ]


async def init_db(engine: AsyncEngine, seed: bool = True) -> None:
    logger.info("Recreating the database (DROP ALL / CREATE ALL)...")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Tables created.")

    if seed:
        session_factory = async_sessionmaker(bind=engine, expire_on_commit=False)
        async with session_factory() as db:
            db.add_all(demo_catalog())
            await db.commit()
        logger.info("Demo catalog inserted.")


async def main() -> None:
    try:
        await init_db(get_async_engine())
    finally:
        await dispose_engine()

if __name__ == "__main__":
    asyncio.run(main())
