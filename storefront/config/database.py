from motor.motor_asyncio import AsyncIOMotorClient
from beanie import init_beanie
from storefront.models.productModel import Product
from storefront.models.userModel import User
from storefront.models.orderModel import Order
from .settings import settings

DOCUMENT_MODELS = [User, Product, Order]


# Call this from within your event loop to get beanie setup.
async def startDB(client=None):
    # Create Motor client unless one is handed in (tests pass a mock client)
    if client is None:
        client = AsyncIOMotorClient(settings.MONGO_URI, uuidRepresentation="standard")
    database = client[settings.MONGO_DATABASE]

    await init_beanie(database=database, document_models=DOCUMENT_MODELS)
    return client
