import logging
from datetime import timezone
from decimal import Decimal

from bson.codec_options import CodecOptions, TypeCodec, TypeRegistry
from bson.decimal128 import Decimal128
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import PyMongoError

from order_transactions.config import Settings
from order_transactions.errors import SessionUnavailable

logger = logging.getLogger(__name__)

ACCOUNTS = "accounts"
PURCHASES = "purchases"


class DecimalCodec(TypeCodec):
    python_type = Decimal
    bson_type = Decimal128

    def transform_python(self, value):
        return Decimal128(value)

    def transform_bson(self, value):
        return value.to_decimal()


CODEC_OPTIONS = CodecOptions(
    type_registry=TypeRegistry([DecimalCodec()]),
    tz_aware=True,
    tzinfo=timezone.utc,
)


class Store:
    """The Motor client plus the two collections the workflow touches."""

    def __init__(self, client, database_name: str) -> None:
        self.client = client
        self.database = client[database_name]
        self.accounts = self.database.get_collection(ACCOUNTS, codec_options=CODEC_OPTIONS)
        self.purchases = self.database.get_collection(PURCHASES, codec_options=CODEC_OPTIONS)

    @classmethod
    def connect(cls, settings: Settings) -> "Store":
        return cls(AsyncIOMotorClient(settings.mongo_uri), settings.database)

    async def ping(self) -> None:
        try:
            await self.client.admin.command("ping")
        except PyMongoError as exc:
            raise SessionUnavailable(f"Cannot reach the replica set: {exc}") from exc

    async def reset(self) -> None:
        for coll in (self.accounts, self.purchases):
            result = await coll.delete_many({})
            logger.info("Removed %d documents from %s", result.deleted_count, coll.name)

    def close(self) -> None:
        self.client.close()
