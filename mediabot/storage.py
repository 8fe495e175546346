"""MongoDB persistence for extracted media records.

One document is written to the ``videos`` collection per successful
extraction. Records are never updated or deleted by the bot.
"""
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pymongo import AsyncMongoClient

from mediabot.extraction import MediaInfo

logger = logging.getLogger(__name__)

COLLECTION_NAME = "videos"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class VideoRecord:
    """A persisted extraction result.

    Named after the existing ``videos`` collection; it stores audio and
    image results as well.
    """

    platform: str
    video_url: str
    video_thumbnail: str
    original_url: str
    date_added: datetime = field(default_factory=_utcnow)

    @classmethod
    def from_media_info(cls, media_info: MediaInfo, original_url: str) -> "VideoRecord":
        return cls(
            platform=media_info.platform,
            video_url=media_info.media_url,
            video_thumbnail=media_info.thumbnail,
            original_url=original_url,
        )

    def to_document(self) -> Dict[str, Any]:
        return asdict(self)


class VideoRepository:
    """Writes VideoRecord documents to a MongoDB collection."""

    def __init__(self, collection, client: Optional[AsyncMongoClient] = None):
        self._collection = collection
        self._client = client

    async def save(self, record: VideoRecord, correlation_id: Optional[str] = None) -> Any:
        """Insert one record.

        Returns:
            The inserted document id
        """
        cid = correlation_id or "no-cid"
        result = await self._collection.insert_one(record.to_document())
        logger.info(f"[{cid}] Saved {record.platform} media to database")
        return result.inserted_id

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            logger.info("MongoDB connection closed")


def connect_repository(config) -> VideoRepository:
    """Create a repository from MONGO_URI.

    The database named in the URI is used when present, MONGO_DB_NAME
    otherwise. The client connects lazily on first use.
    """
    client = AsyncMongoClient(config.MONGO_URI)
    database = client.get_default_database(default=config.MONGO_DB_NAME)
    logger.info(f"MongoDB client created for database '{database.name}'")
    return VideoRepository(database[COLLECTION_NAME], client=client)
