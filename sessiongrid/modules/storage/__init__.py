"""
Storage Module - Black Box Interface

Purpose: Connect to the data grid that replicates sessions
Interface: StorageModule.connect(), StorageModule.disconnect()
Hidden: Discovery mode, node addressing, connection pooling

Can be replaced with any storage backend without affecting other modules.
"""

import logging
from typing import List, Optional, Tuple

import redis.asyncio as redis
from redis.asyncio.cluster import ClusterNode, RedisCluster
from redis.asyncio.sentinel import Sentinel

from ...config.provider import GridConfig

logger = logging.getLogger(__name__)


class StorageModule:
    """Black box data grid connection."""

    def __init__(self, grid_config: GridConfig):
        """Initialize storage with grid configuration."""
        self.config = grid_config
        self._client = None
        self._sentinel: Optional[Sentinel] = None

    def node_addresses(self) -> List[Tuple[str, int]]:
        """Addresses probed for grid members: host plus each port of the range."""
        return [
            (self.config.host, self.config.port + offset)
            for offset in range(self.config.port_count)
        ]

    async def connect(self):
        """Get grid connection for the configured discovery mode."""
        if self._client:
            return self._client

        discovery = self.config.discovery
        if discovery == "standalone":
            url = f"redis://{self.config.host}:{self.config.port}/{self.config.db}"
            self._client = redis.from_url(
                url,
                password=self.config.password,  # Passed separately to avoid URL encoding issues
                encoding="utf-8",
                decode_responses=True,
            )
        elif discovery == "sentinel":
            self._sentinel = Sentinel(
                self.node_addresses(),
                sentinel_kwargs={"password": self.config.password},
                password=self.config.password,
                db=self.config.db,
            )
            self._client = self._sentinel.master_for(
                self.config.cluster_name, decode_responses=True
            )
        elif discovery == "cluster":
            self._client = RedisCluster(
                startup_nodes=[ClusterNode(host, port) for host, port in self.node_addresses()],
                password=self.config.password,
                decode_responses=True,
            )
        else:
            raise ValueError(f"Unknown grid discovery mode: {discovery}")

        logger.info(
            f"Connected to data grid '{self.config.cluster_name}' "
            f"({discovery}, {self.config.host}:{self.config.port}, ports={self.config.port_count})"
        )
        return self._client

    async def disconnect(self):
        """Close grid connection."""
        if self._client:
            await self._client.aclose()
            self._client = None
        if self._sentinel:
            for sentinel_client in self._sentinel.sentinels:
                await sentinel_client.aclose()
            self._sentinel = None


__all__ = ["StorageModule"]
