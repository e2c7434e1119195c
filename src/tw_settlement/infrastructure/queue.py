"""SettlementQueue — Redis sorted set of transaction ids awaiting settlement.

Key:    settlement:due
Member: transaction id (string)
Score:  unix time at which the transaction becomes due

The schedule lives outside the API process so in-flight settlements survive a
restart. Claiming is ZREM-based: when several workers read the same due
member, only the one whose ZREM removes it settles it.
"""

from datetime import datetime

import redis.asyncio as aioredis

from src.tw_common.datetime_utils import to_unix, utc_now

DUE_KEY = "settlement:due"


class SettlementQueue:
    def __init__(self, redis: aioredis.Redis) -> None:
        self._redis = redis

    async def schedule(
        self,
        transaction_id: int,
        delay_seconds: float,
        now: datetime | None = None,
    ) -> bool:
        """Enqueue once. Returns False if the id was already scheduled (NX)."""
        due_at = to_unix(now or utc_now()) + delay_seconds
        added = await self._redis.zadd(DUE_KEY, {str(transaction_id): due_at}, nx=True)
        return bool(added)

    async def claim_due(
        self, now: datetime | None = None, batch_size: int = 50
    ) -> list[int]:
        members = await self._redis.zrangebyscore(
            DUE_KEY, "-inf", to_unix(now or utc_now()), start=0, num=batch_size
        )
        claimed: list[int] = []
        for member in members:
            if await self._redis.zrem(DUE_KEY, member) == 1:
                claimed.append(int(member))
        return claimed

    async def is_scheduled(self, transaction_id: int) -> bool:
        return await self._redis.zscore(DUE_KEY, str(transaction_id)) is not None

    async def size(self) -> int:
        return int(await self._redis.zcard(DUE_KEY))
