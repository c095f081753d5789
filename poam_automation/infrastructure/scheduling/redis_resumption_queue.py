"""Redis resumption queue for delayed workflow actions.

Keys (under settings.redis_key_prefix):
- {prefix}:resumptions:due (ZSET): scheduled resumption ids, score = fire_at timestamp
- {prefix}:resumptions:claimed (ZSET): claimed resumption ids, score = claim timestamp
- {prefix}:resumption:{id} (STRING): JSON of the resumption
- {prefix}:resumptions:definition:{org}:{definition_id} (SET): ids per definition
- {prefix}:resumptions:entity:{org}:{entity_type}:{entity_id} (SET): ids per entity

Claiming atomically moves an id from the due set to the claimed set: only
the caller whose move succeeded owns the resumption. Expired claims are
moved back to the due set by reclaim_stale.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime

import redis.asyncio as redis

from poam_automation.application.dtos.workflow import WorkflowResumption
from poam_automation.domain.exceptions import PersistenceError

logger = logging.getLogger(__name__)

# KEYS[1]=source zset, KEYS[2]=target zset, ARGV[1]=member, ARGV[2]=target score
_MOVE_SCRIPT = """
if redis.call('ZREM', KEYS[1], ARGV[1]) == 1 then
    redis.call('ZADD', KEYS[2], ARGV[2], ARGV[1])
    return 1
end
return 0
"""


def _decode(value: bytes | str) -> str:
    return value.decode() if isinstance(value, bytes) else value


class RedisResumptionQueue:
    """Resumption queue on Redis sorted sets. Implements IResumptionQueue."""

    def __init__(self, redis_client: redis.Redis, key_prefix: str = "poam:workflow") -> None:
        self.redis = redis_client
        self._prefix = key_prefix

    @property
    def due_key(self) -> str:
        return f"{self._prefix}:resumptions:due"

    @property
    def claimed_key(self) -> str:
        return f"{self._prefix}:resumptions:claimed"

    def _payload_key(self, resumption_id: str) -> str:
        return f"{self._prefix}:resumption:{resumption_id}"

    def _definition_key(self, organization_id: str, definition_id: str) -> str:
        return f"{self._prefix}:resumptions:definition:{organization_id}:{definition_id}"

    def _entity_key(self, organization_id: str, entity_type: str, entity_id: str) -> str:
        return f"{self._prefix}:resumptions:entity:{organization_id}:{entity_type}:{entity_id}"

    def _index_keys(self, resumption: WorkflowResumption) -> tuple[str, str]:
        return (
            self._definition_key(resumption.organization_id, resumption.workflow_definition_id),
            self._entity_key(
                resumption.organization_id, resumption.entity_type, resumption.entity_id
            ),
        )

    async def _move(self, source: str, target: str, resumption_id: str, score: float) -> bool:
        moved = await self.redis.eval(_MOVE_SCRIPT, 2, source, target, resumption_id, score)
        return int(moved) == 1

    async def schedule(self, resumption: WorkflowResumption) -> None:
        definition_key, entity_key = self._index_keys(resumption)
        try:
            async with self.redis.pipeline(transaction=True) as pipe:
                await pipe.set(
                    self._payload_key(resumption.id), json.dumps(resumption.to_dict())
                )
                await pipe.sadd(definition_key, resumption.id)
                await pipe.sadd(entity_key, resumption.id)
                await pipe.zadd(self.due_key, {resumption.id: resumption.fire_at.timestamp()})
                await pipe.execute()
        except redis.RedisError as e:
            raise PersistenceError("schedule_resumption", str(e)) from e

    async def _load(self, resumption_id: str) -> WorkflowResumption | None:
        raw = await self.redis.get(self._payload_key(resumption_id))
        if raw is None:
            return None
        return WorkflowResumption.from_dict(json.loads(_decode(raw)))

    async def _forget(self, resumption: WorkflowResumption) -> None:
        definition_key, entity_key = self._index_keys(resumption)
        async with self.redis.pipeline(transaction=True) as pipe:
            await pipe.delete(self._payload_key(resumption.id))
            await pipe.srem(definition_key, resumption.id)
            await pipe.srem(entity_key, resumption.id)
            await pipe.zrem(self.claimed_key, resumption.id)
            await pipe.execute()

    async def claim_due(self, now: datetime, limit: int) -> list[WorkflowResumption]:
        try:
            ids = await self.redis.zrangebyscore(
                self.due_key, "-inf", now.timestamp(), start=0, num=limit
            )
            claimed: list[WorkflowResumption] = []
            for raw_id in ids:
                resumption_id = _decode(raw_id)
                if not await self._move(
                    self.due_key, self.claimed_key, resumption_id, now.timestamp()
                ):
                    continue
                resumption = await self._load(resumption_id)
                if resumption is None:
                    logger.warning("Resumption %s has no payload; dropped", resumption_id)
                    await self.redis.zrem(self.claimed_key, resumption_id)
                    continue
                claimed.append(resumption)
            return claimed
        except redis.RedisError as e:
            raise PersistenceError("claim_resumptions", str(e)) from e

    async def release(self, resumption_id: str) -> None:
        try:
            resumption = await self._load(resumption_id)
            if resumption is not None:
                await self._forget(resumption)
            else:
                await self.redis.zrem(self.claimed_key, resumption_id)
        except redis.RedisError as e:
            raise PersistenceError("release_resumption", str(e)) from e

    async def reclaim_stale(self, claimed_before: datetime) -> list[WorkflowResumption]:
        try:
            # Exclusive upper bound: claims made exactly at claimed_before are still live.
            ids = await self.redis.zrangebyscore(
                self.claimed_key, "-inf", f"({claimed_before.timestamp()}"
            )
            reclaimed: list[WorkflowResumption] = []
            for raw_id in ids:
                resumption_id = _decode(raw_id)
                resumption = await self._load(resumption_id)
                if resumption is None:
                    await self.redis.zrem(self.claimed_key, resumption_id)
                    continue
                if await self._move(
                    self.claimed_key,
                    self.due_key,
                    resumption_id,
                    resumption.fire_at.timestamp(),
                ):
                    reclaimed.append(resumption)
            return reclaimed
        except redis.RedisError as e:
            raise PersistenceError("reclaim_resumptions", str(e)) from e

    async def _cancel_members(self, index_key: str, operation: str) -> list[WorkflowResumption]:
        try:
            members = await self.redis.smembers(index_key)
            removed: list[WorkflowResumption] = []
            for raw_id in sorted(_decode(m) for m in members):
                # Claimed ids are no longer in the due set; the worker owns them.
                if await self.redis.zrem(self.due_key, raw_id) != 1:
                    continue
                resumption = await self._load(raw_id)
                if resumption is None:
                    await self.redis.srem(index_key, raw_id)
                    continue
                await self._forget(resumption)
                removed.append(resumption)
            return removed
        except redis.RedisError as e:
            raise PersistenceError(operation, str(e)) from e

    async def cancel_for_definition(
        self, organization_id: str, definition_id: str
    ) -> list[WorkflowResumption]:
        return await self._cancel_members(
            self._definition_key(organization_id, definition_id),
            "cancel_resumptions_for_definition",
        )

    async def cancel_for_entity(
        self, organization_id: str, entity_type: str, entity_id: str
    ) -> list[WorkflowResumption]:
        return await self._cancel_members(
            self._entity_key(organization_id, entity_type, entity_id),
            "cancel_resumptions_for_entity",
        )
