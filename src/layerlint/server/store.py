"""
RunStore - persisted pipeline results, keyed by run id, in Redis.
"""

import json
import uuid
from datetime import datetime, timezone


class RunStore:
    """Stores serialized runs in Redis."""

    def __init__(self, client):
        self.client = client

    def _run_key(self, run_id: str) -> str:
        return f"layerlint:run:{run_id}"

    def _index_key(self) -> str:
        return "layerlint:runs"

    def save(self, result: dict) -> dict:
        """Store a PipelineResult dict, return it with id and created_at added."""
        run_id = uuid.uuid4().hex[:12]
        run = {
            "id": run_id,
            "created_at": datetime.now(timezone.utc).isoformat(),
            **result,
        }
        self.client.set(self._run_key(run_id), json.dumps(run))
        self.client.rpush(self._index_key(), run_id)
        return run

    def get(self, run_id: str) -> dict | None:
        data = self.client.get(self._run_key(run_id))
        if not data:
            return None
        return json.loads(data)

    def list_ids(self) -> list[str]:
        ids = self.client.lrange(self._index_key(), 0, -1)
        return [i.decode() if isinstance(i, bytes) else i for i in ids]

    def delete(self, run_id: str) -> bool:
        removed = self.client.delete(self._run_key(run_id))
        self.client.lrem(self._index_key(), 0, run_id)
        return bool(removed)
