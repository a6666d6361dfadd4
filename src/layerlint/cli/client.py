"""
HTTP client for the layerlint API.
"""

import os

import httpx

BASE_URL = os.environ.get("LAYERLINT_API", "http://localhost:8000/api")


# === Layers ===

def list_layers() -> list[dict]:
    r = httpx.get(f"{BASE_URL}/layers")
    r.raise_for_status()
    return r.json()["layers"]


# === Runs ===

def create_run(
    text: str,
    filename: str | None = None,
    layers: list[int] | None = None,
    dry_run: bool = False,
    timeout: float | None = None,
    use_cache: bool = True,
) -> dict:
    payload = {
        "text": text,
        "filename": filename,
        "layers": layers,
        "dry_run": dry_run,
        "timeout": timeout,
        "use_cache": use_cache,
    }
    r = httpx.post(f"{BASE_URL}/runs", json=payload, timeout=120)
    r.raise_for_status()
    return r.json()


def get_run(run_id: str) -> dict:
    r = httpx.get(f"{BASE_URL}/runs/{run_id}")
    r.raise_for_status()
    return r.json()


# === Analysis ===

def analyze(text: str, filename: str | None = None) -> dict:
    r = httpx.post(f"{BASE_URL}/analyze", json={"text": text, "filename": filename}, timeout=60)
    r.raise_for_status()
    return r.json()
