"""
Deterministic synthetic repository dataset.

Used whenever no store is configured or the store fails. The shape of the
data (ids, owners, names, counters, relative ages, tags) depends only on the
record index; the wall clock is read once per generation to anchor the
relative timestamps and to stamp ``saved_at``.
"""

import logging
import math
import threading
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple

from repostats.db import schemas

logger = logging.getLogger(__name__)

DATASET_SIZE = 150

OWNERS: Tuple[str, ...] = (
    "scaffold-eth",
    "awesome-dev",
    "crypto-builder",
    "web3-developer",
    "ethereum-dev",
    "blockchain-studio",
    "defi-labs",
    "crypto-innovator",
    "web3-wizard",
    "ethereum-builder",
    "dapp-creator",
    "smart-contract-dev",
    "nft-artist",
    "defi-protocol",
    "dao-builder",
)

PROJECT_NAMES: Tuple[str, ...] = (
    "scaffold-eth-2",
    "defi-protocol",
    "nft-marketplace",
    "token-factory",
    "dapp-template",
    "dao-governance",
    "lending-protocol",
    "staking-platform",
    "multi-sig-wallet",
    "contract-library",
    "vault-manager",
    "swap-protocol",
    "bridge-contract",
    "oracle-service",
    "identity-system",
    "payment-gateway",
    "auction-house",
    "governance-tool",
    "treasury-manager",
    "voting-system",
)

SOURCE_SINGLE: Tuple[str, ...] = ("github",)
SOURCE_PAIR: Tuple[str, ...] = ("github", "npm")

_CREATED_WINDOW = timedelta(days=365)
_UPDATED_WINDOW = timedelta(days=30)
_LAST_SEEN_WINDOW = timedelta(days=7)


def seeded_random(seed: int) -> float:
    """Map an integer seed to a reproducible value in [0, 1)."""
    x = math.sin(seed) * 10000
    return x - math.floor(x)


def _pick(options: Tuple[str, ...], seed: int) -> str:
    return options[math.floor(seeded_random(seed) * len(options))]


def _build_record(index: int, record_id: int, now: datetime) -> schemas.RepositoryRecord:
    seed = index * 7 + 13
    owner = _pick(OWNERS, seed)
    base_name = _pick(PROJECT_NAMES, seed + 1)
    name = f"{base_name}-{index}"
    full_name = f"{owner}/{name}"
    stars = math.floor(seeded_random(seed + 2) * 10000) + 10
    forks = math.floor(stars * 0.3)
    homepage = f"https://{base_name}.app" if seeded_random(seed + 6) > 0.5 else None
    source = SOURCE_SINGLE if seeded_random(seed + 7) > 0.5 else SOURCE_PAIR
    return schemas.RepositoryRecord(
        id=record_id,
        full_name=full_name,
        name=name,
        owner=owner,
        url=f"https://github.com/{full_name}",
        homepage=homepage,
        stars=stars,
        forks=forks,
        created_at=now - _CREATED_WINDOW * seeded_random(seed + 3),
        updated_at=now - _UPDATED_WINDOW * seeded_random(seed + 4),
        last_seen=now - _LAST_SEEN_WINDOW * seeded_random(seed + 5),
        saved_at=now,
        source=list(source),
    )


def generate_repositories(now: Optional[datetime] = None) -> List[schemas.RepositoryRecord]:
    """Generate the full synthetic dataset anchored at ``now`` (UTC wall clock by default)."""
    anchor = now or datetime.now(timezone.utc)
    return [_build_record(index, index + 1, anchor) for index in range(DATASET_SIZE)]


_DATASET: Optional[Tuple[schemas.RepositoryRecord, ...]] = None
_DATASET_LOCK = threading.Lock()


def get_synthetic_repositories() -> Tuple[schemas.RepositoryRecord, ...]:
    """Return the process-wide synthetic dataset, generating it on first use."""
    global _DATASET
    if _DATASET is None:
        with _DATASET_LOCK:
            if _DATASET is None:
                _DATASET = tuple(generate_repositories())
                logger.info("synthetic_dataset_generated: records=%d", len(_DATASET))
    return _DATASET
