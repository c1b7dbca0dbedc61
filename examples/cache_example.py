"""
Cache — read-through queries over the optimistic cache.

Key concepts:
- OptimisticCache = one store per client session, keyed by collection
- Query = declarative builder (per-collection freshness)
- Snapshot = one writer per key, restored verbatim on rollback

Level 1: cartsync.cache
"""

import asyncio

from cartsync import cache as C
from examples._infra import banner, run

store = C.OptimisticCache()


# ═══════════════════════════════════════════════════════════════════════════════
# 1. FETCH FUNCTION — any coroutine returning the collection
# ═══════════════════════════════════════════════════════════════════════════════


async def fetch_wallet() -> dict[str, float]:
    print("  [ORIGIN] GET /api/wallet")
    await asyncio.sleep(0.01)
    return {"deposit": 40.0, "credit": 30.0}


# ═══════════════════════════════════════════════════════════════════════════════
# 2. QUERY = BUILDER — key, fetch, freshness
# ═══════════════════════════════════════════════════════════════════════════════

wallet = C.query("wallet", fetch_wallet).fresh_for(seconds=30).build(store)


async def main() -> None:
    banner("Cache: Read-Through")

    print("\n1. First read (miss → fetch):")
    r1 = await wallet.get()
    print(f"   hit={r1.hit} → {r1.value}")

    print("\n2. Second read (fresh hit):")
    r2 = await wallet.get()
    print(f"   hit={r2.hit} age={r2.age}")

    banner("Cache: Snapshot / Rollback")

    snap = store.snapshot("wallet", owner="demo#1")
    store.set_optimistic("wallet", lambda w: {**w, "deposit": w["deposit"] - 25.0}, snap)
    print(f"   optimistic → {store.get('wallet')} pending={store.pending('wallet')}")
    store.rollback("wallet", snap)
    print(f"   rolled back → {store.get('wallet')} pending={store.pending('wallet')}")

    print("\n3. Invalidate, refetch:")
    C.invalidate(store, "wallet")
    r3 = await wallet.get()
    print(f"   hit={r3.hit} → {r3.value}")

    print("\nDone!")


if __name__ == "__main__":
    run(main)
