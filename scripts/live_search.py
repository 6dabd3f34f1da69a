"""
Live check of the relay against the real PhantomBuster API.

Launches a small batch, then polls it until every run is done or the
attempts run out, printing progress along the way.

Requires: PHANTOMBUSTER_API_KEY and PHANTOMBUSTER_AGENT_ID configured.
Usage:
    python scripts/live_search.py "Acme Corp" ["Job Title" ...]
"""

import asyncio
import sys
import time
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from dotenv import load_dotenv

load_dotenv()

from phantom_relay.agents.launcher import LaunchPolicy, launch_batch  # noqa: E402
from phantom_relay.agents.poller import poll_batch  # noqa: E402
from phantom_relay.api.routes.search import build_results  # noqa: E402
from phantom_relay.config import DEFAULT_TITLES, settings  # noqa: E402
from phantom_relay.store.batches import BatchStore  # noqa: E402
from phantom_relay.tools.phantombuster import close_client, get_client  # noqa: E402

MAX_READS = 10


async def run(company: str, titles: list[str]) -> int:
    client = get_client()
    store = BatchStore()

    print(f"\n[1/3] Launching {len(titles)} searches for '{company}'...")
    t0 = time.time()
    batch = store.create_batch(company, titles)
    await launch_batch(client, batch, LaunchPolicy.from_settings())
    print(f"  Launched in {time.time() - t0:.1f}s (batch {batch.batch_id})")
    for title, r in batch.runs.items():
        print(f"  - {title}: {r.status} container={r.container_id} {r.error or ''}")

    print("\n[2/3] Polling...")
    for read in range(1, MAX_READS + 1):
        done = await poll_batch(client, batch, settings.max_wait_seconds, settings.poll_interval_seconds)
        print(f"  Read {read}: {len(batch.running())} still running")
        if done:
            break

    print("\n[3/3] Results")
    response = build_results(batch, settings.max_results)
    for title, entry in response.per_title.items():
        print(f"  - {title}: {entry.status}, {entry.count} profiles {entry.error or ''}")
    print(f"  Merged: {response.merged_count} unique profiles (all finished: {response.all_finished})")

    await close_client()
    return 0 if response.all_finished else 1


def main():
    print("=" * 60)
    print("PhantomBuster Relay - Live Search Check")
    print("=" * 60)

    if len(sys.argv) < 2:
        print(__doc__)
        return 2

    missing = settings.missing_credentials()
    if missing:
        print(f"Error: {', '.join(missing)} not set")
        return 1

    company = sys.argv[1]
    titles = sys.argv[2:] or list(DEFAULT_TITLES)
    return asyncio.run(run(company, titles))


if __name__ == "__main__":
    sys.exit(main())
