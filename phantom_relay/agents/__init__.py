"""
Agents driving PhantomBuster jobs.

- launcher: Starts one job per title with staggering and backoff
- poller: Checks job status and records terminal states
"""

from phantom_relay.agents.launcher import LaunchPolicy, launch_batch
from phantom_relay.agents.poller import poll_batch, wait_for_batch

__all__ = ["LaunchPolicy", "launch_batch", "poll_batch", "wait_for_batch"]
