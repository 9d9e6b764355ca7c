"""Live planet events.

Creation events travel through a Redis pub/sub channel:
- ChangeNotifier publishes a PlanetMessage after a successful create
- PlanetEventListener receives it in every process and hands it to the
  Broadcaster, which fans it out to the connected SSE clients
- DedicatedSubscription is the registry-free alternative: one subscription
  per client

Delivery is at-most-once with no replay and no acknowledgment.
"""

from solar.events.broadcaster import BroadcastClient, Broadcaster, ClientState
from solar.events.dedicated import DedicatedSubscription
from solar.events.frames import CONNECTED_FRAME, PING_FRAME, planet_created_frame
from solar.events.listener import PlanetEventListener
from solar.events.notifier import NEW_PLANETS_CHANNEL, ChangeNotifier

__all__ = [
    # Frames
    "CONNECTED_FRAME",
    "PING_FRAME",
    "planet_created_frame",
    # Publishing
    "ChangeNotifier",
    "NEW_PLANETS_CHANNEL",
    # Fan-out
    "Broadcaster",
    "BroadcastClient",
    "ClientState",
    "PlanetEventListener",
    "DedicatedSubscription",
]
