# apclient

Back end for a client node in a simulated, source-routed drone network.

A client is attached to one or two drones. It finds out about the network by
flooding it. It builds a graph from the flood responses it gets back, picks a
random route from that graph for each message, and splits outgoing messages
into 128-byte fragments. It puts incoming fragments back together, keeps track
of acknowledgements, and reports what it does to a simulation controller.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `apclient.packet` holds the wire types: `Packet`, `SourceRoutingHeader`,
  `Fragment`, `Ack`, `Nack` with `NackType`, `FloodRequest`, `FloodResponse`
  and `NodeType`. It also holds `Message`, which is serialised as JSON by
  `stringify` and read back by `from_string`. The controller events are
  `PacketSent`, `StartingMessageTransmission`, `MessageReceived`,
  `MessageSentSuccessfully`, `KnownNetworkGraph` and `EventNetworkNode`. The
  controller commands are `AddSender` and `RemoveSender`. Its helpers are
  `disassemble`, `reassemble`, `message_to_packets`, `packets_to_message` and
  `get_new_flood_request_packet`.
- `apclient.ids` holds the hashable identifiers `MessageID`, `PacketID` and
  `SessionKey`.
- `apclient.graph` holds `NetGraph`, the topology learned from flood
  responses, and `Vertex`. A route is recorded until it reaches the first
  client or server after its start. Edges always go both ways.
  `compute_routes` lists every simple path between two vertices, and
  `get_random_route` picks one of those paths.
- `apclient.database` holds `Database`, an in-memory store of messages and
  fragment packets. It records which messages have been read or reported to
  the controller, and which packets have been acknowledged. It raises
  `DatabaseError` when a store or update cannot be done.
- `apclient.commands` holds the front-end commands `GetEdgeNodesFromFlood`,
  `InitializeFlood`, `GetUnreadMessagesFromServer`, `GetClientsFromServer` and
  `SendMessage`. It also holds the replies `ListOfDiscoveredEdgeNodes`,
  `UnreadMessagesFromServer` and `ClientsFromServer`.
- `apclient.router` holds `Router`. It handles packets, controller commands
  and front-end commands, and raises `RouterError` on failure.
- `apclient.backend` holds `Service`, the entry point, together with
  `validate_options` and `ConfigurationError`.

## Usage

Channels are ordinary `queue.Queue` objects.

- Inbound channels are read with `get_nowait`. These are the packets, the
  controller commands and the front-end commands.
- Outbound channels are written with `put`. These are the neighbours, the
  controller events and the replies.

```python
import queue
import threading

from apclient.backend import Service
from apclient.commands import GetEdgeNodesFromFlood, InitializeFlood

sc_events = queue.Queue()
sc_commands = queue.Queue()
drone = queue.Queue()
inbound_packets = queue.Queue()
api_commands = queue.Queue()
flood_replies = queue.Queue()
unread_replies = queue.Queue()

service = Service(
    1,                  # this client's node id
    sc_events,
    sc_commands,
    {11: drone},        # neighbouring drones, one or two of them
    inbound_packets,
    api_commands,
    flood_replies,
    unread_replies,
)

stop = threading.Event()
threading.Thread(target=service.run, args=(stop,), daemon=True).start()

api_commands.put(InitializeFlood())        # a FloodRequest goes to the drone
api_commands.put(GetEdgeNodesFromFlood())  # replies once something is known
stop.set()
```

`Service` raises `ConfigurationError` in two cases:

- its own id is among the neighbours;
- it has no neighbours, or more than two.

`service.run(stop)` serves the channels until `stop` is set. Called without an
event, it runs forever. An error while handling a packet or command is logged,
and the loop carries on.

## What it does not do

- There is no command-line program and no network transport. All traffic goes
  through the queues you pass in.
- Storage is in memory only, and nothing is kept once the process ends.
- `GetClientsFromServer` is accepted but does nothing, so no
  `ClientsFromServer` reply is ever sent.
- A `Nack` of type `DESTINATION_IS_DRONE` is ignored. No resend takes place
  and the front end is not told.