from sensorlink.transport.base import ITransport, TransportError
from sensorlink.transport.mock import MockLink, MockTransport, create_mock_link
from sensorlink.transport.replay import ReplayTransport
from sensorlink.transport.serial_port import SerialTransport

__all__ = [
    "ITransport",
    "TransportError",
    "MockLink",
    "MockTransport",
    "create_mock_link",
    "ReplayTransport",
    "SerialTransport",
]
