from sensorlink.runtime.controller import run_pair
from sensorlink.runtime.logging import JsonlLogger
from sensorlink.runtime.receiver import ReceiverNode
from sensorlink.runtime.scheduler import FakeClock, IntervalTimer, RealClock
from sensorlink.runtime.sender import SenderNode

__all__ = [
    "JsonlLogger",
    "ReceiverNode",
    "SenderNode",
    "RealClock",
    "FakeClock",
    "IntervalTimer",
    "run_pair",
]
