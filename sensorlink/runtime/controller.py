from __future__ import annotations

from sensorlink.runtime.receiver import ReceiverNode
from sensorlink.runtime.scheduler import Clock
from sensorlink.runtime.sender import SenderNode


def run_pair(
    sender: SenderNode,
    receiver: ReceiverNode,
    clock: Clock,
    step_ms: int = 5,
    max_steps: int = 100000,
) -> None:
    for _ in range(max_steps):
        sender.process_once()
        receiver.drain()
        if sender.finished():
            break
        clock.sleep_ms(step_ms)
    receiver.drain()
