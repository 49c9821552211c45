from sensorlink.config.runspec import (
    LoggingSpec,
    ReceiverSpec,
    RunSpec,
    SenderSpec,
    SerialSpec,
    load_runspec,
    save_runspec,
)

__all__ = [
    "RunSpec",
    "SerialSpec",
    "SenderSpec",
    "ReceiverSpec",
    "LoggingSpec",
    "load_runspec",
    "save_runspec",
]
