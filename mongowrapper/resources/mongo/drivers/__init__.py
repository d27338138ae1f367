"""Driver capability implementations."""

from typing import Any

from mongowrapper.resources.mongo.drivers.base import BaseDriver
from mongowrapper.resources.mongo.drivers.mock_driver import MockDriver
from mongowrapper.resources.mongo.drivers.motor_driver import MotorDriver

DRIVER_REGISTRY: dict[str, type[BaseDriver]] = {
    "motor": MotorDriver,
    "mock": MockDriver,
}


def get_driver(driver_name: str, **kwargs: Any) -> BaseDriver | None:
    """Return an instance of the driver for the given name, or None."""
    cls = DRIVER_REGISTRY.get(driver_name)
    if cls is None:
        return None
    return cls(**kwargs)
