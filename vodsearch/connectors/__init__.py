"""Source clients for upstream video sites."""

from .base import Connector, ResultRecord, SourceDescriptor, SourceError
from .maccms import MacCMSConnector

CONNECTOR_TYPES: dict[str, type[Connector]] = {
    MacCMSConnector.name: MacCMSConnector,
}

_instances: dict[str, Connector] = {}


def get_connector(descriptor: SourceDescriptor) -> Connector:
    """Return the shared client for a descriptor's kind."""
    connector = _instances.get(descriptor.kind)
    if connector is None:
        connector_type = CONNECTOR_TYPES.get(descriptor.kind)
        if connector_type is None:
            raise SourceError(descriptor.key, f"unsupported source kind {descriptor.kind!r}")
        connector = _instances[descriptor.kind] = connector_type()
    return connector


__all__ = [
    "Connector",
    "ResultRecord",
    "SourceDescriptor",
    "SourceError",
    "MacCMSConnector",
    "CONNECTOR_TYPES",
    "get_connector",
]
