# Outbound ports (external system interfaces)
from rebalancer.application.ports.outbound.exchange_port import ExchangePort
from rebalancer.application.ports.outbound.lock_port import LockPort, LockAcquisitionError, pair_lock_name

__all__ = [
    "ExchangePort",
    "LockPort",
    "LockAcquisitionError",
    "pair_lock_name",
]
